"""Behaviors: decorators wrapping the builder graph with cross-cutting logic.

A behavior is a function from builder to builder. ``apply_behaviors`` wraps
a graph with a list of behaviors in order, so the first behavior sits
closest to the graph and the last one is outermost.

Stock behaviors:
- TracingBehavior: writes an indented entry/exit trace of every resolution
- RecursionGuardBehavior: stops a request from re-entering itself
- ExceptionToNoSpecimenBehavior: turns CannotConstructError into NoSpecimen

Per-call state (trace depth, the in-flight request path) lives in the
context's ``ResolutionScope``, never on the behavior itself.
"""

from __future__ import annotations

import logging
import reprlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TextIO, Union

from .builder import SpecimenBuilder
from .context import SpecimenContext
from .errors import CannotConstructError, ConfigurationError, CycleDetectedError
from .requests import Request
from .specimen import NoSpecimen, OmitSpecimen

logger = logging.getLogger(__name__)

TraceSink = Union[TextIO, Callable[[str], Any]]


class Behavior(ABC):
    """Builder -> builder transformation."""

    @abstractmethod
    def transform(self, builder: SpecimenBuilder) -> SpecimenBuilder: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BehaviorBuilder(SpecimenBuilder):
    """Base for builders produced by a behavior; ``builder`` is the wrapped one."""

    def __init__(self, builder: SpecimenBuilder):
        self.builder = builder

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.builder!r})"


def apply_behaviors(builder: SpecimenBuilder, behaviors: Iterable[Behavior]) -> SpecimenBuilder:
    """Wrap ``builder`` with each behavior in turn; the last one ends up outermost."""
    for behavior in behaviors:
        builder = behavior.transform(builder)
        if not isinstance(builder, SpecimenBuilder):
            raise ConfigurationError(
                f"{behavior!r}.transform() returned {builder!r}, not a builder"
            )
    return builder


# =============================================================================
# Tracing
# =============================================================================


_specimen_repr = reprlib.Repr()
_specimen_repr.maxstring = 80
_specimen_repr.maxother = 80


def format_specimen(specimen: Any) -> str:
    if specimen is NoSpecimen or specimen is OmitSpecimen:
        return repr(specimen)
    return _specimen_repr.repr(specimen)


class TraceWriter:
    """Writes indented trace lines to a stream or a ``callable(str)``."""

    def __init__(self, sink: TraceSink, indent: str = "  "):
        if hasattr(sink, "write"):
            self._emit: Callable[[str], Any] = lambda line: sink.write(line + "\n")
        elif callable(sink):
            self._emit = sink
        else:
            raise ConfigurationError(f"Trace sink must be writable or callable, got {sink!r}")
        self.indent = indent

    def write(self, depth: int, text: str) -> None:
        self._emit(f"{self.indent * depth}{text}")

    def requested(self, depth: int, request: Request) -> None:
        self.write(depth, f"Requested: {request}")

    def created(self, depth: int, specimen: Any) -> None:
        self.write(depth, f"Created: {format_specimen(specimen)}")

    def failed(self, depth: int, exc: BaseException) -> None:
        self.write(depth, f"Failed: {type(exc).__name__}")


@dataclass
class _TraceState:
    depth: int = 0


class TracingBuilder(BehaviorBuilder):
    def __init__(self, builder: SpecimenBuilder, writer: TraceWriter):
        super().__init__(builder)
        self.writer = writer

    def create(self, request: Request, context: SpecimenContext) -> Any:
        state = context.scope.state_for(self, _TraceState)
        depth = state.depth
        self.writer.requested(depth, request)
        logger.debug("%sRequested: %s", "  " * depth, request)
        state.depth += 1
        try:
            specimen = self.builder.create(request, context)
        except Exception as exc:
            self.writer.failed(depth, exc)
            raise
        finally:
            state.depth = depth
        self.writer.created(depth, specimen)
        logger.debug("%sCreated: %s", "  " * depth, format_specimen(specimen))
        return specimen


class TracingBehavior(Behavior):
    """Records every request entering the graph and what came back out.

    Indentation depth equals the nesting depth of ``context.resolve`` calls.
    The result and the control flow are left untouched.
    """

    def __init__(self, sink: TraceSink, indent: str = "  "):
        self.writer = TraceWriter(sink, indent=indent)

    def transform(self, builder: SpecimenBuilder) -> SpecimenBuilder:
        return TracingBuilder(builder, self.writer)


# =============================================================================
# Recursion guard
# =============================================================================


class RecursionHandler(ABC):
    """Decides what a re-entered request resolves to."""

    @abstractmethod
    def handle(self, request: Request, path: list[Request]) -> Any: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ThrowingRecursionHandler(RecursionHandler):
    """Raise ``CycleDetectedError``; the default."""

    def handle(self, request: Request, path: list[Request]) -> Any:
        raise CycleDetectedError(request, [*path, request])


class OmitOnRecursion(RecursionHandler):
    """Resolve the re-entered request to ``OmitSpecimen``."""

    def handle(self, request: Request, path: list[Request]) -> Any:
        logger.debug("Omitting recursive request %s", request)
        return OmitSpecimen


class NullOnRecursion(RecursionHandler):
    """Resolve the re-entered request to ``None``."""

    def handle(self, request: Request, path: list[Request]) -> Any:
        logger.debug("Returning None for recursive request %s", request)
        return None


RECURSION_HANDLERS: dict[str, type[RecursionHandler]] = {
    "raise": ThrowingRecursionHandler,
    "omit": OmitOnRecursion,
    "null": NullOnRecursion,
}


def recursion_handler(name: str) -> RecursionHandler:
    """Build a handler from its config name ("raise", "omit", "null")."""
    try:
        return RECURSION_HANDLERS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown recursion handler {name!r}. "
            f"Expected one of: {', '.join(sorted(RECURSION_HANDLERS))}"
        ) from None


@dataclass
class _GuardState:
    path: list[Request] = field(default_factory=list)


class RecursionGuard(BehaviorBuilder):
    def __init__(self, builder: SpecimenBuilder, handler: RecursionHandler, depth: int):
        super().__init__(builder)
        self.handler = handler
        self.depth = depth

    def create(self, request: Request, context: SpecimenContext) -> Any:
        state = context.scope.state_for(self, _GuardState)
        # Requests may carry unhashable seeds, so count by equality.
        occurrences = sum(1 for seen in state.path if seen == request)
        if occurrences >= self.depth:
            return self.handler.handle(request, list(state.path))

        state.path.append(request)
        try:
            return self.builder.create(request, context)
        finally:
            state.path.pop()


class RecursionGuardBehavior(Behavior):
    """Short-circuits requests already in flight within one top-level call.

    ``depth`` is how many times the same request may appear on the in-flight
    path before ``handler`` takes over; the same request resolved again after
    it has unwound is never treated as recursion.
    """

    def __init__(self, handler: RecursionHandler | None = None, depth: int = 1):
        if depth < 1:
            raise ConfigurationError(f"Recursion depth must be at least 1, got {depth}")
        self.handler = handler or ThrowingRecursionHandler()
        self.depth = depth

    def transform(self, builder: SpecimenBuilder) -> SpecimenBuilder:
        return RecursionGuard(builder, self.handler, self.depth)

    def __repr__(self) -> str:
        return f"RecursionGuardBehavior({self.handler!r}, depth={self.depth})"


# =============================================================================
# Exception translation
# =============================================================================


class ExceptionTranslatingBuilder(BehaviorBuilder):
    def __init__(self, builder: SpecimenBuilder, exception_types: tuple[type[CannotConstructError], ...]):
        super().__init__(builder)
        self.exception_types = exception_types

    def create(self, request: Request, context: SpecimenContext) -> Any:
        try:
            return self.builder.create(request, context)
        except self.exception_types as exc:
            logger.debug("Translated %s to NoSpecimen: %s", type(exc).__name__, exc)
            return NoSpecimen


class ExceptionToNoSpecimenBehavior(Behavior):
    """Lets builders signal "cannot construct this" by raising.

    Only ``CannotConstructError`` and its subclasses are translated; every
    other exception propagates unchanged.
    """

    def __init__(self, *exception_types: type[CannotConstructError]):
        exception_types = exception_types or (CannotConstructError,)
        for exc_type in exception_types:
            if not (isinstance(exc_type, type) and issubclass(exc_type, CannotConstructError)):
                raise ConfigurationError(
                    f"Only CannotConstructError subclasses may be translated, got {exc_type!r}"
                )
        self.exception_types = tuple(exception_types)

    def transform(self, builder: SpecimenBuilder) -> SpecimenBuilder:
        return ExceptionTranslatingBuilder(builder, self.exception_types)
