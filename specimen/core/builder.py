"""Specimen builders: handlers mapping requests to specimens.

A builder either produces a specimen for a request or returns ``NoSpecimen``
to say "not mine". Raising is reserved for genuine faults. Builders may
resolve any number of nested requests through the context, but must never
unconditionally resolve their own request.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable

from ..utils.annotations import resolved_signature
from .context import SpecimenContext
from .errors import ConfigurationError
from .requests import Request, SeededRequest, TypeRequest, describe_type
from .specifications import (
    ExactTypeSpecification,
    OrSpecification,
    RequestSpecification,
    SeedSpecification,
)
from .specimen import NoSpecimen, is_specimen


class SpecimenBuilder(ABC):
    """A node in the builder graph."""

    @abstractmethod
    def create(self, request: Request, context: SpecimenContext) -> Any:
        """Produce a specimen for ``request`` or return ``NoSpecimen``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FunctionBuilder(SpecimenBuilder):
    """Adapts ``fn(request, context)`` to the builder contract."""

    def __init__(self, fn: Callable[[Request, SpecimenContext], Any], name: str | None = None):
        if not callable(fn):
            raise ConfigurationError(f"FunctionBuilder needs a callable, got {fn!r}")
        self.fn = fn
        self.name = name or getattr(fn, "__name__", type(fn).__name__)

    def create(self, request: Request, context: SpecimenContext) -> Any:
        return self.fn(request, context)

    def __repr__(self) -> str:
        return f"FunctionBuilder({self.name})"


class FixedBuilder(SpecimenBuilder):
    """Returns ``value`` for every request it is asked about.

    Used behind a filter; on its own it would answer everything.
    """

    def __init__(self, value: Any):
        self.value = value

    def create(self, request: Request, context: SpecimenContext) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"FixedBuilder({self.value!r})"


class FilteringBuilder(SpecimenBuilder):
    """Forwards only requests satisfying ``specification`` to ``builder``."""

    def __init__(self, builder: SpecimenBuilder, specification: RequestSpecification):
        self.builder = builder
        self.specification = specification

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not self.specification.is_satisfied_by(request):
            return NoSpecimen
        return self.builder.create(request, context)

    def __repr__(self) -> str:
        return f"FilteringBuilder({self.builder!r}, {self.specification!r})"


class Postprocessor(SpecimenBuilder):
    """Runs ``command(specimen, context)`` on every specimen ``builder`` makes.

    The command's return value is ignored; it mutates the specimen in place.
    """

    def __init__(
        self,
        builder: SpecimenBuilder,
        command: Callable[[Any, SpecimenContext], None],
        specification: RequestSpecification | None = None,
    ):
        self.builder = builder
        self.command = command
        self.specification = specification

    def create(self, request: Request, context: SpecimenContext) -> Any:
        specimen = self.builder.create(request, context)
        if not is_specimen(specimen):
            return specimen
        if self.specification is None or self.specification.is_satisfied_by(request):
            self.command(specimen, context)
        return specimen


class TypeRelay(SpecimenBuilder):
    """Answers requests for ``source`` by resolving ``target`` instead.

    Typically maps an abstract base or protocol onto a concrete class.
    """

    def __init__(self, source: Any, target: Any):
        if source is target:
            raise ConfigurationError(f"TypeRelay from {source!r} to itself would recurse")
        self.source = source
        self.target = target

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if isinstance(request, TypeRequest) and request.type == self.source:
            return context.resolve(TypeRequest(self.target))
        if isinstance(request, SeededRequest) and request.type == self.source:
            return context.resolve(SeededRequest(self.target, request.seed))
        return NoSpecimen

    def __repr__(self) -> str:
        return f"TypeRelay({describe_type(self.source)} -> {describe_type(self.target)})"


class FactoryBuilder(SpecimenBuilder):
    """Builds ``tp`` by calling ``factory``, resolving its parameters.

    Annotated parameters are resolved as seeded requests named after the
    parameter; parameters without an annotation must have a default.
    """

    def __init__(self, tp: Any, factory: Callable[..., Any]):
        self.type = tp
        self.factory = factory
        self.parameters = resolved_signature(factory)
        for name, (annotation, default) in self.parameters.items():
            if annotation is inspect.Parameter.empty and default is inspect.Parameter.empty:
                raise ConfigurationError(
                    f"Parameter {name!r} of factory for {describe_type(tp)} "
                    f"has neither an annotation nor a default"
                )

    def create(self, request: Request, context: SpecimenContext) -> Any:
        kwargs: dict[str, Any] = {}
        for name, (annotation, default) in self.parameters.items():
            if annotation is inspect.Parameter.empty:
                continue
            value = context.resolve(SeededRequest(annotation, name))
            if not is_specimen(value):
                if default is inspect.Parameter.empty:
                    return value
                continue
            kwargs[name] = value
        return self.factory(**kwargs)

    def __repr__(self) -> str:
        return f"FactoryBuilder({describe_type(self.type)})"


def type_specification(tp: Any) -> RequestSpecification:
    """Matches plain and seeded requests for exactly ``tp``."""
    return OrSpecification(ExactTypeSpecification(tp), SeedSpecification(tp))


def as_builder(obj: SpecimenBuilder | Callable[[Request, SpecimenContext], Any]) -> SpecimenBuilder:
    """Coerce a builder or ``fn(request, context)`` callable to a builder."""
    if isinstance(obj, SpecimenBuilder):
        return obj
    if callable(obj):
        return FunctionBuilder(obj)
    raise ConfigurationError(f"Not a specimen builder: {obj!r}")
