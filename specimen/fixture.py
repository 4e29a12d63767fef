"""The ``Fixture`` facade: "create me an anonymous instance of T".

A fixture owns one builder graph, highest priority first:

    customizations  - one node per applied customization, newest first
    builders        - builders registered with add_builder()
    engine          - the default type-based builder set
    residue         - fallbacks consulted last (e.g. abstract -> concrete relays)

and a list of behaviors wrapped around it in registration order, so the
last-registered behavior is outermost. A recursion guard is registered at
construction.

Each top-level call gets a fresh resolution scope, so recursion and trace
state are never shared between calls. Mutating the graph while any call is
in flight raises ``GraphMutationError``.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from .builders import RandomSource, default_builders
from .config import SpecimenConfig, get_config
from .core.behaviors import (
    Behavior,
    RecursionGuardBehavior,
    RecursionHandler,
    TraceSink,
    TracingBehavior,
    apply_behaviors,
    recursion_handler,
)
from .core.builder import SpecimenBuilder, as_builder
from .core.composite import CompositeBuilder
from .core.context import SpecimenContext
from .core.customization import (
    AppliedCustomization,
    Customization,
    FunctionCustomization,
    GraphEditor,
    InjectCustomization,
    RegisterCustomization,
    TypeRelayCustomization,
    apply_customization,
)
from .core.errors import ConfigurationError, GraphMutationError, UnresolvableRequestError
from .core.requests import MultipleRequest, Request, SeededRequest, TypeRequest
from .core.specimen import NoSpecimen, OmitSpecimen

logger = logging.getLogger(__name__)


class Fixture:
    """Creates anonymous specimens from a configurable builder graph.

    Examples:
        fixture = Fixture(seed=42)
        user = fixture.create(User)
        fixture.inject(Money(10, "EUR"))
        fixture.customize(MyDomainCustomization())
    """

    def __init__(
        self,
        config: SpecimenConfig | None = None,
        *,
        seed: int | None = None,
        builders: list[SpecimenBuilder] | None = None,
    ):
        self.config = config or get_config()
        if seed is None:
            seed = self.config.generator.seed
        self.source = RandomSource(seed, locale=self.config.generator.faker_locale)

        if builders is None:
            builders = default_builders(self.source, repeat_count=self.config.engine.repeat_count)
        self.customizations = CompositeBuilder(name="customizations")
        self.builders = CompositeBuilder(name="builders")
        self.engine = CompositeBuilder(builders, name="engine")
        self.residue = CompositeBuilder(name="residue")
        self.graph = CompositeBuilder(
            [self.customizations, self.builders, self.engine, self.residue], name="graph"
        )

        self._lock = threading.Lock()
        self._in_flight = 0
        self._applied: list[tuple[Customization, AppliedCustomization]] = []
        self._behaviors: list[Behavior] = [
            RecursionGuardBehavior(
                recursion_handler(self.config.engine.recursion_handler),
                depth=self.config.engine.recursion_depth,
            )
        ]
        self._root: SpecimenBuilder | None = None
        self.graph.set_guard(self._ensure_idle)

    @property
    def seed(self) -> int | None:
        return self.source.seed

    @property
    def repeat_count(self) -> int:
        return self.config.engine.repeat_count

    # =========================================================================
    # Resolution
    # =========================================================================

    def resolve(self, request: Request) -> Any:
        """Run ``request`` through the wrapped graph; ``NoSpecimen`` comes back as is."""
        result, _ = self._run(request)
        return result

    def _run(self, request: Request) -> tuple[Any, SpecimenContext]:
        with self._lock:
            self._in_flight += 1
        try:
            # Behaviors cannot change while a call is in flight. Built outside
            # the lock: a transform may call back into the fixture.
            context = SpecimenContext(self._wrapped_root())
            return context.resolve(request), context
        finally:
            with self._lock:
                self._in_flight -= 1

    def create(self, tp: Any, seed: Any = None) -> Any:
        """Create an anonymous value of ``tp``.

        Raises:
            UnresolvableRequestError: No builder can produce ``tp``; its ``path`` names the
                nested request that failed
            CycleDetectedError: ``tp`` refers back to itself and nothing breaks the cycle
        """
        request = TypeRequest(tp) if seed is None else SeededRequest(tp, seed)
        return self._checked(request)

    def create_many(self, tp: Any, count: int | None = None) -> list[Any]:
        """Create ``count`` values of ``tp`` (default: the configured repeat count)."""
        count = self.repeat_count if count is None else count
        return self._checked(MultipleRequest(TypeRequest(tp), count))

    def _checked(self, request: Request) -> Any:
        result, context = self._run(request)
        if result is NoSpecimen:
            failure = context.scope.failure
            raise UnresolvableRequestError(request, failure if len(failure) > 1 else ())
        if result is OmitSpecimen:
            return None
        return result

    # =========================================================================
    # Graph configuration
    # =========================================================================

    def add_builder(self, builder: SpecimenBuilder | Callable, *, first: bool = False) -> SpecimenBuilder:
        """Register a builder ahead of the default builders.

        Registration order is priority order; ``first=True`` puts the builder
        ahead of every builder registered so far.
        """
        builder = as_builder(builder)
        if first:
            self.builders.prepend(builder)
        else:
            self.builders.append(builder)
        return builder

    def remove_builder(self, builder: SpecimenBuilder) -> None:
        self.builders.remove(builder)

    def add_residue(self, builder: SpecimenBuilder | Callable) -> SpecimenBuilder:
        """Register a fallback consulted only after the default builders."""
        return self.residue.append(as_builder(builder))

    def customize(self, customization: Customization | Callable[[GraphEditor], None]) -> AppliedCustomization:
        """Apply ``customization``; it takes precedence over all earlier ones."""
        if not isinstance(customization, Customization):
            if not callable(customization):
                raise ConfigurationError(f"Not a customization: {customization!r}")
            customization = FunctionCustomization(customization)
        applied = apply_customization(customization, self.graph, self.customizations, self.residue)
        self._applied.append((customization, applied))
        return applied

    def remove_customization(self, customization: Customization | AppliedCustomization) -> None:
        """Take out the nodes a customization added (replacements stay)."""
        for i, (applied_from, applied) in enumerate(self._applied):
            if customization is applied_from or customization is applied:
                if applied.node is not None:
                    self.customizations.remove(applied.node)
                if applied.residue_node is not None:
                    self.residue.remove(applied.residue_node)
                del self._applied[i]
                logger.info("Removed customization %s", applied.name)
                return
        raise ValueError(f"{customization!r} has not been applied to this fixture")

    @property
    def applied_customizations(self) -> list[Customization]:
        return [customization for customization, _ in self._applied]

    def inject(self, value: Any, as_type: Any = None) -> AppliedCustomization:
        """Always return ``value`` for its exact type (or ``as_type``)."""
        return self.customize(InjectCustomization(value, as_type=as_type))

    def register(self, tp: Any, factory: Callable[..., Any]) -> AppliedCustomization:
        """Construct ``tp`` with ``factory``; annotated parameters are resolved."""
        return self.customize(RegisterCustomization(tp, factory))

    def relay(self, source: Any, target: Any) -> AppliedCustomization:
        """Resolve requests for ``source`` (an ABC, a protocol) as ``target``."""
        return self.customize(TypeRelayCustomization(source, target))

    def freeze(self, tp: Any, seed: Any = None) -> Any:
        """Create one ``tp`` and return that same value for every later request."""
        value = self.create(tp, seed=seed)
        self.inject(value, as_type=tp)
        return value

    # =========================================================================
    # Behaviors
    # =========================================================================

    @property
    def behaviors(self) -> tuple[Behavior, ...]:
        """Registered behaviors, innermost first."""
        return tuple(self._behaviors)

    def add_behavior(self, behavior: Behavior) -> Behavior:
        if not isinstance(behavior, Behavior):
            raise ConfigurationError(f"Not a behavior: {behavior!r}")
        with self._lock:
            self._assert_idle_locked()
            self._behaviors.append(behavior)
            self._root = None
        logger.info("Added behavior %r", behavior)
        return behavior

    def remove_behavior(self, behavior: Behavior) -> None:
        with self._lock:
            self._assert_idle_locked()
            self._behaviors.remove(behavior)
            self._root = None

    def trace(self, sink: TraceSink) -> TracingBehavior:
        """Write an indented trace of every resolution to ``sink``."""
        return self.add_behavior(TracingBehavior(sink))

    def set_recursion_handler(self, handler: str | RecursionHandler, depth: int | None = None) -> None:
        """Swap the recursion guard's handler ("raise", "omit", "null" or an instance)."""
        if isinstance(handler, str):
            handler = recursion_handler(handler)
        with self._lock:
            self._assert_idle_locked()
            for i, behavior in enumerate(self._behaviors):
                if isinstance(behavior, RecursionGuardBehavior):
                    self._behaviors[i] = RecursionGuardBehavior(
                        handler, depth=behavior.depth if depth is None else depth
                    )
                    break
            else:
                self._behaviors.insert(0, RecursionGuardBehavior(handler, depth=depth or 1))
            self._root = None

    # =========================================================================
    # Internals
    # =========================================================================

    def _wrapped_root(self) -> SpecimenBuilder:
        if self._root is None:
            self._root = apply_behaviors(self.graph, self._behaviors)
        return self._root

    def _ensure_idle(self) -> None:
        with self._lock:
            self._assert_idle_locked()

    def _assert_idle_locked(self) -> None:
        if self._in_flight:
            raise GraphMutationError(
                "The builder graph cannot change while a resolution is in progress"
            )

    def __repr__(self) -> str:
        return (
            f"Fixture(seed={self.seed!r}, customizations={len(self.customizations)}, "
            f"behaviors={len(self._behaviors)})"
        )
