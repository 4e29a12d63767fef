"""The resolution context passed to every builder.

Builders resolve nested requests through ``context.resolve``, which restarts
the chain from the root of the (behavior-wrapped) graph. The context keeps no
per-request state of its own; behaviors that need some (the recursion guard's
in-flight set, the tracer's depth) keep it in the ``ResolutionScope`` created
for each top-level call, so concurrent top-level calls stay independent.

The scope also remembers the request path that led to the deepest
``NoSpecimen``, so an unresolvable top-level request can name the nested
request that actually failed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Sequence, TypeVar

from .requests import Request, TypeRequest
from .specimen import NoSpecimen

if TYPE_CHECKING:
    from .builder import SpecimenBuilder

T = TypeVar("T")


class ResolutionScope:
    """Per-top-level-call state, keyed by the object that owns it."""

    def __init__(self) -> None:
        self._state: dict[int, Any] = {}
        self._owners: list[Any] = []
        self.path: list[Request] = []
        self.failure: tuple[Request, ...] = ()

    def state_for(self, owner: Any, factory: Callable[[], T]) -> T:
        """Return ``owner``'s state for this call, creating it on first use."""
        key = id(owner)
        if key not in self._state:
            self._state[key] = factory()
            # Keep the owner alive so its id cannot be reused within the scope.
            self._owners.append(owner)
        return self._state[key]

    def record_failure(self, path: Sequence[Request]) -> None:
        """Remember ``path`` as the failing chain unless a deeper one below it is known."""
        path = tuple(path)
        if self.failure[: len(path)] != path:
            self.failure = path

    def __contains__(self, owner: Any) -> bool:
        return id(owner) in self._state


class SpecimenContext:
    """Re-entrant resolution facade over the root builder."""

    def __init__(self, builder: "SpecimenBuilder", scope: ResolutionScope | None = None):
        self.builder = builder
        self.scope = scope if scope is not None else ResolutionScope()

    def resolve(self, request: Request) -> Any:
        """Resolve ``request`` from the root, returning ``NoSpecimen`` unchanged."""
        path = self.scope.path
        path.append(request)
        try:
            result = self.builder.create(request, self)
            if result is NoSpecimen:
                self.scope.record_failure(path)
            return result
        finally:
            path.pop()

    def resolve_type(self, tp: Any) -> Any:
        return self.resolve(TypeRequest(tp))

    def __repr__(self) -> str:
        return f"SpecimenContext(builder={self.builder!r})"
