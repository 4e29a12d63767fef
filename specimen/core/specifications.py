"""Request specifications: predicates that decide whether a request matches.

Filtering builders pair a specification with an inner builder so the inner
builder only ever sees requests it was registered for.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from .requests import MemberRequest, Request, SeededRequest, TypeRequest


class RequestSpecification(ABC):
    """Predicate over requests."""

    @abstractmethod
    def is_satisfied_by(self, request: Request) -> bool: ...

    def __and__(self, other: "RequestSpecification") -> "RequestSpecification":
        return AndSpecification(self, other)

    def __or__(self, other: "RequestSpecification") -> "RequestSpecification":
        return OrSpecification(self, other)

    def __invert__(self) -> "RequestSpecification":
        return InverseSpecification(self)


class AnySpecification(RequestSpecification):
    """Matches every request."""

    def is_satisfied_by(self, request: Request) -> bool:
        return True

    def __repr__(self) -> str:
        return "AnySpecification()"


class ExactTypeSpecification(RequestSpecification):
    """Matches ``TypeRequest(tp)`` for exactly ``tp`` (no subclasses)."""

    def __init__(self, tp: Any):
        self.type = tp

    def is_satisfied_by(self, request: Request) -> bool:
        return isinstance(request, TypeRequest) and request.type == self.type

    def __repr__(self) -> str:
        return f"ExactTypeSpecification({self.type!r})"


class SeedSpecification(RequestSpecification):
    """Matches seeded requests for ``tp`` whose seed equals ``seed``.

    With ``seed=None`` any seeded request for ``tp`` matches.
    """

    def __init__(self, tp: Any, seed: Any = None):
        self.type = tp
        self.seed = seed

    def is_satisfied_by(self, request: Request) -> bool:
        if not isinstance(request, SeededRequest) or request.type != self.type:
            return False
        return self.seed is None or request.seed == self.seed

    def __repr__(self) -> str:
        return f"SeedSpecification({self.type!r}, seed={self.seed!r})"


class MemberSpecification(RequestSpecification):
    """Matches member requests by name, optionally restricted to one owner."""

    def __init__(self, name: str, owner: Any = None):
        self.name = name
        self.owner = owner

    def is_satisfied_by(self, request: Request) -> bool:
        if not isinstance(request, MemberRequest) or request.name != self.name:
            return False
        return self.owner is None or request.owner is self.owner

    def __repr__(self) -> str:
        return f"MemberSpecification({self.name!r}, owner={self.owner!r})"


class EqualRequestSpecification(RequestSpecification):
    """Matches requests structurally equal to ``target``."""

    def __init__(self, target: Request):
        self.target = target

    def is_satisfied_by(self, request: Request) -> bool:
        return request == self.target

    def __repr__(self) -> str:
        return f"EqualRequestSpecification({self.target!r})"


class PredicateSpecification(RequestSpecification):
    def __init__(self, predicate: Callable[[Request], bool]):
        self.predicate = predicate

    def is_satisfied_by(self, request: Request) -> bool:
        return bool(self.predicate(request))


class AndSpecification(RequestSpecification):
    def __init__(self, *specifications: RequestSpecification):
        self.specifications = specifications

    def is_satisfied_by(self, request: Request) -> bool:
        return all(spec.is_satisfied_by(request) for spec in self.specifications)


class OrSpecification(RequestSpecification):
    def __init__(self, *specifications: RequestSpecification):
        self.specifications = specifications

    def is_satisfied_by(self, request: Request) -> bool:
        return any(spec.is_satisfied_by(request) for spec in self.specifications)


class InverseSpecification(RequestSpecification):
    def __init__(self, specification: RequestSpecification):
        self.specification = specification

    def is_satisfied_by(self, request: Request) -> bool:
        return not self.specification.is_satisfied_by(request)
