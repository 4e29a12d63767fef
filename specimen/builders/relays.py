"""Relays: builders that answer a request by resolving a simpler one.

None of these produce values themselves. They translate member requests,
seeds and ``typing`` constructs into requests the leaf builders understand
and hand those back to the context.
"""

from __future__ import annotations

import math
import threading
from decimal import Decimal
from typing import Any, get_args

import annotated_types

from ..core.builder import SpecimenBuilder
from ..core.context import SpecimenContext
from ..core.errors import CannotConstructError
from ..core.requests import (
    ConstrainedStringRequest,
    MemberRequest,
    RangedNumberRequest,
    Request,
    SeededRequest,
    TypeRequest,
)
from ..core.specimen import NoSpecimen
from ..utils.annotations import (
    NONE_TYPE,
    is_annotated,
    is_literal,
    is_newtype,
    is_union,
    union_arms,
)

# Width of the range used when only one numeric bound is known.
_DEFAULT_SPAN = 255


def _rerequest(request: Request, tp: Any) -> Request:
    """Same kind of request (plain or seeded) for another type."""
    if isinstance(request, SeededRequest):
        return SeededRequest(tp, request.seed)
    return TypeRequest(tp)


class MemberRequestRelay(SpecimenBuilder):
    """``owner.name: T`` -> seeded request for ``T`` with seed ``name``."""

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, MemberRequest):
            return NoSpecimen
        return context.resolve(SeededRequest(request.member_type, request.name))


class SeedIgnoringRelay(SpecimenBuilder):
    """Falls back from a seeded request to the plain type request."""

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, SeededRequest):
            return NoSpecimen
        return context.resolve(TypeRequest(request.type))


class UnionRelay(SpecimenBuilder):
    """``Optional[T]`` / ``A | B``: the first arm that resolves, ``None`` last."""

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, (TypeRequest, SeededRequest)) or not is_union(request.type):
            return NoSpecimen
        arms = union_arms(request.type)
        for arm in arms:
            if arm is NONE_TYPE:
                return None
            result = context.resolve(_rerequest(request, arm))
            if result is not NoSpecimen:
                return result
        return NoSpecimen


class NewTypeRelay(SpecimenBuilder):
    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, (TypeRequest, SeededRequest)) or not is_newtype(request.type):
            return NoSpecimen
        return context.resolve(_rerequest(request, request.type.__supertype__))


class LiteralRelay(SpecimenBuilder):
    """``Literal[a, b, c]``: the literal values in turn, wrapping around."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._positions: dict[Any, int] = {}

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, (TypeRequest, SeededRequest)) or not is_literal(request.type):
            return NoSpecimen
        values = get_args(request.type)
        with self._lock:
            position = self._positions.get(request.type, 0)
            self._positions[request.type] = position + 1
        return values[position % len(values)]


def _flatten(metadata: tuple[Any, ...]) -> list[Any]:
    flat: list[Any] = []
    for item in metadata:
        if isinstance(item, annotated_types.GroupedMetadata):
            flat.extend(item)
        else:
            flat.append(item)
    return flat


def constraint_request(tp: Any, metadata: tuple[Any, ...] | list[Any], seed: Any = None) -> Request | None:
    """Ranged/constrained request for ``tp`` given ``annotated_types`` metadata.

    Returns None when the metadata carries no constraint this engine honors.
    Raises ValueError when the bounds admit no value.
    """
    flat = _flatten(tuple(metadata))

    if tp in (int, float, Decimal):
        lower = upper = None
        for item in flat:
            if isinstance(item, annotated_types.Ge):
                lower = math.ceil(item.ge) if tp is int else item.ge
            elif isinstance(item, annotated_types.Gt):
                lower = math.floor(item.gt) + 1 if tp is int else math.nextafter(float(item.gt), math.inf)
            elif isinstance(item, annotated_types.Le):
                upper = math.floor(item.le) if tp is int else item.le
            elif isinstance(item, annotated_types.Lt):
                upper = math.ceil(item.lt) - 1 if tp is int else math.nextafter(float(item.lt), -math.inf)
        if lower is None and upper is None:
            return None
        if lower is None:
            lower = upper - _DEFAULT_SPAN
        if upper is None:
            upper = lower + _DEFAULT_SPAN
        return RangedNumberRequest(tp, lower, upper)

    if tp is str:
        min_length, max_length = 0, None
        found = False
        for item in flat:
            if isinstance(item, annotated_types.MinLen):
                min_length, found = item.min_length, True
            elif isinstance(item, annotated_types.MaxLen):
                max_length, found = item.max_length, True
        if not found:
            return None
        return ConstrainedStringRequest(min_length, max_length, seed=seed)

    return None


class AnnotatedRelay(SpecimenBuilder):
    """``Annotated[T, ...]``: honors numeric bounds and string lengths, else plain ``T``."""

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, (TypeRequest, SeededRequest)) or not is_annotated(request.type):
            return NoSpecimen
        inner, *metadata = get_args(request.type)
        seed = request.seed if isinstance(request, SeededRequest) else None
        try:
            constrained = constraint_request(inner, metadata, seed=seed)
        except ValueError as e:
            raise CannotConstructError(request, str(e)) from e
        if constrained is not None:
            return context.resolve(constrained)
        return context.resolve(_rerequest(request, inner))
