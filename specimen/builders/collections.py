"""Builders for containers: lists, sets, tuples, dicts and their abstract forms.

Element values come from ``MultipleRequest``s resolved through the context,
so every element passes through the whole graph (customizations included).
"""

from __future__ import annotations

import collections.abc as abc
from typing import Any, get_args, get_origin

from ..core.builder import SpecimenBuilder
from ..core.context import SpecimenContext
from ..core.requests import MultipleRequest, Request, TypeRequest
from ..core.specimen import NoSpecimen, OmitSpecimen

# Abstract container origins and the concrete type built for them.
_SEQUENCE_ORIGINS: dict[Any, type] = {
    list: list,
    abc.Sequence: list,
    abc.MutableSequence: list,
    abc.Iterable: list,
    abc.Collection: list,
    set: set,
    abc.Set: set,
    abc.MutableSet: set,
    frozenset: frozenset,
}
_MAPPING_ORIGINS: dict[Any, type] = {
    dict: dict,
    abc.Mapping: dict,
    abc.MutableMapping: dict,
}

# Element type used for unparameterized containers.
DEFAULT_ELEMENT_TYPE = str


class MultipleRelay(SpecimenBuilder):
    """``MultipleRequest(r, n)`` -> a list of ``n`` resolutions of ``r``.

    Omitted specimens are skipped; any unresolvable element makes the whole
    request unresolvable.
    """

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, MultipleRequest):
            return NoSpecimen
        items = []
        for _ in range(request.count):
            item = context.resolve(request.request)
            if item is NoSpecimen:
                return NoSpecimen
            if item is OmitSpecimen:
                continue
            items.append(item)
        return items


class CollectionBuilder(SpecimenBuilder):
    """Containers of ``repeat_count`` elements."""

    def __init__(self, repeat_count: int = 3):
        if repeat_count < 0:
            raise ValueError(f"repeat_count must be non-negative, got {repeat_count}")
        self.repeat_count = repeat_count

    def _many(self, element_type: Any, context: SpecimenContext) -> Any:
        return context.resolve(MultipleRequest(TypeRequest(element_type), self.repeat_count))

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, TypeRequest):
            return NoSpecimen
        tp = request.type
        origin = get_origin(tp) or tp
        args = get_args(tp)

        try:
            sequence_type = _SEQUENCE_ORIGINS.get(origin)
            mapping_type = _MAPPING_ORIGINS.get(origin)
        except TypeError:
            # Unhashable typing construct; not a container we know.
            return NoSpecimen

        if sequence_type is not None:
            items = self._many(args[0] if args else DEFAULT_ELEMENT_TYPE, context)
            if items is NoSpecimen:
                return NoSpecimen
            return sequence_type(items)

        if mapping_type is not None:
            key_type, value_type = args if len(args) == 2 else (DEFAULT_ELEMENT_TYPE, DEFAULT_ELEMENT_TYPE)
            keys = self._many(key_type, context)
            if keys is NoSpecimen:
                return NoSpecimen
            values = self._many(value_type, context)
            if values is NoSpecimen:
                return NoSpecimen
            return mapping_type(zip(keys, values))

        if origin is tuple:
            return self._tuple(args, context)

        return NoSpecimen

    def _tuple(self, args: tuple[Any, ...], context: SpecimenContext) -> Any:
        if not args:
            items = self._many(DEFAULT_ELEMENT_TYPE, context)
            return NoSpecimen if items is NoSpecimen else tuple(items)
        if args == ((),):
            return ()
        if len(args) == 2 and args[1] is Ellipsis:
            items = self._many(args[0], context)
            return NoSpecimen if items is NoSpecimen else tuple(items)
        values = []
        for arg in args:
            value = context.resolve(TypeRequest(arg))
            if value is NoSpecimen:
                return NoSpecimen
            values.append(None if value is OmitSpecimen else value)
        return tuple(values)
