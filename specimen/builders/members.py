"""Builders for structured types whose members are declared with annotations.

Supported: dataclasses, pydantic models, NamedTuples and TypedDicts. Each
member is resolved through a ``MemberRequest``, so customizations can target
members by name. A member that resolves to ``OmitSpecimen`` keeps its
declared default, or gets ``None`` when it has none; a pydantic model with
such a member is built with ``model_construct`` since ``None`` would not
validate.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Annotated, Any, Callable

from pydantic import BaseModel, ValidationError

from ..core.builder import SpecimenBuilder
from ..core.context import SpecimenContext
from ..core.errors import CannotConstructError
from ..core.requests import MemberRequest, Request, TypeRequest
from ..core.specimen import NoSpecimen, OmitSpecimen
from ..utils.annotations import (
    EMPTY,
    is_dataclass_type,
    is_namedtuple,
    is_typeddict,
    type_hints,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Member:
    """One constructor-settable member of a structured type."""

    name: str
    type: Any
    default: Any = EMPTY
    key: str | None = None  # keyword used at construction, if not ``name``

    @property
    def has_default(self) -> bool:
        return self.default is not EMPTY


def dataclass_members(tp: type) -> list[Member]:
    hints = type_hints(tp)
    members = []
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING:
            default = f.default
        elif f.default_factory is not dataclasses.MISSING:
            default = f.default_factory
        else:
            default = EMPTY
        members.append(Member(f.name, hints.get(f.name, f.type), default))
    return members


def pydantic_members(tp: type[BaseModel]) -> list[Member]:
    members = []
    for name, info in tp.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        default = EMPTY if info.is_required() else (info.default_factory or info.default)
        members.append(Member(name, annotation, default, key=info.alias))
    return members


def namedtuple_members(tp: type) -> list[Member]:
    hints = type_hints(tp)
    defaults = getattr(tp, "_field_defaults", {})
    return [Member(name, hints.get(name, Any), defaults.get(name, EMPTY)) for name in tp._fields]


def typeddict_members(tp: type) -> list[Member]:
    hints = type_hints(tp)
    return [Member(name, hint) for name, hint in hints.items()]


def _construct_pydantic(tp: type[BaseModel], values: dict[str, Any], omitted: set[str]) -> Any:
    try:
        return tp.model_validate(values)
    except ValidationError as e:
        if not omitted:
            raise CannotConstructError(TypeRequest(tp), str(e)) from e
        # A required member left at None never validates; skip validation.
        logger.debug(
            "Constructing %s without validation, omitted: %s", tp.__qualname__, sorted(omitted)
        )
        return tp.model_construct(**values)


def _construct_keywords(tp: type, values: dict[str, Any], omitted: set[str]) -> Any:
    return tp(**values)


# Structured-type recognizer -> (member lister, constructor)
_KINDS: list[tuple[Callable[[Any], bool], Callable[[Any], list[Member]], Callable[[Any, dict, set], Any]]] = [
    (is_dataclass_type, dataclass_members, _construct_keywords),
    (
        lambda tp: isinstance(tp, type) and issubclass(tp, BaseModel),
        pydantic_members,
        _construct_pydantic,
    ),
    (is_namedtuple, namedtuple_members, _construct_keywords),
    (is_typeddict, typeddict_members, _construct_keywords),
]


class StructuredTypeBuilder(SpecimenBuilder):
    """Builds annotated structured types member by member."""

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, TypeRequest):
            return NoSpecimen
        tp = request.type
        for recognizes, list_members, construct in _KINDS:
            if recognizes(tp):
                return self._build(tp, list_members(tp), construct, context)
        return NoSpecimen

    def _build(
        self,
        tp: type,
        members: list[Member],
        construct: Callable[[Any, dict, set], Any],
        context: SpecimenContext,
    ) -> Any:
        values: dict[str, Any] = {}
        omitted: set[str] = set()
        for member in members:
            default = member.default if member.has_default else None
            value = context.resolve(MemberRequest(tp, member.name, member.type, default))
            if value is NoSpecimen:
                if member.has_default:
                    continue
                logger.debug("No specimen for member %s of %s", member.name, tp.__qualname__)
                return NoSpecimen
            if value is OmitSpecimen:
                if member.has_default:
                    continue
                value = None
                omitted.add(member.name)
            values[member.key or member.name] = value
        return construct(tp, values, omitted)
