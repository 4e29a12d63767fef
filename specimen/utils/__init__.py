"""Pure helpers: annotation introspection and type-path imports."""

from .annotations import (
    EMPTY,
    NONE_TYPE,
    is_annotated,
    is_dataclass_type,
    is_literal,
    is_namedtuple,
    is_newtype,
    is_typeddict,
    is_union,
    resolved_signature,
    type_hints,
    union_arms,
)
from .imports import TypePathError, resolve_type_path

__all__ = [
    "EMPTY",
    "NONE_TYPE",
    "is_annotated",
    "is_dataclass_type",
    "is_literal",
    "is_namedtuple",
    "is_newtype",
    "is_typeddict",
    "is_union",
    "resolved_signature",
    "type_hints",
    "union_arms",
    "TypePathError",
    "resolve_type_path",
]
