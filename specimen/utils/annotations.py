"""Annotation introspection helpers.

Pure functions over ``typing`` constructs, with no dependency on the engine.
"""

from __future__ import annotations

import dataclasses
import inspect
import types
import typing
from typing import Any, Callable, Union, get_args, get_origin, get_type_hints

NONE_TYPE = type(None)
EMPTY = inspect.Parameter.empty


def resolved_signature(fn: Callable[..., Any]) -> dict[str, tuple[Any, Any]]:
    """Map parameter name -> (annotation, default) with forward refs resolved.

    ``*args``/``**kwargs`` are skipped. Missing annotations and defaults are
    reported as ``inspect.Parameter.empty``.
    """
    target = fn.__init__ if inspect.isclass(fn) else fn
    signature = inspect.signature(fn)
    try:
        hints = get_type_hints(target, include_extras=True)
    except (NameError, TypeError):
        hints = {}

    params: dict[str, tuple[Any, Any]] = {}
    for name, param in signature.parameters.items():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(name, param.annotation)
        if isinstance(annotation, str):
            # Unresolvable forward reference; treat as unannotated.
            annotation = EMPTY
        params[name] = (annotation, param.default)
    return params


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def union_arms(tp: Any) -> tuple[Any, ...]:
    """Union members with ``None`` moved last."""
    args = get_args(tp)
    return tuple(a for a in args if a is not NONE_TYPE) + tuple(
        a for a in args if a is NONE_TYPE
    )


def is_annotated(tp: Any) -> bool:
    return get_origin(tp) is typing.Annotated


def is_literal(tp: Any) -> bool:
    return get_origin(tp) is typing.Literal


def is_newtype(tp: Any) -> bool:
    return isinstance(tp, typing.NewType)


def is_typeddict(tp: Any) -> bool:
    return typing.is_typeddict(tp)


def is_namedtuple(tp: Any) -> bool:
    return (
        inspect.isclass(tp)
        and issubclass(tp, tuple)
        and hasattr(tp, "_fields")
        and hasattr(tp, "__annotations__")
    )


def is_dataclass_type(tp: Any) -> bool:
    return inspect.isclass(tp) and dataclasses.is_dataclass(tp)


def type_hints(tp: Any) -> dict[str, Any]:
    """Resolved class annotations, keeping ``Annotated`` metadata."""
    try:
        return get_type_hints(tp, include_extras=True)
    except (NameError, TypeError):
        return dict(getattr(tp, "__annotations__", {}))
