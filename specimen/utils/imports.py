"""Resolve dotted type paths such as ``"myapp.models:User"`` to objects."""

from __future__ import annotations

import builtins
import datetime
import decimal
import importlib
import uuid
from typing import Any

# Short names accepted without a module prefix.
SHORT_NAMES: dict[str, Any] = {
    "datetime": datetime.datetime,
    "date": datetime.date,
    "time": datetime.time,
    "timedelta": datetime.timedelta,
    "Decimal": decimal.Decimal,
    "UUID": uuid.UUID,
}


class TypePathError(ImportError):
    """A type path could not be imported or does not name an attribute."""


def resolve_type_path(path: str) -> Any:
    """Import the object named by ``path``.

    Accepted forms:
        "module.sub:Qualified.Name"  (preferred)
        "module.sub.Name"            (last dot splits module from name)
        "int", "str", "UUID", ...    (builtins and common stdlib types)
    """
    path = path.strip()
    if not path:
        raise TypePathError("Empty type path")

    if ":" not in path and "." not in path:
        if path in SHORT_NAMES:
            return SHORT_NAMES[path]
        if hasattr(builtins, path):
            return getattr(builtins, path)
        raise TypePathError(f"Unknown type name {path!r}; use 'module:Name'")

    if ":" in path:
        module_name, _, qualname = path.partition(":")
    else:
        module_name, _, qualname = path.rpartition(".")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise TypePathError(f"Cannot import module {module_name!r}: {e}") from e

    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise TypePathError(f"Module {module_name!r} has no attribute {qualname!r}") from None
    return obj
