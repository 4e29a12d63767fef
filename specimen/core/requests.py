"""Request model: immutable descriptions of what a caller wants produced.

Requests are frozen dataclasses, so two requests built from the same parts
compare and hash equal. The recursion guard relies on that structural
equality; nothing in the engine compares requests by identity.

Each request class carries a ``kind`` tag so builders can dispatch on it
without inspecting the class hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar


def describe_type(tp: Any) -> str:
    """Short, readable name for a type or typing construct."""
    if isinstance(tp, type):
        if tp.__module__ == "builtins":
            return tp.__qualname__
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp).replace("typing.", "")


class Request:
    """Base class for every request kind."""

    kind: ClassVar[str] = "request"


@dataclass(frozen=True)
class TypeRequest(Request):
    """Produce a value of ``type``."""

    kind: ClassVar[str] = "type"

    type: Any

    def __str__(self) -> str:
        return describe_type(self.type)


@dataclass(frozen=True)
class SeededRequest(Request):
    """Produce a value of ``type``, biased by ``seed`` (usually a member name)."""

    kind: ClassVar[str] = "seeded"

    type: Any
    seed: Any = None

    def __str__(self) -> str:
        return f"{describe_type(self.type)} (seed={self.seed!r})"


@dataclass(frozen=True)
class MemberRequest(Request):
    """Produce a value for ``owner.name``, declared as ``member_type``."""

    kind: ClassVar[str] = "member"

    owner: Any
    name: str
    member_type: Any
    default: Any = field(default=None, compare=False, hash=False)

    def __str__(self) -> str:
        return (
            f"{describe_type(self.owner)}.{self.name}: "
            f"{describe_type(self.member_type)}"
        )


@dataclass(frozen=True)
class MultipleRequest(Request):
    """Produce ``count`` specimens of ``request`` as a list."""

    kind: ClassVar[str] = "multiple"

    request: Request
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"count must be non-negative, got {self.count}")

    def __str__(self) -> str:
        return f"{self.count} x {self.request}"


@dataclass(frozen=True)
class RangedNumberRequest(Request):
    """Produce a number of ``type`` within ``[minimum, maximum]``."""

    kind: ClassVar[str] = "ranged_number"

    type: Any
    minimum: int | float | Decimal
    maximum: int | float | Decimal

    def __post_init__(self) -> None:
        if self.type not in (int, float, Decimal):
            raise ValueError(f"Unsupported numeric type: {self.type!r}")
        if self.minimum > self.maximum:
            raise ValueError(
                f"minimum ({self.minimum}) must not exceed maximum ({self.maximum})"
            )

    def __str__(self) -> str:
        return f"{describe_type(self.type)} in [{self.minimum}, {self.maximum}]"


@dataclass(frozen=True)
class ConstrainedStringRequest(Request):
    """Produce a string whose length lies in ``[min_length, max_length]``."""

    kind: ClassVar[str] = "constrained_string"

    min_length: int = 0
    max_length: int | None = None
    seed: Any = None

    def __post_init__(self) -> None:
        if self.min_length < 0:
            raise ValueError(f"min_length must be non-negative, got {self.min_length}")
        if self.max_length is not None and self.max_length < self.min_length:
            raise ValueError(
                f"max_length ({self.max_length}) must not be below "
                f"min_length ({self.min_length})"
            )

    def __str__(self) -> str:
        upper = "*" if self.max_length is None else self.max_length
        return f"str[{self.min_length}..{upper}]"
