"""Sentinel specimens.

``NoSpecimen`` means "this builder does not handle the request". It is chain
control data, distinct from a produced ``None``, and is never raised.

``OmitSpecimen`` means "produce nothing for this slot": member builders leave
the member at its default instead of assigning a value.
"""

from typing import Any


class _Sentinel:
    __slots__ = ("_name",)

    def __init__(self, name: str):
        self._name = name

    def __repr__(self) -> str:
        return self._name

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return self._name

    def __copy__(self) -> "_Sentinel":
        return self

    def __deepcopy__(self, memo: dict) -> "_Sentinel":
        return self


NoSpecimen = _Sentinel("NoSpecimen")
OmitSpecimen = _Sentinel("OmitSpecimen")


def is_specimen(value: Any) -> bool:
    """True when ``value`` is an actual specimen (``None`` included)."""
    return value is not NoSpecimen and value is not OmitSpecimen
