"""Builders for scalar types: numbers, strings, booleans, bytes, UUIDs, dates, enums.

Each builder answers ``TypeRequest`` for the types it knows and returns
``NoSpecimen`` for everything else. Seeded requests reach these builders
only after ``SeedIgnoringRelay`` has dropped the seed, except for strings,
where the seed becomes a readable prefix.
"""

from __future__ import annotations

import datetime as dt
import enum
import inspect
import math
import threading
import uuid
from decimal import Decimal
from typing import Any

from ..core.builder import SpecimenBuilder
from ..core.context import SpecimenContext
from ..core.requests import (
    ConstrainedStringRequest,
    RangedNumberRequest,
    Request,
    SeededRequest,
    TypeRequest,
)
from ..core.specimen import NoSpecimen
from .source import RandomSource

NUMERIC_TYPES = (int, float, Decimal)

# Successive ranges drawn from once the previous one is exhausted.
_NUMERIC_LIMITS = (1, 255, 32767, 2147483647)


class NumericSequenceGenerator(SpecimenBuilder):
    """Unique random numbers: first from [1, 255], then [256, 32767], and so on.

    Numbers never repeat within a range, which keeps generated ids and
    counters distinct in small tests.
    """

    def __init__(self, source: RandomSource, limits: tuple[int, ...] = _NUMERIC_LIMITS):
        if len(limits) < 2 or list(limits) != sorted(set(limits)):
            raise ValueError(f"limits must be strictly increasing, got {limits!r}")
        self.source = source
        self.limits = limits
        self._lock = threading.Lock()
        self._range_index = 0
        self._used: set[int] = set()

    def next_number(self) -> int:
        with self._lock:
            lower, upper = self._current_range()
            if len(self._used) >= upper - lower + 1:
                if self._range_index + 2 < len(self.limits):
                    self._range_index += 1
                self._used.clear()
                lower, upper = self._current_range()
            while True:
                number = self.source.randint(lower, upper)
                if number not in self._used:
                    self._used.add(number)
                    return number

    def _current_range(self) -> tuple[int, int]:
        lower = self.limits[self._range_index]
        if self._range_index:
            lower += 1
        return lower, self.limits[self._range_index + 1]

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, TypeRequest) or request.type not in NUMERIC_TYPES:
            return NoSpecimen
        return request.type(self.next_number())


class RangedNumberGenerator(SpecimenBuilder):
    """Numbers within the inclusive bounds of a ``RangedNumberRequest``."""

    def __init__(self, source: RandomSource):
        self.source = source

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, RangedNumberRequest):
            return NoSpecimen
        if request.type is int:
            return self.source.randint(math.ceil(request.minimum), math.floor(request.maximum))
        with self.source.lock:
            fraction = self.source.rng.random()
        low, high = float(request.minimum), float(request.maximum)
        value = low + (high - low) * fraction
        if request.type is Decimal:
            return Decimal(str(round(value, 6))).max(Decimal(str(request.minimum))).min(
                Decimal(str(request.maximum))
            )
        return min(max(value, low), high)


class StringGenerator(SpecimenBuilder):
    """``str`` as a random UUID string; a seeded ``str`` as ``"<seed><uuid>"``."""

    def __init__(self, source: RandomSource):
        self.source = source

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if isinstance(request, TypeRequest) and request.type is str:
            return str(self.source.uuid4())
        if (
            isinstance(request, SeededRequest)
            and request.type is str
            and isinstance(request.seed, str)
        ):
            return f"{request.seed}{self.source.uuid4()}"
        return NoSpecimen


class ConstrainedStringGenerator(SpecimenBuilder):
    """Strings whose length falls within a ``ConstrainedStringRequest``'s bounds."""

    def __init__(self, source: RandomSource):
        self.source = source

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, ConstrainedStringRequest):
            return NoSpecimen
        upper = request.max_length
        if upper is None:
            upper = max(request.min_length, 36)
        length = self.source.randint(request.min_length, upper)
        prefix = request.seed if isinstance(request.seed, str) else ""
        text = prefix
        while len(text) < length:
            text += self.source.uuid4().hex
        if len(text) > length:
            # Keep the readable seed prefix when it fits, trim the random tail.
            text = text[:length]
        return text


class BooleanSwitch(SpecimenBuilder):
    """Alternates ``True``/``False``, starting with ``True``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next = True

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, TypeRequest) or request.type is not bool:
            return NoSpecimen
        with self._lock:
            value = self._next
            self._next = not value
        return value


class BytesGenerator(SpecimenBuilder):
    def __init__(self, source: RandomSource, size: int = 16):
        self.source = source
        self.size = size

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, TypeRequest):
            return NoSpecimen
        if request.type is bytes:
            return self.source.randbytes(self.size)
        if request.type is bytearray:
            return bytearray(self.source.randbytes(self.size))
        return NoSpecimen


class UuidGenerator(SpecimenBuilder):
    def __init__(self, source: RandomSource):
        self.source = source

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if isinstance(request, TypeRequest) and request.type is uuid.UUID:
            return self.source.uuid4()
        return NoSpecimen


class TemporalGenerator(SpecimenBuilder):
    """Dates and times within two years of today."""

    def __init__(self, source: RandomSource):
        self.source = source

    def create(self, request: Request, context: SpecimenContext) -> Any:
        if not isinstance(request, TypeRequest):
            return NoSpecimen
        tp = request.type
        faker = self.source.faker
        with self.source.lock:
            # datetime is a date subclass, so test it first.
            if tp is dt.datetime:
                return faker.date_time_between(start_date="-2y", end_date="+2y")
            if tp is dt.date:
                return faker.date_between(start_date="-2y", end_date="+2y")
            if tp is dt.time:
                return faker.time_object()
            if tp is dt.timedelta:
                return dt.timedelta(seconds=self.source.rng.randint(1, 30 * 24 * 3600))
        return NoSpecimen


class EnumGenerator(SpecimenBuilder):
    """Enum members in declaration order, wrapping around."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._positions: dict[type, int] = {}

    def create(self, request: Request, context: SpecimenContext) -> Any:
        tp = request.type if isinstance(request, TypeRequest) else None
        if not (inspect.isclass(tp) and issubclass(tp, enum.Enum)):
            return NoSpecimen
        members = list(tp)
        if not members:
            return NoSpecimen
        with self._lock:
            position = self._positions.get(tp, 0)
            self._positions[tp] = position + 1
        return members[position % len(members)]


class NoneTypeBuilder(SpecimenBuilder):
    def create(self, request: Request, context: SpecimenContext) -> Any:
        if isinstance(request, TypeRequest) and request.type in (None, type(None)):
            return None
        return NoSpecimen
