"""Default, type-based builder set.

``default_builders`` returns the engine's builders in priority order:
relays for members and ``typing`` constructs first, then seed-aware text,
scalars, containers and structured types, and finally the relay that drops
seeds so seeded requests fall back to their plain type.
"""

from ..core.builder import SpecimenBuilder
from .collections import CollectionBuilder, MultipleRelay
from .members import StructuredTypeBuilder
from .primitives import (
    BooleanSwitch,
    BytesGenerator,
    ConstrainedStringGenerator,
    EnumGenerator,
    NoneTypeBuilder,
    NumericSequenceGenerator,
    RangedNumberGenerator,
    StringGenerator,
    TemporalGenerator,
    UuidGenerator,
)
from .relays import (
    AnnotatedRelay,
    LiteralRelay,
    MemberRequestRelay,
    NewTypeRelay,
    SeedIgnoringRelay,
    UnionRelay,
)
from .source import RandomSource
from .text import FakerSeedBuilder


def default_builders(source: RandomSource, repeat_count: int = 3) -> list[SpecimenBuilder]:
    """The engine builders, highest priority first."""
    return [
        MemberRequestRelay(),
        UnionRelay(),
        AnnotatedRelay(),
        NewTypeRelay(),
        LiteralRelay(),
        FakerSeedBuilder(source),
        StringGenerator(source),
        NoneTypeBuilder(),
        NumericSequenceGenerator(source),
        BooleanSwitch(),
        BytesGenerator(source),
        UuidGenerator(source),
        TemporalGenerator(source),
        EnumGenerator(),
        RangedNumberGenerator(source),
        ConstrainedStringGenerator(source),
        MultipleRelay(),
        CollectionBuilder(repeat_count),
        StructuredTypeBuilder(),
        SeedIgnoringRelay(),
    ]


__all__ = [
    "default_builders",
    "RandomSource",
    "AnnotatedRelay",
    "BooleanSwitch",
    "BytesGenerator",
    "CollectionBuilder",
    "ConstrainedStringGenerator",
    "EnumGenerator",
    "FakerSeedBuilder",
    "LiteralRelay",
    "MemberRequestRelay",
    "MultipleRelay",
    "NewTypeRelay",
    "NoneTypeBuilder",
    "NumericSequenceGenerator",
    "RangedNumberGenerator",
    "SeedIgnoringRelay",
    "StringGenerator",
    "StructuredTypeBuilder",
    "TemporalGenerator",
    "UnionRelay",
    "UuidGenerator",
]
