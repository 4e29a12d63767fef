"""Resolution engine for specimen.

This package holds everything the engine needs and nothing type-specific:
- requests: immutable request kinds
- specimen: the NoSpecimen / OmitSpecimen sentinels
- builder, composite: builder contract and the composite graph node
- context: SpecimenContext and the per-call ResolutionScope
- behaviors: tracing, recursion guard, exception translation
- customization: named, atomic bundles of graph mutations
"""

from .behaviors import (
    Behavior,
    ExceptionToNoSpecimenBehavior,
    NullOnRecursion,
    OmitOnRecursion,
    RecursionGuardBehavior,
    RecursionHandler,
    ThrowingRecursionHandler,
    TracingBehavior,
    apply_behaviors,
)
from .builder import (
    FactoryBuilder,
    FilteringBuilder,
    FixedBuilder,
    FunctionBuilder,
    Postprocessor,
    SpecimenBuilder,
    TypeRelay,
)
from .composite import CompositeBuilder, find_first, iter_nodes, replace_node
from .context import ResolutionScope, SpecimenContext
from .customization import (
    AppliedCustomization,
    CompositeCustomization,
    Customization,
    GraphEditor,
    MemberValueCustomization,
)
from .errors import (
    CannotConstructError,
    ConfigurationError,
    CycleDetectedError,
    GraphMutationError,
    SpecimenError,
    UnresolvableRequestError,
)
from .requests import (
    ConstrainedStringRequest,
    MemberRequest,
    MultipleRequest,
    RangedNumberRequest,
    Request,
    SeededRequest,
    TypeRequest,
)
from .specifications import (
    ExactTypeSpecification,
    MemberSpecification,
    RequestSpecification,
    SeedSpecification,
)
from .specimen import NoSpecimen, OmitSpecimen, is_specimen

__all__ = [
    "Behavior",
    "ExceptionToNoSpecimenBehavior",
    "NullOnRecursion",
    "OmitOnRecursion",
    "RecursionGuardBehavior",
    "RecursionHandler",
    "ThrowingRecursionHandler",
    "TracingBehavior",
    "apply_behaviors",
    "FactoryBuilder",
    "FilteringBuilder",
    "FixedBuilder",
    "FunctionBuilder",
    "Postprocessor",
    "SpecimenBuilder",
    "TypeRelay",
    "CompositeBuilder",
    "find_first",
    "iter_nodes",
    "replace_node",
    "ResolutionScope",
    "SpecimenContext",
    "AppliedCustomization",
    "CompositeCustomization",
    "Customization",
    "GraphEditor",
    "MemberValueCustomization",
    "CannotConstructError",
    "ConfigurationError",
    "CycleDetectedError",
    "GraphMutationError",
    "SpecimenError",
    "UnresolvableRequestError",
    "ConstrainedStringRequest",
    "MemberRequest",
    "MultipleRequest",
    "RangedNumberRequest",
    "Request",
    "SeededRequest",
    "TypeRequest",
    "ExactTypeSpecification",
    "MemberSpecification",
    "RequestSpecification",
    "SeedSpecification",
    "NoSpecimen",
    "OmitSpecimen",
    "is_specimen",
]
