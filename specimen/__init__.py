"""Specimen: anonymous test data from type annotations.

    from specimen import Fixture

    fixture = Fixture(seed=42)
    user = fixture.create(User)
"""

__version__ = "0.1.0"

from .config import EngineConfig, GeneratorConfig, SpecimenConfig, configure, get_config
from .core import (
    Behavior,
    CannotConstructError,
    ConfigurationError,
    Customization,
    CycleDetectedError,
    ExceptionToNoSpecimenBehavior,
    GraphEditor,
    GraphMutationError,
    NoSpecimen,
    OmitSpecimen,
    RecursionGuardBehavior,
    SpecimenBuilder,
    SpecimenContext,
    SpecimenError,
    TracingBehavior,
    UnresolvableRequestError,
)
from .fixture import Fixture
from .profile import ProfileCustomization

__all__ = [
    "__version__",
    "Fixture",
    "ProfileCustomization",
    "EngineConfig",
    "GeneratorConfig",
    "SpecimenConfig",
    "configure",
    "get_config",
    "Behavior",
    "CannotConstructError",
    "ConfigurationError",
    "Customization",
    "CycleDetectedError",
    "ExceptionToNoSpecimenBehavior",
    "GraphEditor",
    "GraphMutationError",
    "NoSpecimen",
    "OmitSpecimen",
    "RecursionGuardBehavior",
    "SpecimenBuilder",
    "SpecimenContext",
    "SpecimenError",
    "TracingBehavior",
    "UnresolvableRequestError",
]
