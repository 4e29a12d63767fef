"""Configuration management for specimen.

Two sections:
- engine: repeat count for collections and recursion handling
- generator: seed and Faker locale for the default builders

Config resolution order (highest priority first):
1. Programmatic (SpecimenConfig constructed in code)
2. Environment variables (SPECIMEN_SEED, SPECIMEN_REPEAT_COUNT, etc.)
3. Config file (~/.config/specimen/config.json, managed by `specimen config`)
4. Hardcoded defaults
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)


# =============================================================================
# Config file location
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "specimen"
CONFIG_FILE = CONFIG_DIR / "config.json"

RECURSION_HANDLER_NAMES = ("raise", "omit", "null")


# =============================================================================
# Config dataclasses
# =============================================================================


@dataclass
class EngineConfig:
    """Resolution engine settings.

    - repeat_count: number of elements generated for collections
    - recursion_depth: times a request may re-enter itself before the handler fires
    - recursion_handler: "raise" (CycleDetectedError), "omit" or "null"
    """

    repeat_count: int = 3
    recursion_depth: int = 1
    recursion_handler: str = "raise"


@dataclass
class GeneratorConfig:
    """Default builder settings."""

    seed: int | None = None  # None = fresh randomness every fixture
    faker_locale: str = "en_US"


@dataclass
class SpecimenConfig:
    """Top-level specimen configuration.

    Examples:
        # Package use: no files needed
        config = SpecimenConfig(engine=EngineConfig(repeat_count=5))

        # CLI use: loads from ~/.config/specimen/config.json
        config = SpecimenConfig.load()
    """

    engine: EngineConfig = field(default_factory=EngineConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError for values the engine cannot use."""
        if self.engine.repeat_count < 0:
            raise ValueError(
                f"engine.repeat_count must be non-negative, got {self.engine.repeat_count}"
            )
        if self.engine.recursion_depth < 1:
            raise ValueError(
                f"engine.recursion_depth must be at least 1, got {self.engine.recursion_depth}"
            )
        if self.engine.recursion_handler not in RECURSION_HANDLER_NAMES:
            raise ValueError(
                f"engine.recursion_handler must be one of {RECURSION_HANDLER_NAMES}, "
                f"got {self.engine.recursion_handler!r}"
            )

    @classmethod
    def load(cls, env: bool = True) -> "SpecimenConfig":
        """Load config from file + env vars.

        Priority: env var values > config.json values > defaults.
        With env=False only the config file is read.
        """
        config = cls()

        # Layer 1: Load from config file if it exists
        if CONFIG_FILE.exists():
            try:
                with open(CONFIG_FILE) as f:
                    data = json.load(f)
                _apply_dict(config, data)
            except (json.JSONDecodeError, OSError, ValueError) as exc:
                logger.warning("Failed to load config from %s: %s", CONFIG_FILE, exc)
                config = cls()

        if not env:
            return config

        # Layer 2: Env var overrides
        _ensure_dotenv()
        if val := os.environ.get("SPECIMEN_SEED"):
            try:
                config.generator.seed = int(val)
            except ValueError:
                logger.warning("Invalid SPECIMEN_SEED=%r, ignoring", val)
        if val := os.environ.get("SPECIMEN_FAKER_LOCALE"):
            config.generator.faker_locale = val
        if val := os.environ.get("SPECIMEN_REPEAT_COUNT"):
            try:
                count = int(val)
                if count < 0:
                    raise ValueError(val)
                config.engine.repeat_count = count
            except ValueError:
                logger.warning("Invalid SPECIMEN_REPEAT_COUNT=%r, ignoring", val)
        if val := os.environ.get("SPECIMEN_RECURSION_DEPTH"):
            try:
                depth = int(val)
                if depth < 1:
                    raise ValueError(val)
                config.engine.recursion_depth = depth
            except ValueError:
                logger.warning("Invalid SPECIMEN_RECURSION_DEPTH=%r, ignoring", val)
        if val := os.environ.get("SPECIMEN_RECURSION_HANDLER"):
            if val in RECURSION_HANDLER_NAMES:
                config.engine.recursion_handler = val
            else:
                logger.warning("Invalid SPECIMEN_RECURSION_HANDLER=%r, ignoring", val)

        return config

    def save(self) -> None:
        """Save config to ~/.config/specimen/config.json."""
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for display."""
        return {
            "engine": asdict(self.engine),
            "generator": asdict(self.generator),
        }


# =============================================================================
# Config dict application
# =============================================================================

INT_FIELDS = {"repeat_count", "recursion_depth", "seed"}


def _apply_dict(config: SpecimenConfig, data: dict) -> None:
    """Apply a dict of values onto a SpecimenConfig, then validate it."""
    for section in ("engine", "generator"):
        values = data.get(section)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section)
        for k, v in values.items():
            if not hasattr(target, k):
                logger.warning("Unknown config key %s.%s, ignoring", section, k)
                continue
            if k in INT_FIELDS and v is not None:
                v = int(v)
            setattr(target, k, v)
    config.validate()


# =============================================================================
# .env loading
# =============================================================================

_dotenv_loaded = False


def _ensure_dotenv() -> None:
    """Load .env file into os.environ if not already loaded."""
    global _dotenv_loaded
    if not _dotenv_loaded:
        _dotenv_loaded = True
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)


# =============================================================================
# Global config singleton
# =============================================================================

_config: SpecimenConfig | None = None


def get_config() -> SpecimenConfig:
    """Get the global SpecimenConfig instance.

    First call loads from file + env vars. Subsequent calls return cached instance.
    Use configure() to replace the global config programmatically.
    """
    global _config
    if _config is None:
        _config = SpecimenConfig.load()
    return _config


def configure(config: SpecimenConfig) -> None:
    """Set the global SpecimenConfig programmatically.

    Use this when specimen is used as a package:
        from specimen.config import configure, SpecimenConfig, EngineConfig
        configure(SpecimenConfig(engine=EngineConfig(recursion_handler="omit")))
    """
    global _config
    config.validate()
    _config = config


def reset_config() -> None:
    """Reset the global config (forces reload on next get_config())."""
    global _config
    _config = None
