"""YAML customization profiles.

A profile bundles fixed values into one customization:

    inject:
      - type: myapp.models:Currency
        value: EUR
      - type: int
        value: 7
    seeds:
      email: test@example.com
      country: NL

``inject`` entries pin every request for a type to one value; the value is
validated against the type with pydantic, so mappings become models or
dataclasses and strings become dates, UUIDs or enum members. ``seeds`` pins
members (and seeded requests) by name.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .core.customization import Customization, GraphEditor, MemberValueCustomization
from .core.errors import ConfigurationError
from .utils.imports import TypePathError, resolve_type_path

logger = logging.getLogger(__name__)


class InjectEntry(BaseModel):
    """One ``inject:`` item."""

    type: str = Field(min_length=1)
    value: Any = None


class ProfileSpec(BaseModel):
    """Validated contents of a profile document."""

    name: str | None = None
    inject: list[InjectEntry] = Field(default_factory=list)
    seeds: dict[str, Any] = Field(default_factory=dict)


def _coerce(tp: Any, value: Any) -> Any:
    if isinstance(tp, type) and isinstance(value, tp):
        return value
    return TypeAdapter(tp).validate_python(value)


class ProfileCustomization(Customization):
    """Applies a ``ProfileSpec`` as a single customization."""

    def __init__(self, spec: ProfileSpec, source: str | None = None):
        self.spec = spec
        self.source = source
        self._injections = self._resolve_injections(spec)

    @property
    def name(self) -> str:
        return self.spec.name or (f"profile:{self.source}" if self.source else "profile")

    @staticmethod
    def _resolve_injections(spec: ProfileSpec) -> list[tuple[Any, Any]]:
        injections = []
        for entry in spec.inject:
            try:
                tp = resolve_type_path(entry.type)
            except TypePathError as e:
                raise ConfigurationError(f"Profile inject type {entry.type!r}: {e}") from e
            try:
                value = _coerce(tp, entry.value)
            except ValidationError as e:
                raise ConfigurationError(
                    f"Profile value for {entry.type!r} does not validate: {e}"
                ) from e
            injections.append((tp, value))
        return injections

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str | None = None) -> "ProfileCustomization":
        try:
            spec = ProfileSpec.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid profile {source or '<dict>'}: {e}") from e
        return cls(spec, source=source)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "ProfileCustomization":
        """Load a profile from a YAML file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigurationError(f"Cannot read profile {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Profile {path} is not valid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Profile {path} must parse to a mapping")
        logger.debug("Loaded profile %s", path)
        return cls.from_dict(data, source=path.name)

    def customize(self, editor: GraphEditor) -> None:
        if self.spec.seeds:
            MemberValueCustomization(self.spec.seeds).customize(editor)
        # Injections are staged after seeds so they take precedence.
        for tp, value in self._injections:
            editor.inject(value, as_type=tp)

    def __repr__(self) -> str:
        return f"ProfileCustomization({self.name})"
