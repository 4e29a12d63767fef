"""Customizations: named bundles of graph mutations applied as one unit.

A customization never touches the live graph directly. It receives a
``GraphEditor`` that stages its builders into a fresh composite node and
records any replacements or removals; ``GraphEditor.commit`` validates the
staged changes and applies them in one step, so a customization that raises
part way leaves the graph untouched.

Later customizations take precedence over earlier ones: each committed node
is prepended to the target composite. Within one customization, builders
added later also shadow builders added earlier.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from .builder import (
    FactoryBuilder,
    FilteringBuilder,
    FixedBuilder,
    SpecimenBuilder,
    TypeRelay,
    as_builder,
    type_specification,
)
from .composite import CompositeBuilder, find_first, find_parent
from .errors import ConfigurationError
from .specifications import MemberSpecification, RequestSpecification, SeedSpecification

logger = logging.getLogger(__name__)


class GraphEditor:
    """Staging area handed to ``Customization.customize``.

    Args:
        root: The graph the customization is applied to, used for lookups
        target: Composite that receives the staged node on commit
        residue: Optional composite for fallback builders (consulted last)
        name: Name given to the staged node
    """

    def __init__(
        self,
        root: SpecimenBuilder,
        target: CompositeBuilder,
        residue: CompositeBuilder | None = None,
        name: str | None = None,
    ):
        self.root = root
        self.target = target
        self.residue = residue
        self.node = CompositeBuilder(name=name)
        self._residue_builders: list[SpecimenBuilder] = []
        self._replacements: list[tuple[SpecimenBuilder, SpecimenBuilder]] = []
        self._removals: list[SpecimenBuilder] = []

    # ── Staging ──

    def add(self, builder: SpecimenBuilder | Callable) -> SpecimenBuilder:
        """Stage ``builder`` ahead of everything staged so far."""
        return self.node.prepend(as_builder(builder))

    def append(self, builder: SpecimenBuilder | Callable) -> SpecimenBuilder:
        """Stage ``builder`` behind everything staged so far."""
        return self.node.append(as_builder(builder))

    def add_residue(self, builder: SpecimenBuilder | Callable) -> SpecimenBuilder:
        """Stage a fallback builder, consulted only after the default builders."""
        if self.residue is None:
            raise ConfigurationError("This graph has no residue collectors")
        builder = as_builder(builder)
        self._residue_builders.append(builder)
        return builder

    def inject(self, value: Any, as_type: Any = None) -> SpecimenBuilder:
        """Always answer requests for ``as_type`` (default: ``type(value)``) with ``value``."""
        tp = type(value) if as_type is None else as_type
        return self.add(FilteringBuilder(FixedBuilder(value), type_specification(tp)))

    def register(self, tp: Any, factory: Callable[..., Any]) -> SpecimenBuilder:
        """Build ``tp`` with ``factory``, resolving its annotated parameters."""
        return self.add(FilteringBuilder(FactoryBuilder(tp, factory), type_specification(tp)))

    def override(self, tp: Any, builder: SpecimenBuilder | Callable) -> SpecimenBuilder:
        """Route plain and seeded requests for ``tp`` to ``builder``."""
        return self.add(FilteringBuilder(as_builder(builder), type_specification(tp)))

    def when(self, specification: RequestSpecification, builder: SpecimenBuilder | Callable) -> SpecimenBuilder:
        return self.add(FilteringBuilder(as_builder(builder), specification))

    def member(self, name: str, value: Any, owner: Any = None) -> SpecimenBuilder:
        """Answer member requests named ``name`` with ``value``."""
        return self.add(FilteringBuilder(FixedBuilder(value), MemberSpecification(name, owner)))

    def replace(self, old: SpecimenBuilder, new: SpecimenBuilder | Callable) -> None:
        """Stage swapping ``old`` (anywhere in the graph) for ``new``."""
        self._replacements.append((old, as_builder(new)))

    def remove(self, builder: SpecimenBuilder) -> None:
        self._removals.append(builder)

    def find(self, predicate: Callable[[SpecimenBuilder], bool]) -> SpecimenBuilder | None:
        return find_first(self.root, predicate)

    # ── Commit ──

    def commit(self) -> "AppliedCustomization":
        """Apply all staged changes in one step.

        Replacements and removals are permanent; the staged builders are
        added as named nodes and can be taken out again later.
        """
        edits: list[tuple[SpecimenBuilder, SpecimenBuilder | None]] = [
            *self._replacements,
            *((old, None) for old in self._removals),
        ]
        # Play every edit against copies of the affected child lists first,
        # so a conflicting edit fails before the graph changes.
        planned: dict[int, list[SpecimenBuilder]] = {}
        parents = []
        for old, new in edits:
            parent = find_parent(self.root, old)
            if parent is None:
                raise ConfigurationError(f"{old!r} is not part of the graph")
            children = planned.setdefault(id(parent), list(parent))
            position = next((i for i, child in enumerate(children) if child is old), None)
            if position is None:
                raise ConfigurationError(
                    f"{old!r} is replaced or removed more than once in one customization"
                )
            if new is None:
                del children[position]
            else:
                parent._validate(new)
                children[position] = new
            parents.append(parent)

        for parent, (old, new) in zip(parents, edits):
            if new is None:
                parent.remove(old)
            else:
                parent.replace(old, new)
        applied = AppliedCustomization(self.node.name or "customization")
        if self._residue_builders:
            applied.residue_node = self.residue.prepend(
                CompositeBuilder(self._residue_builders, name=self.node.name)
            )
        if len(self.node):
            applied.node = self.target.prepend(self.node)
        return applied


@dataclass
class AppliedCustomization:
    """The nodes one committed customization added to the graph."""

    name: str
    node: CompositeBuilder | None = None
    residue_node: CompositeBuilder | None = None

    def nodes(self) -> list[CompositeBuilder]:
        return [n for n in (self.node, self.residue_node) if n is not None]


class Customization(ABC):
    """A reusable, named bundle of graph mutations."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def customize(self, editor: GraphEditor) -> None:
        """Stage mutations on ``editor``. Must not resolve any request."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def apply_customization(
    customization: Customization,
    root: SpecimenBuilder,
    target: CompositeBuilder,
    residue: CompositeBuilder | None = None,
) -> AppliedCustomization:
    """Stage ``customization`` against ``root`` and commit it into ``target``."""
    if not isinstance(customization, Customization):
        raise ConfigurationError(f"Not a customization: {customization!r}")
    editor = GraphEditor(root, target, residue=residue, name=customization.name)
    customization.customize(editor)
    applied = editor.commit()
    logger.info("Applied customization %s", customization.name)
    return applied


# =============================================================================
# Stock customizations
# =============================================================================


class FunctionCustomization(Customization):
    """Adapts ``fn(editor)`` to a customization."""

    def __init__(self, fn: Callable[[GraphEditor], None], name: str | None = None):
        self.fn = fn
        self._name = name or getattr(fn, "__name__", "FunctionCustomization")

    @property
    def name(self) -> str:
        return self._name

    def customize(self, editor: GraphEditor) -> None:
        self.fn(editor)

    def __repr__(self) -> str:
        return f"FunctionCustomization({self._name})"


class CompositeCustomization(Customization):
    """Applies several customizations as one; later ones win."""

    def __init__(self, *customizations: Customization, name: str | None = None):
        self.customizations = customizations
        self._name = name

    @property
    def name(self) -> str:
        return self._name or "+".join(c.name for c in self.customizations)

    def customize(self, editor: GraphEditor) -> None:
        for customization in self.customizations:
            customization.customize(editor)


class InjectCustomization(Customization):
    """Every request for ``as_type`` (default: ``type(value)``) yields ``value``."""

    def __init__(self, value: Any, as_type: Any = None):
        self.value = value
        self.as_type = as_type

    def customize(self, editor: GraphEditor) -> None:
        editor.inject(self.value, as_type=self.as_type)

    def __repr__(self) -> str:
        return f"InjectCustomization({self.value!r})"


class RegisterCustomization(Customization):
    """Construct ``tp`` with ``factory``."""

    def __init__(self, tp: Any, factory: Callable[..., Any]):
        self.type = tp
        self.factory = factory

    def customize(self, editor: GraphEditor) -> None:
        editor.register(self.type, self.factory)


class AddBuilderCustomization(Customization):
    """Adds builders at the customization layer, first listed wins."""

    def __init__(self, *builders: SpecimenBuilder | Callable):
        self.builders = builders

    def customize(self, editor: GraphEditor) -> None:
        for builder in self.builders:
            editor.append(builder)


class TypeRelayCustomization(Customization):
    """Resolve requests for ``source`` (e.g. an ABC) as ``target``."""

    def __init__(self, source: Any, target: Any):
        self.source = source
        self.target = target

    def customize(self, editor: GraphEditor) -> None:
        editor.add_residue(TypeRelay(self.source, self.target))


class MemberValueCustomization(Customization):
    """Fixed values for members (or seeds) by name."""

    def __init__(self, values: dict[str, Any], owner: Any = None):
        self.values = dict(values)
        self.owner = owner

    def customize(self, editor: GraphEditor) -> None:
        for name, value in self.values.items():
            editor.member(name, value, owner=self.owner)
            if self.owner is None:
                editor.when(SeedSpecification(type(value), name), FixedBuilder(value))

