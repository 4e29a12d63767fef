"""Composite builders: ordered chains of child builders.

A ``CompositeBuilder`` asks its children in order and returns the first
result that is not ``NoSpecimen``. Insertion order is the priority order.
Composites nest, so a set of builders added together (for example, by one
customization) stays addressable as a single node.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Iterator

from .builder import SpecimenBuilder
from .context import SpecimenContext
from .errors import ConfigurationError
from .requests import Request
from .specimen import NoSpecimen

logger = logging.getLogger(__name__)


class CompositeBuilder(SpecimenBuilder):
    """An ordered, mutable sequence of builders acting as one builder."""

    def __init__(self, builders: Iterable[SpecimenBuilder] = (), name: str | None = None):
        self.name = name
        self._children: list[SpecimenBuilder] = []
        self._guard: Callable[[], None] | None = None
        for builder in builders:
            self.append(builder)

    # ── Builder contract ──

    def create(self, request: Request, context: SpecimenContext) -> Any:
        for child in self._children:
            result = child.create(request, context)
            if result is not NoSpecimen:
                return result
        return NoSpecimen

    # ── Sequence protocol ──

    def __iter__(self) -> Iterator[SpecimenBuilder]:
        return iter(list(self._children))

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, builder: object) -> bool:
        return any(child is builder for child in self._children)

    def __getitem__(self, index: int) -> SpecimenBuilder:
        return self._children[index]

    def index(self, builder: SpecimenBuilder) -> int:
        for i, child in enumerate(self._children):
            if child is builder:
                return i
        raise ValueError(f"{builder!r} is not a child of {self!r}")

    # ── Mutation ──

    def append(self, builder: SpecimenBuilder) -> SpecimenBuilder:
        """Add ``builder`` at lowest priority."""
        return self.insert(len(self._children), builder)

    def prepend(self, builder: SpecimenBuilder) -> SpecimenBuilder:
        """Add ``builder`` at highest priority."""
        return self.insert(0, builder)

    def insert(self, index: int, builder: SpecimenBuilder) -> SpecimenBuilder:
        self._check_mutable()
        self._validate(builder)
        self._children.insert(index, builder)
        if isinstance(builder, CompositeBuilder):
            builder.set_guard(self._guard)
        logger.debug("Inserted %r into %r at %d", builder, self, index)
        return builder

    def remove(self, builder: SpecimenBuilder) -> None:
        """Remove ``builder`` (matched by identity)."""
        self._check_mutable()
        del self._children[self.index(builder)]
        logger.debug("Removed %r from %r", builder, self)

    def replace(self, old: SpecimenBuilder, new: SpecimenBuilder) -> None:
        """Put ``new`` where ``old`` was, keeping every other child in place."""
        self._check_mutable()
        self._validate(new)
        self._children[self.index(old)] = new
        if isinstance(new, CompositeBuilder):
            new.set_guard(self._guard)

    def clear(self) -> None:
        self._check_mutable()
        self._children.clear()

    def _validate(self, builder: SpecimenBuilder) -> None:
        if not isinstance(builder, SpecimenBuilder):
            raise ConfigurationError(f"Not a specimen builder: {builder!r}")
        if builder is self or (
            isinstance(builder, CompositeBuilder)
            and any(node is self for node in iter_nodes(builder))
        ):
            raise ConfigurationError(f"Adding {builder!r} to {self!r} would create a loop")

    def set_guard(self, guard: Callable[[], None] | None) -> None:
        """Install ``guard`` on this node and every nested composite.

        The guard runs before each mutation and raises to veto it.
        """
        self._guard = guard
        for child in self._children:
            if isinstance(child, CompositeBuilder):
                child.set_guard(guard)

    def _check_mutable(self) -> None:
        if self._guard is not None:
            self._guard()

    def __repr__(self) -> str:
        label = self.name or "composite"
        return f"CompositeBuilder({label}, {len(self._children)} children)"


def iter_nodes(root: SpecimenBuilder) -> Iterator[SpecimenBuilder]:
    """Walk ``root`` and nested composites depth-first, in priority order."""
    yield root
    if isinstance(root, CompositeBuilder):
        for child in root:
            yield from iter_nodes(child)


def find_first(
    root: SpecimenBuilder, predicate: Callable[[SpecimenBuilder], bool]
) -> SpecimenBuilder | None:
    """First node under ``root`` (inclusive) matching ``predicate``."""
    for node in iter_nodes(root):
        if predicate(node):
            return node
    return None


def find_parent(root: SpecimenBuilder, target: SpecimenBuilder) -> CompositeBuilder | None:
    """The composite directly holding ``target``, if any."""
    for node in iter_nodes(root):
        if isinstance(node, CompositeBuilder) and target in node:
            return node
    return None


def replace_node(root: SpecimenBuilder, old: SpecimenBuilder, new: SpecimenBuilder) -> bool:
    """Swap ``old`` for ``new`` wherever it sits under ``root``.

    Returns False when ``old`` is not in the graph.
    """
    parent = find_parent(root, old)
    if parent is None:
        return False
    parent.replace(old, new)
    return True
