"""Entities and change sets staged for an atomic apply.

A :class:`Batch` only records intent. Marshaling and version checks happen
when the batch is handed to ``CellStore.apply_changes``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from cellvault.domain.cells import Item, Model, Ref

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(eq=False)
class Entity:
    """A model bound to the Ref it was (or will be) stored under."""

    model: Model
    ref: Ref

    def marshal(self) -> Item:
        return self.model.marshal()


class ChangeType(StrEnum):
    """Kind of write a staged change performs."""

    ADD = "add"
    UPDATE = "update"


@dataclass(frozen=True)
class Change:
    """A view over one staged entity. Holds the entity itself, never a copy."""

    entity: Entity
    type: ChangeType


@dataclass
class Batch:
    """Ordered adds and updates applied as one unit.

    Staging the same ``(row_id, column_name)`` twice in one batch is
    unsupported; nothing here deduplicates.
    """

    _add: list[Entity] = field(default_factory=list, init=False)
    _update: list[Entity] = field(default_factory=list, init=False)

    def add(self, entity: Entity) -> None:
        """Stage *entity* as a new cell."""
        self._add.append(entity)

    def update(self, entity: Entity) -> None:
        """Stage *entity* as a version-checked update of an existing cell."""
        self._update.append(entity)

    def items(self) -> list[Change]:
        """All staged changes: adds first, then updates, each in staging order."""
        changes = [Change(entity=e, type=ChangeType.ADD) for e in self._add]
        changes.extend(Change(entity=e, type=ChangeType.UPDATE) for e in self._update)
        return changes

    @property
    def added(self) -> tuple[Entity, ...]:
        return tuple(self._add)

    @property
    def updated(self) -> tuple[Entity, ...]:
        return tuple(self._update)

    def __iter__(self) -> Iterator[Change]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._add) + len(self._update)
