"""Tests for Entity, Change, and Batch staging order."""

from dataclasses import FrozenInstanceError

import pytest

from cellvault.domain.batch import Batch, Change, ChangeType, Entity
from cellvault.domain.cells import JsonModel, Ref


def _entity(row: str, column: str = "c1", version: int = 0) -> Entity:
    return Entity(
        model=JsonModel({"row": row}),
        ref=Ref(row_id=row, column_name=column, version=version),
    )


class TestEntity:
    def test_marshal_delegates_to_model(self) -> None:
        entity = _entity("r1")
        assert entity.marshal().value == b'{"row":"r1"}'


class TestBatch:
    def test_empty(self) -> None:
        batch = Batch()
        assert len(batch) == 0
        assert not batch
        assert batch.items() == []

    def test_adds_precede_updates(self) -> None:
        batch = Batch()
        u1, a1, u2, a2, u3 = (_entity(n) for n in ("u1", "a1", "u2", "a2", "u3"))
        batch.update(u1)
        batch.add(a1)
        batch.update(u2)
        batch.add(a2)
        batch.update(u3)

        changes = batch.items()
        assert len(changes) == 5
        assert [c.type for c in changes] == [
            ChangeType.ADD,
            ChangeType.ADD,
            ChangeType.UPDATE,
            ChangeType.UPDATE,
            ChangeType.UPDATE,
        ]
        assert [c.entity for c in changes] == [a1, a2, u1, u2, u3]

    def test_changes_hold_the_staged_entity(self) -> None:
        entity = _entity("r1")
        batch = Batch()
        batch.add(entity)
        (change,) = batch.items()
        assert change.entity is entity

    def test_added_and_updated_views(self) -> None:
        a, u = _entity("a"), _entity("u", version=2)
        batch = Batch()
        batch.add(a)
        batch.update(u)
        assert batch.added == (a,)
        assert batch.updated == (u,)
        assert len(batch) == 2

    def test_iteration_matches_items(self) -> None:
        batch = Batch()
        batch.update(_entity("u"))
        batch.add(_entity("a"))
        assert list(batch) == batch.items()

    def test_items_is_a_fresh_list(self) -> None:
        batch = Batch()
        batch.add(_entity("a"))
        batch.items().clear()
        assert len(batch.items()) == 1


class TestChangeType:
    def test_values(self) -> None:
        assert ChangeType.ADD == "add"
        assert ChangeType.UPDATE == "update"

    def test_change_is_frozen(self) -> None:
        change = Change(entity=_entity("r1"), type=ChangeType.ADD)
        with pytest.raises(FrozenInstanceError):
            change.type = ChangeType.UPDATE  # type: ignore[misc]
