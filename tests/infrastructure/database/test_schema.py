"""Tests for the cellvault table definitions."""

import pytest
from sqlalchemy import inspect, insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from cellvault.infrastructure.database.schema import action_log, cells

_ROW = {
    "row_id": "r1",
    "column_name": "c1",
    "data": b"{}",
    "created_at": "2026-01-01T00:00:00+00:00",
    "updated_at": "2026-01-01T00:00:00+00:00",
}


class TestCellsTable:
    def test_primary_key_is_row_and_column(self, db_engine: Engine) -> None:
        pk = inspect(db_engine).get_pk_constraint("cells")
        assert pk["constrained_columns"] == ["row_id", "column_name"]

    def test_version_defaults_to_zero(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            conn.execute(insert(cells).values(**_ROW))
            assert conn.execute(cells.select()).one().version == 0

    def test_duplicate_key_rejected(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            conn.execute(insert(cells).values(**_ROW))
        with pytest.raises(IntegrityError), db_engine.begin() as conn:
            conn.execute(insert(cells).values(**_ROW))

    def test_same_row_different_column_allowed(self, db_engine: Engine) -> None:
        with db_engine.begin() as conn:
            conn.execute(insert(cells).values(**_ROW))
            conn.execute(insert(cells).values(**{**_ROW, "column_name": "c2"}))
            assert len(conn.execute(cells.select()).all()) == 2


class TestActionLogTable:
    def test_columns(self, db_engine: Engine) -> None:
        names = {c["name"] for c in inspect(db_engine).get_columns("action_log")}
        assert names == {"id", "name", "params", "created_at"}
        assert action_log.c.id.primary_key
