"""SQLAlchemy Core table definitions for the cellvault database.

``cells`` holds the versioned payloads; its primary key on
``(row_id, column_name)`` is what turns a second insert of the same cell
into a duplicate-key failure. ``action_log`` is written independently of
any batch transaction.
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, LargeBinary, MetaData, PrimaryKeyConstraint, Table, Text

metadata = MetaData()

cells = Table(
    "cells",
    metadata,
    Column("row_id", Text, nullable=False),
    Column("column_name", Text, nullable=False),
    Column("version", Integer, nullable=False, default=0, server_default="0"),
    Column("data", LargeBinary, nullable=False),
    Column("created_at", Text, nullable=False),  # ISO 8601, UTC
    Column("updated_at", Text, nullable=False),  # ISO 8601, UTC
    PrimaryKeyConstraint("row_id", "column_name", name="pk_cells"),
)

action_log = Table(
    "action_log",
    metadata,
    Column("id", Text, primary_key=True),  # uuid4
    Column("name", Text, nullable=False),
    Column("params", Text, nullable=False),  # JSON object
    Column("created_at", Text, nullable=False),
)
