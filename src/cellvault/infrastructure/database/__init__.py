"""Database engine and schema via SQLAlchemy Core."""

from cellvault.infrastructure.database.engine import (
    create_db_engine,
    default_db_path,
    init_database,
)
from cellvault.infrastructure.database.schema import action_log, cells, metadata

__all__ = [
    "action_log",
    "cells",
    "create_db_engine",
    "default_db_path",
    "init_database",
    "metadata",
]
