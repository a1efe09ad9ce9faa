"""Database engine setup.

SQLite is the default store: WAL mode so readers never block the single
writer, and a busy timeout so concurrent appliers wait for the write lock
instead of failing immediately. Any other SQLAlchemy URL is accepted via
``[store] url`` and used as-is.

The default DB lives at ``{root}/.cellvault/cells.db``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url

from cellvault.infrastructure.database.schema import metadata

DATA_DIRNAME = ".cellvault"
DB_FILENAME = "cells.db"


def default_db_path(root: Path) -> Path:
    """Path of the default SQLite database under *root*."""
    return root / DATA_DIRNAME / DB_FILENAME


def create_db_engine(
    url: str | Path,
    *,
    busy_timeout: float = 5.0,
    echo: bool = False,
) -> Engine:
    """Create an engine for *url* (a SQLAlchemy URL or a SQLite file path)."""
    if isinstance(url, Path):
        url = f"sqlite:///{url}"

    if make_url(url).get_backend_name() != "sqlite":
        return create_engine(url, echo=echo)

    engine = create_engine(url, echo=echo, connect_args={"timeout": busy_timeout})

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_database(
    root: Path,
    *,
    url: str | None = None,
    busy_timeout: float = 5.0,
    echo: bool = False,
) -> Engine:
    """Create the data directory (for the default SQLite DB) and all tables.

    Idempotent — safe to call on an existing store.

    Returns the engine ready for use.
    """
    data_dir = root / DATA_DIRNAME
    if url is None:
        data_dir.mkdir(parents=True, exist_ok=True)
        (data_dir / "backups").mkdir(exist_ok=True)
        engine = create_db_engine(default_db_path(root), busy_timeout=busy_timeout, echo=echo)
    else:
        engine = create_db_engine(url, busy_timeout=busy_timeout, echo=echo)

    metadata.create_all(engine)
    return engine
