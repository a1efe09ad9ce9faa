"""Repository — the single dependency injected into every service.

Owns the SQLAlchemy engine and the two writers built on it: the
:class:`CellStore` (atomic batches) and the :class:`ActionLog` (audit
entries in their own transactions). The engine's connection pool is shared
by both and by every thread using this repository.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cellvault.infrastructure.action_log import ActionLog
from cellvault.infrastructure.database.engine import init_database
from cellvault.infrastructure.store import CellStore

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.engine import Engine

    from cellvault.config.settings import CellSettings

logger = logging.getLogger(__name__)


class Repository:
    """Database-backed cell repository built from :class:`CellSettings`."""

    def __init__(self, settings: CellSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(
            settings.root,
            url=settings.store.url,
            busy_timeout=settings.store.busy_timeout,
            echo=settings.store.echo,
        )
        self._store = CellStore(self._engine)
        self._action_log = ActionLog(self._engine)
        logger.debug("Opened repository at %s", self._engine.url)

    @property
    def root(self) -> Path:
        return self._settings.root

    @property
    def settings(self) -> CellSettings:
        return self._settings

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def store(self) -> CellStore:
        return self._store

    @property
    def action_log(self) -> ActionLog:
        return self._action_log

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()
