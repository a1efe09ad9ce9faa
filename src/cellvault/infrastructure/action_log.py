"""Audit log of named actions and their parameters.

Each entry is written in its own short transaction. It is never part of a
batch's transaction, so a logged action does not prove its batch committed
and a failed log write does not undo one. Treat log/data consistency as
best-effort.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert

from cellvault.domain.cells import utc_now
from cellvault.infrastructure.database.schema import action_log

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


class ActionLog:
    """Writes ``action_log`` rows through its own connection."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def write(self, name: str, params: dict[str, Any] | None = None) -> str:
        """Record that action *name* ran with *params*.

        Returns the new entry id. Serialization and store errors propagate;
        deciding whether they matter is the caller's call.
        """
        entry_id = str(uuid.uuid4())
        encoded = json.dumps(params or {}, sort_keys=True)

        with self._engine.begin() as conn:
            conn.execute(
                insert(action_log).values(
                    id=entry_id,
                    name=name,
                    params=encoded,
                    created_at=utc_now().isoformat(),
                )
            )

        logger.debug("Logged action %s (%s)", name, entry_id)
        return entry_id
