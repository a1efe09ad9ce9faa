"""UpgradeService — database table migrations with Alembic.

Pipeline: BACKUP → MIGRATE → REPORT

Only table layout is migrated here. Cell payloads are opaque and are never
rewritten.
"""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING, Any

from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from cellvault.infrastructure.database.engine import DATA_DIRNAME, default_db_path
from cellvault.infrastructure.database.migrations import build_config
from cellvault.services._helpers import now_compact
from cellvault.services.base import BaseService
from cellvault.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class UpgradeService(BaseService):
    """Handles database schema migrations via Alembic."""

    def _tables_exist(self) -> bool:
        """Check if core tables exist (database created before Alembic stamping)."""
        return "cells" in inspect(self._repo.engine).get_table_names()

    def _backup_db(self) -> Path | None:
        """Copy the default SQLite database aside. None for external stores."""
        if self._repo.settings.store.url is not None:
            return None

        backup_dir = self._repo.root / DATA_DIRNAME / "backups"
        backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = backup_dir / f"cells-{now_compact()}.db"
        shutil.copy2(default_db_path(self._repo.root), backup_path)

        backups = sorted(backup_dir.glob("cells-*.db"))
        max_count = self._repo.settings.backup.max_count
        for old in backups[: max(0, len(backups) - max_count)]:
            old.unlink(missing_ok=True)
        return backup_path

    def check_pending(self) -> ServiceResult:
        """List pending migrations without applying."""
        op = "upgrade"

        try:
            cfg = build_config(self._repo.settings.db_url)
            script = ScriptDirectory.from_config(cfg)
            head = script.get_current_head()

            with self._repo.engine.connect() as conn:
                current = MigrationContext.configure(conn).get_current_revision()

            pending: list[dict[str, Any]] = []
            if current != head and head is not None:
                rev_obj = script.get_revision(head)
                while rev_obj is not None and rev_obj.revision != current:
                    pending.append({"revision": rev_obj.revision, "description": rev_obj.doc or ""})
                    down = rev_obj.down_revision
                    if down is None:
                        break
                    rev_obj = script.get_revision(str(down))

            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "pending_count": len(pending),
                    "pending": pending,
                    "current": current,
                    "head": head,
                },
            )
        except Exception as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="CHECK_FAILED",
                    message=f"Failed to check migrations: {exc}",
                ),
            )

    def apply(self) -> ServiceResult:
        """BACKUP → MIGRATE → REPORT pipeline."""
        op = "upgrade"

        check_result = self.check_pending()
        if not check_result.ok:
            return check_result

        pending_count = check_result.data["pending_count"]
        if pending_count == 0:
            return ServiceResult(
                ok=True,
                op=op,
                data={
                    "applied_count": 0,
                    "current": check_result.data["head"],
                    "message": "Database is already up to date",
                },
            )

        try:
            backup_path = self._backup_db()
        except OSError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="BACKUP_FAILED", message=f"Backup failed: {exc}"),
            )

        try:
            cfg = build_config(self._repo.settings.db_url)
            if check_result.data.get("current") is None and self._tables_exist():
                # Tables came from metadata.create_all; record them as head.
                command.stamp(cfg, "head")
            else:
                command.upgrade(cfg, "head")
        except Exception as exc:
            logger.debug("Migration failed", exc_info=True)
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="MIGRATION_FAILED",
                    message=f"Migration failed: {exc}. Backup at: {backup_path}",
                    detail={"backup_path": str(backup_path) if backup_path else None},
                ),
            )

        data: dict[str, Any] = {
            "applied_count": pending_count,
            "current": check_result.data["head"],
        }
        if backup_path is not None:
            data["backup_path"] = str(backup_path)
        return ServiceResult(ok=True, op=op, data=data)

    def stamp_current(self) -> ServiceResult:
        """Stamp DB as at current head (for freshly created DBs)."""
        op = "upgrade"

        try:
            cfg = build_config(self._repo.settings.db_url)
            command.stamp(cfg, "head")
            head = ScriptDirectory.from_config(cfg).get_current_head()
            return ServiceResult(ok=True, op=op, data={"stamped": True, "current": head})
        except Exception as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="STAMP_FAILED",
                    message=f"Failed to stamp database: {exc}",
                ),
            )

    def initialize(self) -> ServiceResult:
        """Report a freshly opened store and stamp it at head if unversioned."""
        op = "init"

        check_result = self.check_pending()
        if not check_result.ok:
            return check_result.model_copy(update={"op": op})

        current = check_result.data["current"]
        if current is None:
            stamped = self.stamp_current()
            if not stamped.ok:
                return stamped.model_copy(update={"op": op})
            current = stamped.data["current"]

        return ServiceResult(
            ok=True,
            op=op,
            data={"db_url": self._repo.settings.db_url, "current": current},
        )
