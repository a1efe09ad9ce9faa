"""Tests for UpgradeService — database migration with Alembic."""

from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from sqlalchemy import inspect

from cellvault.config.settings import CellSettings
from cellvault.infrastructure.database.engine import create_db_engine
from cellvault.infrastructure.database.migrations import build_config
from cellvault.infrastructure.repository import Repository
from cellvault.services.upgrade import UpgradeService

# ---------------------------------------------------------------------------
# check_pending()
# ---------------------------------------------------------------------------


class TestCheckPending:
    def test_unstamped_db_has_pending(self, repo: Repository) -> None:
        result = UpgradeService(repo).check_pending()
        assert result.ok
        assert result.data["current"] is None
        assert result.data["pending_count"] == 1
        assert result.data["pending"][0]["revision"] == "001_baseline"

    def test_stamped_db_has_none_pending(self, repo: Repository) -> None:
        svc = UpgradeService(repo)
        svc.stamp_current()
        result = svc.check_pending()
        assert result.ok
        assert result.data["pending_count"] == 0
        assert result.data["current"] == result.data["head"] == "001_baseline"


# ---------------------------------------------------------------------------
# apply()
# ---------------------------------------------------------------------------


class TestApply:
    def test_apply_already_current(self, repo: Repository) -> None:
        svc = UpgradeService(repo)
        svc.stamp_current()
        result = svc.apply()
        assert result.ok
        assert result.data["applied_count"] == 0
        assert "already up to date" in result.data["message"].lower()

    def test_apply_stamps_existing_tables(self, repo: Repository) -> None:
        result = UpgradeService(repo).apply()
        assert result.ok, result.error
        assert result.data["applied_count"] == 1
        assert result.data["current"] == "001_baseline"
        assert UpgradeService(repo).check_pending().data["pending_count"] == 0

    def test_apply_creates_backup(self, repo: Repository, tmp_path: Path) -> None:
        result = UpgradeService(repo).apply()
        backup = Path(result.data["backup_path"])
        assert backup.exists()
        assert backup.parent == tmp_path / ".cellvault" / "backups"

    def test_backups_pruned_to_max_count(self, repo: Repository, tmp_path: Path) -> None:
        backup_dir = tmp_path / ".cellvault" / "backups"
        for i in range(12):
            (backup_dir / f"cells-20200101T0000{i:02d}.db").write_bytes(b"")
        UpgradeService(repo).apply()
        assert len(list(backup_dir.glob("cells-*.db"))) == 10

    def test_external_store_skips_backup(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        db_file = tmp_path / "external.db"
        monkeypatch.setenv("CELLVAULT_STORE__URL", f"sqlite:///{db_file}")
        repo = Repository(CellSettings.from_cli(root=tmp_path))
        try:
            result = UpgradeService(repo).apply()
            assert result.ok, result.error
            assert "backup_path" not in result.data
        finally:
            repo.close()

    def test_migration_runs_on_bare_database(self, tmp_path: Path) -> None:
        """A database without tables is migrated by Alembic rather than stamped."""
        db_file = tmp_path / "bare.db"
        command.upgrade(build_config(f"sqlite:///{db_file}"), "head")
        engine = create_db_engine(db_file)
        try:
            assert {"cells", "action_log", "alembic_version"} <= set(
                inspect(engine).get_table_names()
            )
        finally:
            engine.dispose()


# ---------------------------------------------------------------------------
# stamp_current() / initialize()
# ---------------------------------------------------------------------------


class TestStamp:
    def test_stamp_current(self, repo: Repository) -> None:
        result = UpgradeService(repo).stamp_current()
        assert result.ok
        assert result.data == {"stamped": True, "current": "001_baseline"}


class TestInitialize:
    def test_initialize_stamps_fresh_db(self, repo: Repository) -> None:
        result = UpgradeService(repo).initialize()
        assert result.ok, result.error
        assert result.op == "init"
        assert result.data["current"] == "001_baseline"
        assert result.data["db_url"] == repo.settings.db_url

    def test_initialize_is_idempotent(self, repo: Repository) -> None:
        svc = UpgradeService(repo)
        svc.initialize()
        result = svc.initialize()
        assert result.ok
        assert result.data["current"] == "001_baseline"
