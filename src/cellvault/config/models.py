"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``cellvault.toml`` only holds
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    url: str | None = None  # None: SQLite at {root}/.cellvault/cells.db
    busy_timeout: float = Field(default=5.0, ge=0)
    echo: bool = False


class ActionLogConfig(BaseModel):
    """[action_log] section."""

    model_config = {"frozen": True}

    enabled: bool = True


class BackupConfig(BaseModel):
    """[backup] section."""

    model_config = {"frozen": True}

    max_count: int = Field(default=10, ge=1)


class CellVaultConfig(BaseModel):
    """Root configuration model — all sections with defaults."""

    model_config = {"frozen": True}

    store: StoreConfig = Field(default_factory=StoreConfig)
    action_log: ActionLogConfig = Field(default_factory=ActionLogConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
