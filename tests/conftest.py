"""Shared pytest fixtures and test helpers for cellvault tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from cellvault.config.settings import CellSettings
from cellvault.domain.cells import Item, Ref
from cellvault.infrastructure.database.engine import init_database
from cellvault.infrastructure.repository import Repository
from cellvault.infrastructure.store import CellStore
from cellvault.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _reset_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host env vars and leaked telemetry state out of every test."""
    monkeypatch.delenv("CELLVAULT_CONFIG", raising=False)
    monkeypatch.delenv("CELLVAULT_STORE__URL", raising=False)
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store(db_engine: Engine) -> CellStore:
    """CellStore over a fresh database."""
    return CellStore(db_engine)


@pytest.fixture
def settings(tmp_path: Path) -> CellSettings:
    return CellSettings.from_cli(root=tmp_path)


@pytest.fixture
def repo(settings: CellSettings) -> Iterator[Repository]:
    """Fully initialized repository on a temp directory."""
    r = Repository(settings)
    try:
        yield r
    finally:
        r.close()


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated store.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test models
# ---------------------------------------------------------------------------


class BytesModel:
    """Stores a fixed payload verbatim."""

    def __init__(self, value: bytes = b"") -> None:
        self.value = value

    def marshal(self) -> Item:
        return Item(value=self.value)

    def unmarshal(self, ref: Ref, data: bytes) -> None:
        self.value = data


class FailingModel:
    """Always fails to marshal."""

    def __init__(self, message: str = "cannot encode") -> None:
        self.message = message
        self.calls = 0

    def marshal(self) -> Item:
        self.calls += 1
        return Item(error=ValueError(self.message))

    def unmarshal(self, ref: Ref, data: bytes) -> None:
        raise AssertionError("FailingModel is never read back")


class RaisingModel:
    """Raises out of marshal() instead of returning an error item."""

    def marshal(self) -> Item:
        raise RuntimeError("encoder crashed")

    def unmarshal(self, ref: Ref, data: bytes) -> None:
        raise AssertionError("RaisingModel is never read back")


@pytest.fixture
def failing_model() -> type[FailingModel]:
    return FailingModel


@pytest.fixture
def bytes_model() -> type[BytesModel]:
    return BytesModel


@pytest.fixture
def raising_model() -> type[RaisingModel]:
    return RaisingModel
