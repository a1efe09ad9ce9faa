"""Typed payload contracts for service inputs and results.

Inputs coming from files or the command line are validated here before
anything is staged, and result payloads are validated before they leave the
service layer so their shape cannot drift silently.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound=BaseModel)


def dump_validated(model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    model = model_cls.model_validate(data)
    return model.model_dump(mode="json")


# --- Inputs -----------------------------------------------------------------


class CellInput(BaseModel):
    """One staged cell write: where, what, and (for updates) the held version."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    row: str = Field(min_length=1)
    column: str = Field(min_length=1)
    data: dict[str, Any]
    version: int = Field(default=0, ge=0)


class BatchDocument(BaseModel):
    """A batch file: ``{"add": [...], "update": [...]}``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    add: list[CellInput] = Field(default_factory=list)
    update: list[CellInput] = Field(default_factory=list)


# --- Results ----------------------------------------------------------------


class CellData(BaseModel):
    """Payload contract for ``CellService.get``."""

    row_id: str
    column_name: str
    version: int
    created_at: str
    updated_at: str
    data: dict[str, Any]


class CellVersion(BaseModel):
    """A cell key and the version it holds after an apply."""

    row_id: str
    column_name: str
    version: int


class ApplyData(BaseModel):
    """Payload contract for every batch-applying operation."""

    added: int
    updated: int
    cells: list[CellVersion]
    action: str | None = None
    action_id: str | None = None
