"""Versioned cell model: Ref, Item, and the Model capability.

A cell is addressed by ``(row_id, column_name)`` and carries a version that
only the store advances. Payloads are opaque bytes; the core never looks
inside them. Anything with ``marshal()`` and ``unmarshal()`` can be stored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


@dataclass
class Ref:
    """Identity, version and timestamps of a stored cell.

    Mutable only so the apply engine can mirror the store's version and
    ``updated_at`` after a committed update. Callers treat it as read-only.
    """

    row_id: str
    column_name: str
    version: int = 0
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if self.version < 0:
            msg = f"Version must be non-negative, got {self.version}"
            raise ValueError(msg)

    @property
    def key(self) -> tuple[str, str]:
        """The ``(row_id, column_name)`` pair that identifies the cell."""
        return (self.row_id, self.column_name)


@dataclass(frozen=True)
class Item:
    """Marshaled payload of a model, or the error that prevented marshaling."""

    value: bytes = b""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class Model(Protocol):
    """Capability set every persisted entity type implements."""

    def marshal(self) -> Item:
        """Encode the model. Report failures through ``Item.error``, not by raising."""
        ...

    def unmarshal(self, ref: Ref, data: bytes) -> None:
        """Populate the model from stored *data* read at *ref*."""
        ...


class JsonModel:
    """Generic document model: a JSON object stored as compact UTF-8 bytes."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})

    def marshal(self) -> Item:
        try:
            encoded = json.dumps(self.data, separators=(",", ":"), sort_keys=True)
        except (TypeError, ValueError) as exc:
            return Item(error=exc)
        return Item(value=encoded.encode("utf-8"))

    def unmarshal(self, ref: Ref, data: bytes) -> None:
        decoded = json.loads(data.decode("utf-8"))
        if not isinstance(decoded, dict):
            msg = f"Cell {ref.key} does not hold a JSON object"
            raise ValueError(msg)
        self.data = decoded

    def __repr__(self) -> str:
        return f"JsonModel({self.data!r})"
