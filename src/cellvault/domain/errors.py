"""Error taxonomy for cell reads and batch applies.

Every failure of ``CellStore.apply_changes`` aborts the whole batch and
surfaces as exactly one of:

- :class:`MarshalError` — a model could not produce its payload.
- :class:`StoreError` — the store rejected a statement
  (:class:`DuplicateKeyError` for an insert on an existing cell).
- :class:`OptimisticLockError` — the held version is stale.
- :class:`InvariantViolationError` — a conditional update touched more than
  one row. Fatal; never retry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cellvault.domain.cells import Ref


class CellVaultError(Exception):
    """Base class for all cellvault errors."""


class NotFoundError(CellVaultError):
    """No cell exists at (row_id, column_name)."""

    def __init__(self, row_id: str, column_name: str) -> None:
        super().__init__(f"No cell found at ({row_id!r}, {column_name!r})")
        self.row_id = row_id
        self.column_name = column_name


class MarshalError(CellVaultError):
    """A model could not be marshaled into a bytes payload.

    Covers an :class:`Item` carrying an error, a ``marshal()`` that raised,
    and a payload that is not ``bytes``.
    """

    def __init__(self, ref: Ref, cause: Exception) -> None:
        super().__init__(f"Failed to marshal {ref.key}: {cause}")
        self.ref = ref
        self.cause = cause


class StoreError(CellVaultError):
    """The underlying store failed. The driver exception is the ``__cause__``."""


class DuplicateKeyError(StoreError):
    """An insert hit the (row_id, column_name) uniqueness constraint."""

    def __init__(self, ref: Ref) -> None:
        super().__init__(f"Cell already exists at {ref.key}")
        self.ref = ref


class OptimisticLockError(CellVaultError):
    """The conditional update matched zero rows: another writer got there first."""

    def __init__(self, ref: Ref) -> None:
        super().__init__(f"optimistic lock: {ref.key} is no longer at version {ref.version}")
        self.ref = ref


class InvariantViolationError(CellVaultError):
    """A conditional update touched more than one record."""

    def __init__(self, ref: Ref, affected: int) -> None:
        super().__init__(f"more than one record updated for {ref.key} ({affected} rows)")
        self.ref = ref
        self.affected = affected
