"""Domain layer — cells, entities, batches, and the error taxonomy.

This layer depends only on stdlib.
It must never import from services, infrastructure, commands, or config.
"""

from cellvault.domain.batch import Batch, Change, ChangeType, Entity
from cellvault.domain.cells import Item, JsonModel, Model, Ref, utc_now
from cellvault.domain.errors import (
    CellVaultError,
    DuplicateKeyError,
    InvariantViolationError,
    MarshalError,
    NotFoundError,
    OptimisticLockError,
    StoreError,
)

__all__ = [
    "Batch",
    "CellVaultError",
    "Change",
    "ChangeType",
    "DuplicateKeyError",
    "Entity",
    "InvariantViolationError",
    "Item",
    "JsonModel",
    "MarshalError",
    "Model",
    "NotFoundError",
    "OptimisticLockError",
    "Ref",
    "StoreError",
    "utc_now",
]
