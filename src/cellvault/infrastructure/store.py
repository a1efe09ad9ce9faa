"""CellStore — single-cell reads and atomic, version-checked batch applies.

:meth:`CellStore.apply_changes` runs every change of a :class:`Batch` inside
one ``engine.begin()`` block:

- **Add**: marshal, then INSERT with the entity's version. The primary key
  on ``(row_id, column_name)`` rejects a second insert of the same cell.
  Any other integrity failure (a NOT NULL or CHECK constraint) is a plain
  store error, not a duplicate.
- **Update**: marshal, then
  ``UPDATE ... SET version = v + 1 WHERE row_id, column_name, version = v``.
  The affected row count is the whole conflict check: 1 is success, 0 means
  another writer advanced the cell, more than 1 means the key is broken.

Any error leaves the block by exception, which rolls the transaction back
and returns the connection to the pool. Nothing is retried here.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cellvault.domain.batch import ChangeType, Entity
from cellvault.domain.cells import Ref, utc_now
from cellvault.domain.errors import (
    DuplicateKeyError,
    InvariantViolationError,
    MarshalError,
    NotFoundError,
    OptimisticLockError,
    StoreError,
)
from cellvault.infrastructure.database.schema import cells

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from cellvault.domain.batch import Batch
    from cellvault.domain.cells import Model

logger = logging.getLogger(__name__)


def _to_text(ts: datetime) -> str:
    return ts.isoformat()


def _from_text(raw: str) -> datetime:
    return datetime.fromisoformat(raw)


# ---------------------------------------------------------------------------
# Per-change statements (run on the batch connection)
# ---------------------------------------------------------------------------


# Driver messages for a primary-key or unique violation (SQLite, PostgreSQL, MySQL).
_DUPLICATE_MARKERS = ("unique constraint", "primary key", "duplicate key", "duplicate entry")


def _marshal(entity: Entity) -> bytes:
    """Payload of *entity*, or MarshalError however the model failed."""
    ref = entity.ref
    try:
        item = entity.marshal()
    except Exception as exc:
        raise MarshalError(ref, exc) from exc
    if item.error is not None:
        raise MarshalError(ref, item.error)
    if not isinstance(item.value, bytes):
        cause = TypeError(f"payload must be bytes, got {type(item.value).__name__}")
        raise MarshalError(ref, cause)
    return item.value


def _is_duplicate_key(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return any(marker in message for marker in _DUPLICATE_MARKERS)


def _insert_cell(conn: Connection, entity: Entity) -> None:
    ref = entity.ref
    payload = _marshal(entity)

    try:
        conn.execute(
            insert(cells).values(
                row_id=ref.row_id,
                column_name=ref.column_name,
                version=ref.version,
                data=payload,
                created_at=_to_text(ref.created_at),
                updated_at=_to_text(ref.updated_at),
            )
        )
    except IntegrityError as exc:
        if _is_duplicate_key(exc):
            raise DuplicateKeyError(ref) from exc
        msg = f"Failed to insert {ref.key}: {exc.orig}"
        raise StoreError(msg) from exc


def _update_cell(conn: Connection, entity: Entity) -> tuple[Ref, int, datetime]:
    """Conditionally update one cell.

    Returns ``(ref, new_version, updated_at)`` for the caller to mirror onto
    the entity once the batch commits.
    """
    ref = entity.ref
    payload = _marshal(entity)

    now = utc_now()
    result = conn.execute(
        update(cells)
        .where(
            cells.c.row_id == ref.row_id,
            cells.c.column_name == ref.column_name,
            cells.c.version == ref.version,
        )
        .values(data=payload, version=ref.version + 1, updated_at=_to_text(now))
    )

    affected = result.rowcount
    if affected == 1:
        return ref, ref.version + 1, now
    if affected == 0:
        raise OptimisticLockError(ref)
    raise InvariantViolationError(ref, affected)


# ---------------------------------------------------------------------------
# CellStore
# ---------------------------------------------------------------------------


class CellStore:
    """Versioned cell repository over a SQLAlchemy engine.

    Safe to share between threads: every call checks a connection out of
    the engine's pool for its own duration.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine."""
        return self._engine

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield a connection inside one transaction.

        Commits when the block exits normally, rolls back when it raises.
        The connection goes back to the pool either way.
        """
        with self._engine.begin() as conn:
            yield conn

    def get(self, row_id: str, column_name: str) -> tuple[Ref, bytes]:
        """Read the latest state of a cell.

        Raises:
            NotFoundError: No cell at ``(row_id, column_name)``.
            StoreError: The read itself failed.
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(
                    select(cells).where(
                        cells.c.row_id == row_id,
                        cells.c.column_name == column_name,
                    )
                ).first()
        except SQLAlchemyError as exc:
            msg = f"Failed to read cell ({row_id!r}, {column_name!r}): {exc}"
            raise StoreError(msg) from exc

        if row is None:
            raise NotFoundError(row_id, column_name)

        ref = Ref(
            row_id=row.row_id,
            column_name=row.column_name,
            version=row.version,
            created_at=_from_text(row.created_at),
            updated_at=_from_text(row.updated_at),
        )
        return ref, bytes(row.data)

    def load(self, row_id: str, column_name: str, model: Model) -> Entity:
        """Read a cell and unmarshal it into *model*, returning the bound entity."""
        ref, data = self.get(row_id, column_name)
        model.unmarshal(ref, data)
        return Entity(model=model, ref=ref)

    def apply_changes(self, batch: Batch) -> None:
        """Apply every change in *batch* atomically.

        Raises:
            MarshalError: A model failed to marshal.
            DuplicateKeyError: An added cell already exists.
            StoreError: Any other store failure, including on commit.
            OptimisticLockError: An updated entity holds a stale version.
            InvariantViolationError: An update touched more than one row.
        """
        changes = batch.items()
        advanced: list[tuple[Ref, int, datetime]] = []
        logger.debug("Applying batch of %d changes", len(changes))

        try:
            with self.transaction() as conn:
                for change in changes:
                    if change.type is ChangeType.ADD:
                        _insert_cell(conn, change.entity)
                    else:
                        advanced.append(_update_cell(conn, change.entity))
        except OptimisticLockError as exc:
            logger.info("Batch rolled back on version conflict at %s", exc.ref.key)
            raise
        except InvariantViolationError:
            logger.error("Batch rolled back: update matched more than one cell", exc_info=True)
            raise
        except (MarshalError, StoreError) as exc:
            logger.debug("Batch rolled back: %s", exc)
            raise
        except SQLAlchemyError as exc:
            msg = f"Failed to apply batch: {exc}"
            raise StoreError(msg) from exc

        for ref, version, updated_at in advanced:
            ref.version = version
            ref.updated_at = updated_at
        logger.debug("Committed batch of %d changes", len(changes))
