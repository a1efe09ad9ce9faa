"""BaseService — shared foundation for cellvault services.

Every service receives a :class:`Repository` at construction time. Batch
application and the error-code mapping live here so every write path
reports conflicts the same way.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from cellvault.domain.errors import (
    DuplicateKeyError,
    InvariantViolationError,
    MarshalError,
    NotFoundError,
    OptimisticLockError,
    StoreError,
)
from cellvault.services.contracts import ApplyData, dump_validated
from cellvault.services.result import ServiceError, ServiceResult
from cellvault.services.telemetry import trace_span

if TYPE_CHECKING:
    from cellvault.domain.batch import Batch
    from cellvault.domain.errors import CellVaultError
    from cellvault.infrastructure.repository import Repository

logger = logging.getLogger(__name__)


def error_result(op: str, exc: CellVaultError) -> ServiceResult:
    """Translate a store exception into a failed ServiceResult."""
    detail: dict[str, Any] = {}
    ref = getattr(exc, "ref", None)
    if ref is not None:
        detail = {"row_id": ref.row_id, "column_name": ref.column_name, "version": ref.version}

    if isinstance(exc, NotFoundError):
        code = "NOT_FOUND"
        detail = {"row_id": exc.row_id, "column_name": exc.column_name}
    elif isinstance(exc, MarshalError):
        code = "MARSHAL_FAILED"
    elif isinstance(exc, DuplicateKeyError):
        code = "DUPLICATE_KEY"
    elif isinstance(exc, StoreError):
        code = "STORE_ERROR"
    elif isinstance(exc, OptimisticLockError):
        code = "OPTIMISTIC_LOCK"
    elif isinstance(exc, InvariantViolationError):
        code = "INVARIANT_VIOLATION"
        detail["affected"] = exc.affected
    else:
        code = "ERROR"

    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=str(exc), detail=detail),
    )


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class CellService(BaseService):
            def put(self, row, column, data) -> ServiceResult:
                batch = Batch()
                batch.add(...)
                return self._apply_batch("put", batch)
    """

    def __init__(self, repo: Repository) -> None:
        self._repo = repo

    def _apply_batch(
        self,
        op: str,
        batch: Batch,
        *,
        action: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Apply *batch* atomically, then record *action* in the action log.

        The log entry is written only after the batch commits and in its own
        transaction; a failed log write becomes a warning. An empty batch is
        refused with ``EMPTY_BATCH`` and nothing is logged.
        """
        if not batch:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="EMPTY_BATCH",
                    message=f"Nothing to apply for {action or op!r}: the batch stages no changes",
                ),
            )

        warnings: list[str] = []

        with trace_span("apply_changes") as span:
            try:
                self._repo.store.apply_changes(batch)
            except InvariantViolationError as exc:
                logger.error("Store invariant broken during %s: %s", op, exc)
                return error_result(op, exc)
            except (MarshalError, StoreError, OptimisticLockError) as exc:
                return error_result(op, exc)
            if span is not None:
                span.annotate("changes", len(batch))

        action_id: str | None = None
        if action is not None:
            action_id = self._log_action(action, params or {}, warnings)

        data = {
            "added": len(batch.added),
            "updated": len(batch.updated),
            "cells": [
                {
                    "row_id": change.entity.ref.row_id,
                    "column_name": change.entity.ref.column_name,
                    "version": change.entity.ref.version,
                }
                for change in batch.items()
            ],
            "action": action,
            "action_id": action_id,
        }
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(ApplyData, data),
            warnings=warnings,
        )

    def _log_action(self, name: str, params: dict[str, Any], warnings: list[str]) -> str | None:
        """Write an action log entry. No-op when the log is disabled.

        INVARIANT: Action log failures are warnings, never errors.
        """
        if not self._repo.settings.action_log.enabled:
            return None
        with trace_span("action_log"):
            try:
                return self._repo.action_log.write(name, params)
            except Exception:
                logger.debug("Action log write failed for %s", name, exc_info=True)
                warnings.append(f"Action log write failed for {name}")
                return None
