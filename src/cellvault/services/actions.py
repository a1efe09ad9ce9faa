"""ActionService — run a named action as one atomic batch plus an audit entry.

An action stages its writes into a fresh :class:`Batch`; the service applies
that batch atomically and, only after it commits, records the action name
and parameters in the action log. The log write is outside the batch
transaction and is best-effort.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import ValidationError

from cellvault.domain.batch import Batch
from cellvault.services.base import BaseService
from cellvault.services.cells import build_batch
from cellvault.services.contracts import BatchDocument
from cellvault.services.result import ServiceError, ServiceResult
from cellvault.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


@runtime_checkable
class Action(Protocol):
    """A named unit of work that stages cell writes."""

    name: str

    def execute(self, params: Mapping[str, Any], batch: Batch) -> None:
        """Stage this action's adds and updates into *batch*."""
        ...


class DocumentBatchAction:
    """Stages a validated JSON batch document under a caller-chosen name."""

    def __init__(self, name: str, document: dict[str, Any]) -> None:
        self.name = name
        self._document = document

    def execute(self, params: Mapping[str, Any], batch: Batch) -> None:
        staged = build_batch(BatchDocument.model_validate(self._document))
        for entity in staged.added:
            batch.add(entity)
        for entity in staged.updated:
            batch.update(entity)


class ActionService(BaseService):
    """Runs actions against the repository."""

    @traced
    def run(self, action: Action, params: dict[str, Any] | None = None) -> ServiceResult:
        """Stage *action* into a new batch, apply it, then log it."""
        op = "run_action"
        params = dict(params or {})
        batch = Batch()

        with trace_span(f"execute:{action.name}"):
            try:
                action.execute(params, batch)
            except ValidationError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="INVALID_INPUT",
                        message=f"Invalid batch for action {action.name!r}: "
                        f"{exc.error_count()} validation error(s)",
                        detail={"errors": exc.errors(include_url=False, include_context=False)},
                    ),
                )
            except Exception as exc:
                logger.debug("Action %s failed while staging", action.name, exc_info=True)
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="ACTION_FAILED",
                        message=f"Action {action.name!r} failed: {exc}",
                    ),
                )

        return self._apply_batch(op, batch, action=action.name, params=params)
