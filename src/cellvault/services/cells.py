"""CellService — single-cell reads and JSON document writes.

Writes stage :class:`JsonModel` entities into a batch and go through
``BaseService._apply_batch``, so a put or update is atomic and version
checked exactly like a multi-cell batch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from cellvault.domain.batch import Batch, Entity
from cellvault.domain.cells import JsonModel, Ref
from cellvault.domain.errors import NotFoundError, StoreError
from cellvault.services.base import BaseService, error_result
from cellvault.services.contracts import BatchDocument, CellData, dump_validated
from cellvault.services.result import ServiceError, ServiceResult
from cellvault.services.telemetry import traced

if TYPE_CHECKING:
    from cellvault.services.contracts import CellInput


def entity_for(cell: CellInput) -> Entity:
    """Bind a JSON document to the Ref described by *cell*."""
    ref = Ref(row_id=cell.row, column_name=cell.column, version=cell.version)
    return Entity(model=JsonModel(cell.data), ref=ref)


def build_batch(document: BatchDocument) -> Batch:
    """Stage every add and update of *document*, preserving file order."""
    batch = Batch()
    for cell in document.add:
        batch.add(entity_for(cell))
    for cell in document.update:
        batch.update(entity_for(cell))
    return batch


def _invalid(op: str, exc: ValidationError) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="INVALID_INPUT",
            message=f"Invalid input: {exc.error_count()} validation error(s)",
            detail={"errors": exc.errors(include_url=False, include_context=False)},
        ),
    )


class CellService(BaseService):
    """Reads and writes JSON document cells."""

    @traced
    def get(self, row_id: str, column_name: str) -> ServiceResult:
        """Look up one cell and decode its JSON payload."""
        op = "get"
        try:
            entity = self._repo.store.load(row_id, column_name, JsonModel())
        except (NotFoundError, StoreError) as exc:
            return error_result(op, exc)
        except ValueError as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(
                    code="UNMARSHAL_FAILED",
                    message=f"Cell ({row_id!r}, {column_name!r}) is not a JSON document: {exc}",
                ),
            )

        ref = entity.ref
        assert isinstance(entity.model, JsonModel)
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(
                CellData,
                {
                    "row_id": ref.row_id,
                    "column_name": ref.column_name,
                    "version": ref.version,
                    "created_at": ref.created_at.isoformat(),
                    "updated_at": ref.updated_at.isoformat(),
                    "data": entity.model.data,
                },
            ),
        )

    @traced
    def put(self, row_id: str, column_name: str, data: dict[str, Any]) -> ServiceResult:
        """Create a new cell at version 0. Fails with DUPLICATE_KEY if it exists."""
        document = {"add": [{"row": row_id, "column": column_name, "data": data}]}
        return self.apply(document, op="put")

    @traced
    def update(
        self,
        row_id: str,
        column_name: str,
        data: dict[str, Any],
        *,
        expected_version: int,
    ) -> ServiceResult:
        """Replace a cell's payload if it is still at *expected_version*."""
        document = {
            "update": [
                {"row": row_id, "column": column_name, "data": data, "version": expected_version}
            ]
        }
        return self.apply(document, op="update")

    @traced
    def apply(
        self,
        document: dict[str, Any],
        *,
        op: str = "apply",
        action: str | None = None,
    ) -> ServiceResult:
        """Validate a batch document and apply it atomically.

        *document* has the shape ``{"add": [cell, ...], "update": [cell, ...]}``
        where each cell is ``{"row", "column", "data", "version"}``.
        """
        try:
            parsed = BatchDocument.model_validate(document)
        except ValidationError as exc:
            return _invalid(op, exc)

        batch = build_batch(parsed)
        params = {
            "cells": [[e.ref.row_id, e.ref.column_name] for e in (*batch.added, *batch.updated)]
        }
        return self._apply_batch(op, batch, action=action or op, params=params)
