"""Tests for ServiceResult and ServiceError."""

import pytest
from pydantic import ValidationError

from cellvault.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_defaults(self) -> None:
        result = ServiceResult(ok=True, op="get")
        assert result.data == {}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_failure_carries_error(self) -> None:
        result = ServiceResult(
            ok=False,
            op="update",
            error=ServiceError(code="OPTIMISTIC_LOCK", message="stale", detail={"version": 0}),
        )
        assert result.error.code == "OPTIMISTIC_LOCK"
        assert result.error.detail == {"version": 0}

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="get")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]

    def test_json_round_trip(self) -> None:
        result = ServiceResult(ok=True, op="put", data={"added": 1}, warnings=["w"])
        assert ServiceResult.model_validate_json(result.model_dump_json()) == result
