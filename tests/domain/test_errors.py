"""Tests for the cell error taxonomy."""

import pytest

from cellvault.domain.cells import Ref
from cellvault.domain.errors import (
    CellVaultError,
    DuplicateKeyError,
    InvariantViolationError,
    MarshalError,
    NotFoundError,
    OptimisticLockError,
    StoreError,
)


@pytest.fixture
def ref() -> Ref:
    return Ref(row_id="r1", column_name="c1", version=4)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_type",
        [NotFoundError, MarshalError, StoreError, OptimisticLockError, InvariantViolationError],
    )
    def test_all_derive_from_base(self, exc_type: type[Exception]) -> None:
        assert issubclass(exc_type, CellVaultError)

    def test_duplicate_key_is_store_error(self) -> None:
        assert issubclass(DuplicateKeyError, StoreError)

    def test_lock_error_is_not_store_error(self) -> None:
        assert not issubclass(OptimisticLockError, StoreError)


class TestMessages:
    def test_not_found(self) -> None:
        exc = NotFoundError("r1", "c1")
        assert exc.row_id == "r1"
        assert exc.column_name == "c1"
        assert "'r1'" in str(exc)

    def test_marshal_keeps_cause(self, ref: Ref) -> None:
        cause = TypeError("bad")
        exc = MarshalError(ref, cause)
        assert exc.cause is cause
        assert exc.ref is ref
        assert "bad" in str(exc)

    def test_duplicate_key(self, ref: Ref) -> None:
        assert "already exists" in str(DuplicateKeyError(ref))

    def test_optimistic_lock(self, ref: Ref) -> None:
        msg = str(OptimisticLockError(ref))
        assert msg.startswith("optimistic lock")
        assert "version 4" in msg

    def test_invariant_violation(self, ref: Ref) -> None:
        exc = InvariantViolationError(ref, 2)
        assert exc.affected == 2
        assert "more than one record updated" in str(exc)
