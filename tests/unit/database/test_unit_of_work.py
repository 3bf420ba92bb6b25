"""Tests for the transactional unit of work."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from permissions_manager.core.database import unit_of_work
from permissions_manager.core.database.unit_of_work import is_unique_violation
from permissions_manager.core.errors import (
    DuplicateNameError,
    ProtectedError,
    TransactionFailedError,
)


pytestmark = pytest.mark.unit


def integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO roles ...", {}, Exception(message))


@pytest.fixture
def calls() -> list[str]:
    return []


@pytest.fixture
def session(calls: list[str]) -> MagicMock:
    session = MagicMock()
    session.flush = AsyncMock(side_effect=lambda: calls.append("flush"))
    session.commit = AsyncMock(side_effect=lambda: calls.append("commit"))
    session.rollback = AsyncMock(side_effect=lambda: calls.append("rollback"))
    return session


@pytest.fixture
def registrar(calls: list[str]) -> MagicMock:
    registrar = MagicMock()
    registrar.invalidate = AsyncMock(side_effect=lambda: calls.append("invalidate"))
    return registrar


async def test_invalidates_after_flush_and_before_commit(session, registrar, calls):
    async with unit_of_work(session, registrar, entity="role"):
        calls.append("apply")

    assert calls == ["apply", "flush", "invalidate", "commit"]


async def test_domain_error_rolls_back_without_invalidating(session, registrar, calls):
    with pytest.raises(ProtectedError):
        async with unit_of_work(session, registrar, entity="role"):
            raise ProtectedError("Admin")

    assert calls == ["rollback"]
    registrar.invalidate.assert_not_awaited()


async def test_unique_violation_becomes_duplicate_name(session, registrar, calls):
    session.flush.side_effect = integrity_error(
        "UNIQUE constraint failed: index 'uq_roles_name_guard'"
    )

    with pytest.raises(DuplicateNameError) as exc_info:
        async with unit_of_work(session, registrar, entity="role"):
            pass

    assert exc_info.value.message == "A role with this name already exists for this guard."
    assert calls == ["rollback"]
    registrar.invalidate.assert_not_awaited()


async def test_other_integrity_error_is_transaction_failure(session, registrar):
    session.flush.side_effect = integrity_error("FOREIGN KEY constraint failed")

    with pytest.raises(TransactionFailedError) as exc_info:
        async with unit_of_work(session, registrar, entity="permission"):
            pass

    assert exc_info.value.message == (
        "An error occurred while saving the permission. Please try again."
    )


async def test_failed_invalidation_rolls_back(session, registrar, calls):
    registrar.invalidate.side_effect = ConnectionError("cache unavailable")

    with pytest.raises(TransactionFailedError):
        async with unit_of_work(session, registrar, entity="role"):
            calls.append("apply")

    assert calls == ["apply", "flush", "rollback"]
    session.commit.assert_not_awaited()


@pytest.mark.parametrize(
    "message",
    [
        "UNIQUE constraint failed: roles.name",
        'duplicate key value violates unique constraint "uq_roles_name_guard"',
        "Duplicate entry 'Admin-web' for key 'uq_roles_name_guard'",
    ],
)
def test_unique_violation_detection(message):
    assert is_unique_violation(integrity_error(message))


def test_not_null_is_not_a_unique_violation():
    assert not is_unique_violation(integrity_error("NOT NULL constraint failed"))
