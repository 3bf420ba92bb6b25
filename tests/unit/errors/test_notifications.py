"""Tests for domain exceptions and the notifications built from them."""

import pytest

from permissions_manager.core.errors import (
    DuplicateNameError,
    GuardMismatchError,
    InUseError,
    NotFoundError,
    ProtectedError,
    TransactionFailedError,
    ValidationFailedError,
)
from permissions_manager.core.schemas import Notification, Severity


pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("exc", "error_code", "status_code"),
    [
        (NotFoundError("Role not found"), "not_found", 404),
        (DuplicateNameError(entity="role"), "duplicate_name", 409),
        (ProtectedError("Admin"), "protected", 409),
        (InUseError("Editor", count=1), "in_use", 409),
        (GuardMismatchError(expected="web", actual="api"), "guard_mismatch", 422),
        (ValidationFailedError(field="name", rule="required"), "validation_error", 422),
        (TransactionFailedError(entity="role"), "transaction_failed", 500),
    ],
)
def test_error_codes(exc, error_code, status_code):
    assert exc.error_code == error_code
    assert exc.status_code == status_code


def test_duplicate_name_messages():
    assert DuplicateNameError(entity="permission").message == (
        "A permission with this name already exists for this guard."
    )


def test_in_use_carries_count_in_details():
    assert InUseError("Editor", count=4).details == {"count": 4}


def test_validation_error_details():
    exc = ValidationFailedError(field="guard_name", rule="in")

    assert exc.details == {"errors": [{"field": "guard_name", "rule": "in"}]}


def test_notification_from_exception():
    notification = Notification.from_exception(ProtectedError("Admin"))

    assert notification.severity is Severity.DANGER
    assert notification.message == "Cannot delete protected role: Admin"


def test_success_notification():
    notification = Notification.success("Role successfully created.")

    assert notification.severity is Severity.SUCCESS
    assert notification.heading == "Success"
