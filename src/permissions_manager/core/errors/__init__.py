"""Error handling module with RFC 7807 Problem Details."""

from permissions_manager.core.errors.exceptions import (
    AppException,
    ConflictError,
    DuplicateNameError,
    GuardMismatchError,
    InUseError,
    NotFoundError,
    ProtectedError,
    TransactionFailedError,
    ValidationFailedError,
)


__all__ = [
    "AppException",
    "ConflictError",
    "DuplicateNameError",
    "GuardMismatchError",
    "InUseError",
    "NotFoundError",
    "ProtectedError",
    "TransactionFailedError",
    "ValidationFailedError",
]
