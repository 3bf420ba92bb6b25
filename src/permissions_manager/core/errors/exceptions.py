"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
Each one also carries the user-facing message and severity shown to the
operator who triggered the operation.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        severity: Notification severity for the presentation layer
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500
    severity: str = "danger"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Role not found", resource="role", resource_id=str(role_id))
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data."""

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class DuplicateNameError(ConflictError):
    """Raised when a (name, guard) pair is already taken.

    Example:
        raise DuplicateNameError(entity="role", details={"name": "Editor"})
    """

    error_code = "duplicate_name"

    def __init__(self, entity: str = "record", **kwargs: Any) -> None:
        self.entity = entity
        message = kwargs.pop(
            "message", f"A {entity} with this name already exists for this guard."
        )
        super().__init__(message=message, **kwargs)


class ProtectedError(ConflictError):
    """Raised when a protected role would be deleted or stripped of protection."""

    error_code = "protected"

    def __init__(self, role_name: str, message: str | None = None, **kwargs: Any) -> None:
        self.role_name = role_name
        details = kwargs.pop("details", {})
        details["role"] = role_name
        super().__init__(
            message=message or f"Cannot delete protected role: {role_name}",
            details=details,
            **kwargs,
        )


class InUseError(ConflictError):
    """Raised when an entity still held by principals would be deleted.

    Example:
        raise InUseError("Editor", count=3)
    """

    error_code = "in_use"

    def __init__(self, name: str, count: int, **kwargs: Any) -> None:
        self.name = name
        self.count = count
        details = kwargs.pop("details", {})
        details["count"] = count
        super().__init__(
            message=(
                f"Cannot delete '{name}' because it is assigned to {count} user(s). "
                "Please remove user assignments first."
            ),
            details=details,
            **kwargs,
        )


class ValidationFailedError(AppException):
    """Raised when a field fails a business validation rule.

    Example:
        raise ValidationFailedError(field="category", rule="in")
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        field: str,
        rule: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.rule = rule
        details = kwargs.pop("details", {})
        details["errors"] = [{"field": field, "rule": rule}]
        super().__init__(
            message=message or f"The {field} field failed the '{rule}' rule.",
            details=details,
            **kwargs,
        )


class GuardMismatchError(AppException):
    """Raised when an assignment would cross guard boundaries.

    Example:
        raise GuardMismatchError(expected="api", actual="web")
    """

    message = "Assignments are only allowed within the same guard"
    error_code = "guard_mismatch"
    status_code = 422

    def __init__(self, expected: str, actual: str, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        details["expected_guard"] = expected
        details["actual_guard"] = actual
        super().__init__(details=details, **kwargs)


class TransactionFailedError(AppException):
    """Raised when the store or cache fails while applying a mutation.

    The underlying error is logged for operators and never exposed.
    """

    error_code = "transaction_failed"
    status_code = 500

    def __init__(self, entity: str = "record", **kwargs: Any) -> None:
        self.entity = entity
        super().__init__(
            message=f"An error occurred while saving the {entity}. Please try again.",
            **kwargs,
        )
