"""RFC 7807 Problem Details exception handlers.

Every failed operation reaches the caller as a problem document whose
``detail`` is the operator-facing notification message and whose
``severity`` tells the presentation layer how to render it. Field
failures, whether raised by a service or by request parsing, are listed
under ``errors`` as ``{field, rule}`` pairs.

See: https://tools.ietf.org/html/rfc7807
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from permissions_manager.config import settings
from permissions_manager.core.errors.exceptions import (
    AppException,
    ValidationFailedError,
)


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

# Pydantic error types mapped onto the rule names services use
_RULES = {
    "missing": "required",
    "string_too_short": "required",
    "string_too_long": "max",
    "string_type": "string",
    "bool_type": "boolean",
    "bool_parsing": "boolean",
    "uuid_type": "uuid",
    "uuid_parsing": "uuid",
    "list_type": "array",
    "int_parsing": "integer",
    "greater_than_equal": "min",
    "less_than_equal": "max",
}


class FieldError(BaseModel):
    """A field that failed a rule."""

    field: str
    rule: str
    message: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response schema.

    Attributes:
        type: URI reference identifying the problem type
        title: Short human-readable summary
        status: HTTP status code
        detail: Notification message for the operator
        severity: Notification severity ("danger", "warning")
        instance: Path of the request that failed
        errors: Field-level failures, for validation problems
    """

    type: str
    title: str
    status: int
    detail: str
    severity: str = "danger"
    instance: str | None = None
    errors: list[FieldError] | None = None

    model_config = {"extra": "allow"}


def _problem(
    request: Request,
    status_code: int,
    error_code: str,
    detail: str,
    severity: str = "danger",
    errors: list[FieldError] | None = None,
) -> dict[str, Any]:
    return ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{error_code}",
        title=error_code.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        severity=severity,
        instance=str(request.url.path),
        errors=errors,
    ).model_dump(exclude_none=True)


def field_error(error: dict[str, Any]) -> FieldError:
    """Convert one pydantic error into a field/rule pair."""
    parts = [str(part) for part in error.get("loc", ()) if part != "body"]
    error_type = error.get("type", "invalid")
    return FieldError(
        field=".".join(parts) or "unknown",
        rule=_RULES.get(error_type, error_type),
        message=error.get("msg"),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render a domain exception, merging its details into the problem."""
    logger.warning(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        details=exc.details,
    )

    content = _problem(
        request, exc.status_code, exc.error_code, exc.message, severity=exc.severity
    )
    for key, value in exc.details.items():
        content.setdefault(key, value)

    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request parsing failures like service validation failures."""
    errors = [field_error(error) for error in exc.errors()]

    logger.warning(
        "validation_error",
        path=str(request.url.path),
        fields=[error.field for error in errors],
    )

    return JSONResponse(
        status_code=ValidationFailedError.status_code,
        content=_problem(
            request,
            ValidationFailedError.status_code,
            ValidationFailedError.error_code,
            "Request validation failed",
            errors=errors,
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected failure and hide its details from the caller."""
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_problem(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_error",
            "An error occurred. Please try again.",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
