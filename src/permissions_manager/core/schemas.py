"""Shared Pydantic schemas: entity summaries, notifications, and envelopes."""

from enum import StrEnum
from typing import Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic_core import PydanticCustomError

from permissions_manager.core.errors import AppException


T = TypeVar("T")


class Severity(StrEnum):
    """Notification severity understood by the presentation layer."""

    SUCCESS = "success"
    DANGER = "danger"


class Notification(BaseModel):
    """Outcome of an operation, ready to show to an operator."""

    severity: Severity
    heading: str
    message: str

    @classmethod
    def success(cls, message: str) -> "Notification":
        return cls(severity=Severity.SUCCESS, heading="Success", message=message)

    @classmethod
    def from_exception(cls, exc: AppException, heading: str = "Error") -> "Notification":
        return cls(severity=Severity(exc.severity), heading=heading, message=exc.message)


class PermissionSummary(BaseModel):
    """Minimal permission reference embedded in other responses."""

    id: UUID
    name: str
    category: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleSummary(BaseModel):
    """Minimal role reference embedded in other responses."""

    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class MutationResponse(BaseModel, Generic[T]):
    """Envelope for mutating endpoints: the result plus its notification."""

    data: T | None = None
    notification: Notification


class DeletionCheckResponse(BaseModel):
    """Result of asking whether an entity may be deleted."""

    allowed: bool
    reason: str | None = None
    count: int = 0


class AssignmentSync(BaseModel):
    """Full replacement set of ids for a many-to-many relationship."""

    ids: list[UUID] = []


def require_name(v: str | None) -> str:
    """Reject an explicit null name on partial updates.

    Omitting the name leaves it unchanged; sending null would clear it.
    """
    if v is None:
        raise PydanticCustomError("required", "The name field is required.")
    return v
