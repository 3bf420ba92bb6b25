"""Pydantic schemas for role operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from permissions_manager.core.constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH
from permissions_manager.core.schemas import PermissionSummary, require_name


class RoleCreate(BaseModel):
    """Schema for creating a role, optionally with its permissions."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    guard_name: str | None = None
    is_protected: bool = False
    permission_ids: list[UUID] = []


class RoleUpdate(BaseModel):
    """Schema for updating a role.

    Only fields that are explicitly set are applied. ``permission_ids``
    replaces the role's permissions when given.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    is_protected: bool | None = None
    permission_ids: list[UUID] | None = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: str | None) -> str:
        """Reject an explicit null name."""
        return require_name(v)


class RoleResponse(BaseModel):
    """Schema for role response data."""

    id: UUID
    name: str
    description: str | None = None
    guard_name: str
    is_protected: bool
    permissions: list[PermissionSummary] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleListItem(RoleResponse):
    """Role row in a listing, with its counts."""

    permissions_count: int = 0
    users_count: int = 0


class RoleListResponse(BaseModel):
    """Schema for listing roles."""

    items: list[RoleListItem]
    total: int
    page: int
    page_size: int | None
