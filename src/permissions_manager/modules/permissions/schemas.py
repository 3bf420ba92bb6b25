"""Pydantic schemas for permission operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from permissions_manager.core.constants import MAX_DESCRIPTION_LENGTH, MAX_NAME_LENGTH
from permissions_manager.core.schemas import RoleSummary, require_name


class PermissionBase(BaseModel):
    """Base schema for permission data."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    category: str | None = None


class PermissionCreate(PermissionBase):
    """Schema for creating a permission, optionally with its roles."""

    guard_name: str | None = None
    role_ids: list[UUID] = []


class PermissionUpdate(BaseModel):
    """Schema for updating a permission.

    Only fields that are explicitly set are applied. ``role_ids``
    replaces the permission's roles when given.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    category: str | None = None
    role_ids: list[UUID] | None = None

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v: str | None) -> str:
        """Reject an explicit null name."""
        return require_name(v)


class PermissionResponse(BaseModel):
    """Schema for permission response data."""

    id: UUID
    name: str
    description: str | None = None
    category: str | None = None
    guard_name: str
    roles: list[RoleSummary] = []
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PermissionListItem(PermissionResponse):
    """Permission row in a listing, with its distinct holder count."""

    users_count: int = 0


class PermissionListResponse(BaseModel):
    """Schema for listing permissions."""

    items: list[PermissionListItem]
    total: int
    page: int
    page_size: int | None


class CategoryOption(BaseModel):
    """A configured permission category."""

    value: str
    label: str
    color: str
