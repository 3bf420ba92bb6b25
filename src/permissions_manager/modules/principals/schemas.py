"""Pydantic schemas for principal assignments."""

from pydantic import BaseModel

from permissions_manager.core.schemas import PermissionSummary, RoleSummary


class PrincipalAccessResponse(BaseModel):
    """A principal's assignments and effective permissions within a guard."""

    principal_id: str
    guard_name: str
    roles: list[RoleSummary] = []
    permissions: list[PermissionSummary] = []
    effective_permissions: list[str] = []


class PermissionCheckResponse(BaseModel):
    """Whether a principal holds a permission."""

    principal_id: str
    guard_name: str
    permission: str
    allowed: bool
