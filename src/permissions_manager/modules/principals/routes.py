"""Principal assignment API routes."""

from uuid import UUID

from fastapi import APIRouter

from permissions_manager.core.schemas import (
    AssignmentSync,
    MutationResponse,
    Notification,
    PermissionSummary,
    RoleSummary,
)
from permissions_manager.modules.principals.schemas import (
    PermissionCheckResponse,
    PrincipalAccessResponse,
)
from permissions_manager.modules.principals.services import PrincipalSvc


router = APIRouter(prefix="/principals", tags=["principals"])


@router.get(
    "/{principal_id}/access",
    response_model=PrincipalAccessResponse,
    summary="Get principal access",
    description="List a principal's roles, direct permissions and effective permissions.",
)
async def get_access(
    principal_id: str,
    service: PrincipalSvc,
    guard_name: str | None = None,
) -> PrincipalAccessResponse:
    """Get what a principal holds within a guard."""
    access = await service.get_access(principal_id, guard_name)
    return PrincipalAccessResponse(
        principal_id=access.principal_id,
        guard_name=access.guard_name,
        roles=[RoleSummary.model_validate(role) for role in access.roles],
        permissions=[PermissionSummary.model_validate(p) for p in access.permissions],
        effective_permissions=access.effective_permissions,
    )


@router.get(
    "/{principal_id}/check",
    response_model=PermissionCheckResponse,
    summary="Check principal permission",
    description="Check whether a principal holds a permission directly or through a role.",
)
async def check_permission(
    principal_id: str,
    permission: str,
    service: PrincipalSvc,
    guard_name: str | None = None,
) -> PermissionCheckResponse:
    """Check a single permission for a principal."""
    allowed = await service.check_permission(principal_id, permission, guard_name)
    guard = service.guards.resolve(guard_name)
    return PermissionCheckResponse(
        principal_id=principal_id,
        guard_name=guard,
        permission=permission,
        allowed=allowed,
    )


@router.put(
    "/{principal_id}/roles",
    response_model=MutationResponse[list[RoleSummary]],
    summary="Sync principal roles",
    description="Replace a principal's roles within one guard.",
)
async def sync_roles(
    principal_id: str,
    data: AssignmentSync,
    service: PrincipalSvc,
    guard_name: str | None = None,
) -> MutationResponse[list[RoleSummary]]:
    """Replace a principal's roles."""
    roles = await service.sync_principal_roles(principal_id, data.ids, guard_name)
    return MutationResponse[list[RoleSummary]](
        data=[RoleSummary.model_validate(role) for role in roles],
        notification=Notification.success("Roles successfully synced."),
    )


@router.put(
    "/{principal_id}/permissions",
    response_model=MutationResponse[list[PermissionSummary]],
    summary="Sync principal permissions",
    description="Replace a principal's direct permissions within one guard.",
)
async def sync_permissions(
    principal_id: str,
    data: AssignmentSync,
    service: PrincipalSvc,
    guard_name: str | None = None,
) -> MutationResponse[list[PermissionSummary]]:
    """Replace a principal's direct permissions."""
    permissions = await service.sync_principal_permissions(
        principal_id, data.ids, guard_name
    )
    return MutationResponse[list[PermissionSummary]](
        data=[PermissionSummary.model_validate(p) for p in permissions],
        notification=Notification.success("Permissions successfully synced."),
    )


@router.post(
    "/{principal_id}/roles/{role_id}",
    response_model=MutationResponse[RoleSummary],
    summary="Assign role",
)
async def assign_role(
    principal_id: str,
    role_id: UUID,
    service: PrincipalSvc,
    guard_name: str | None = None,
) -> MutationResponse[RoleSummary]:
    """Assign one role to a principal."""
    role = await service.assign_role(principal_id, role_id, guard_name)
    return MutationResponse[RoleSummary](
        data=RoleSummary.model_validate(role),
        notification=Notification.success(f"Role '{role.name}' successfully assigned."),
    )


@router.delete(
    "/{principal_id}/roles/{role_id}",
    response_model=MutationResponse[RoleSummary],
    summary="Remove role",
)
async def remove_role(
    principal_id: str,
    role_id: UUID,
    service: PrincipalSvc,
    guard_name: str | None = None,
) -> MutationResponse[RoleSummary]:
    """Remove one role from a principal."""
    role = await service.remove_role(principal_id, role_id, guard_name)
    return MutationResponse[RoleSummary](
        data=RoleSummary.model_validate(role),
        notification=Notification.success(f"Role '{role.name}' successfully removed."),
    )
