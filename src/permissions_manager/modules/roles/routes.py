"""Role API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from permissions_manager.core.constants import MAX_PAGE_SIZE
from permissions_manager.core.schemas import (
    AssignmentSync,
    DeletionCheckResponse,
    MutationResponse,
    Notification,
    RoleSummary,
)
from permissions_manager.modules.roles.schemas import (
    RoleCreate,
    RoleListItem,
    RoleListResponse,
    RoleResponse,
    RoleUpdate,
)
from permissions_manager.modules.roles.services import RoleSvc


router = APIRouter(prefix="/roles", tags=["roles"])


@router.get(
    "/options",
    response_model=list[RoleSummary],
    summary="Available roles",
    description="List every role of a guard for assignment pick-lists.",
)
async def available_roles(
    service: RoleSvc,
    guard_name: str | None = None,
) -> list[RoleSummary]:
    """List every role of a guard."""
    roles = await service.available_roles(guard_name)
    return [RoleSummary.model_validate(role) for role in roles]


@router.get(
    "",
    response_model=RoleListResponse,
    summary="List roles",
    description="List roles of a guard with permission and holder counts.",
)
async def list_roles(
    service: RoleSvc,
    guard_name: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=MAX_PAGE_SIZE),
) -> RoleListResponse:
    """List roles of a guard."""
    rows, total, size = await service.list_roles(
        guard_name=guard_name, page=page, page_size=page_size
    )
    items = [
        RoleListItem(
            **RoleResponse.model_validate(role).model_dump(),
            permissions_count=permissions_count,
            users_count=users_count,
        )
        for role, permissions_count, users_count in rows
    ]
    return RoleListResponse(items=items, total=total, page=page, page_size=size)


@router.post(
    "",
    response_model=MutationResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    description="Create a role, optionally with its permissions.",
)
async def create_role(data: RoleCreate, service: RoleSvc) -> MutationResponse[RoleResponse]:
    """Create a role."""
    role = await service.create_role(data)
    return MutationResponse[RoleResponse](
        data=RoleResponse.model_validate(role),
        notification=Notification.success("Role successfully created."),
    )


@router.get(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Get role",
)
async def get_role(
    role_id: UUID,
    service: RoleSvc,
    guard_name: str | None = None,
) -> RoleResponse:
    """Get a role by ID."""
    role = await service.get_role(role_id, guard_name)
    return RoleResponse.model_validate(role)


@router.patch(
    "/{role_id}",
    response_model=MutationResponse[RoleResponse],
    summary="Update role",
    description="Update a role. When permission_ids is given the permissions are replaced.",
)
async def update_role(
    role_id: UUID,
    data: RoleUpdate,
    service: RoleSvc,
    guard_name: str | None = None,
) -> MutationResponse[RoleResponse]:
    """Update a role."""
    role = await service.update_role(role_id, data, guard_name)
    return MutationResponse[RoleResponse](
        data=RoleResponse.model_validate(role),
        notification=Notification.success("Role successfully updated."),
    )


@router.put(
    "/{role_id}/permissions",
    response_model=MutationResponse[RoleResponse],
    summary="Sync role permissions",
    description="Replace the full permission set of a role.",
)
async def sync_role_permissions(
    role_id: UUID,
    data: AssignmentSync,
    service: RoleSvc,
    guard_name: str | None = None,
) -> MutationResponse[RoleResponse]:
    """Replace the permissions of a role."""
    role = await service.sync_role_permissions(role_id, data.ids, guard_name)
    return MutationResponse[RoleResponse](
        data=RoleResponse.model_validate(role),
        notification=Notification.success("Role successfully updated."),
    )


@router.post(
    "/{role_id}/duplicate",
    response_model=MutationResponse[RoleResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate role",
    description="Copy a role and its permissions under a new name. Principals are not copied.",
)
async def duplicate_role(
    role_id: UUID,
    service: RoleSvc,
    guard_name: str | None = None,
) -> MutationResponse[RoleResponse]:
    """Duplicate a role."""
    original = await service.get_role(role_id, guard_name)
    original_name = original.name
    duplicate = await service.duplicate_role(role_id, guard_name)
    return MutationResponse[RoleResponse](
        data=RoleResponse.model_validate(duplicate),
        notification=Notification.success(f"Role '{original_name}' successfully duplicated."),
    )


@router.get(
    "/{role_id}/deletability",
    response_model=DeletionCheckResponse,
    summary="Check role deletion",
    description="Report whether a role may be deleted and, if not, why.",
)
async def check_role_deletion(
    role_id: UUID,
    service: RoleSvc,
    guard_name: str | None = None,
) -> DeletionCheckResponse:
    """Check whether a role may be deleted."""
    decision = await service.can_delete_role(role_id, guard_name)
    return DeletionCheckResponse(
        allowed=decision.allowed,
        reason=decision.reason.value if decision.reason else None,
        count=decision.count,
    )


@router.delete(
    "/{role_id}",
    response_model=Notification,
    summary="Delete role",
    description="Delete an unprotected role that no principal holds.",
)
async def delete_role(
    role_id: UUID,
    service: RoleSvc,
    guard_name: str | None = None,
) -> Notification:
    """Delete a role."""
    await service.delete_role(role_id, guard_name)
    return Notification.success("Role successfully deleted.")
