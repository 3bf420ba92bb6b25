"""Permission API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from permissions_manager.api.dependencies import Categories
from permissions_manager.core.constants import MAX_PAGE_SIZE
from permissions_manager.core.schemas import (
    AssignmentSync,
    DeletionCheckResponse,
    MutationResponse,
    Notification,
    PermissionSummary,
)
from permissions_manager.modules.permissions.schemas import (
    CategoryOption,
    PermissionCreate,
    PermissionListItem,
    PermissionListResponse,
    PermissionResponse,
    PermissionUpdate,
)
from permissions_manager.modules.permissions.services import PermissionSvc


router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get(
    "/categories",
    response_model=list[CategoryOption],
    summary="List categories",
    description="List the configured permission categories.",
)
async def list_categories(categories: Categories) -> list[CategoryOption]:
    """List the configured permission categories."""
    return [CategoryOption(**option) for option in categories.as_options()]


@router.get(
    "/options",
    response_model=list[PermissionSummary],
    summary="Available permissions",
    description="List every permission of a guard for assignment pick-lists.",
)
async def available_permissions(
    service: PermissionSvc,
    guard_name: str | None = None,
    category: str | None = None,
) -> list[PermissionSummary]:
    """List every permission of a guard."""
    permissions = await service.available_permissions(guard_name, category)
    return [PermissionSummary.model_validate(p) for p in permissions]


@router.get(
    "",
    response_model=PermissionListResponse,
    summary="List permissions",
    description="List permissions of a guard with their roles and holder counts.",
)
async def list_permissions(
    service: PermissionSvc,
    guard_name: str | None = None,
    category: str | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=MAX_PAGE_SIZE),
) -> PermissionListResponse:
    """List permissions of a guard."""
    rows, total, size = await service.list_permissions(
        guard_name=guard_name,
        category=category,
        search=search,
        page=page,
        page_size=page_size,
    )
    items = [
        PermissionListItem(
            **PermissionResponse.model_validate(permission).model_dump(),
            users_count=users_count,
        )
        for permission, users_count in rows
    ]
    return PermissionListResponse(items=items, total=total, page=page, page_size=size)


@router.post(
    "",
    response_model=MutationResponse[PermissionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create permission",
    description="Create a permission, optionally assigning it to roles.",
)
async def create_permission(
    data: PermissionCreate,
    service: PermissionSvc,
) -> MutationResponse[PermissionResponse]:
    """Create a permission."""
    permission = await service.create_permission(data)
    return MutationResponse[PermissionResponse](
        data=PermissionResponse.model_validate(permission),
        notification=Notification.success("Permission successfully created."),
    )


@router.get(
    "/{permission_id}",
    response_model=PermissionResponse,
    summary="Get permission",
)
async def get_permission(
    permission_id: UUID,
    service: PermissionSvc,
    guard_name: str | None = None,
) -> PermissionResponse:
    """Get a permission by ID."""
    permission = await service.get_permission(permission_id, guard_name)
    return PermissionResponse.model_validate(permission)


@router.patch(
    "/{permission_id}",
    response_model=MutationResponse[PermissionResponse],
    summary="Update permission",
    description="Update a permission. When role_ids is given the roles are replaced.",
)
async def update_permission(
    permission_id: UUID,
    data: PermissionUpdate,
    service: PermissionSvc,
    guard_name: str | None = None,
) -> MutationResponse[PermissionResponse]:
    """Update a permission."""
    permission = await service.update_permission(permission_id, data, guard_name)
    return MutationResponse[PermissionResponse](
        data=PermissionResponse.model_validate(permission),
        notification=Notification.success("Permission successfully updated."),
    )


@router.put(
    "/{permission_id}/roles",
    response_model=MutationResponse[PermissionResponse],
    summary="Sync permission roles",
    description="Replace the full set of roles carrying a permission.",
)
async def sync_permission_roles(
    permission_id: UUID,
    data: AssignmentSync,
    service: PermissionSvc,
    guard_name: str | None = None,
) -> MutationResponse[PermissionResponse]:
    """Replace the roles carrying a permission."""
    permission = await service.sync_permission_roles(permission_id, data.ids, guard_name)
    return MutationResponse[PermissionResponse](
        data=PermissionResponse.model_validate(permission),
        notification=Notification.success("Permission successfully updated."),
    )


@router.get(
    "/{permission_id}/deletability",
    response_model=DeletionCheckResponse,
    summary="Check permission deletion",
    description="Report whether a permission may be deleted and, if not, why.",
)
async def check_permission_deletion(
    permission_id: UUID,
    service: PermissionSvc,
    guard_name: str | None = None,
) -> DeletionCheckResponse:
    """Check whether a permission may be deleted."""
    decision = await service.can_delete_permission(permission_id, guard_name)
    return DeletionCheckResponse(
        allowed=decision.allowed,
        reason=decision.reason.value if decision.reason else None,
        count=decision.count,
    )


@router.delete(
    "/{permission_id}",
    response_model=Notification,
    summary="Delete permission",
    description="Delete a permission that no principal holds.",
)
async def delete_permission(
    permission_id: UUID,
    service: PermissionSvc,
    guard_name: str | None = None,
) -> Notification:
    """Delete a permission."""
    await service.delete_permission(permission_id, guard_name)
    return Notification.success("Permission successfully deleted.")
