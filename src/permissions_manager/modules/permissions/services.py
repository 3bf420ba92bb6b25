"""Permission service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from permissions_manager.api.dependencies import (
    AppSettings,
    Categories,
    Guards,
    Holders,
    Policy,
    Registrar,
)
from permissions_manager.config import Settings
from permissions_manager.core.cache import PermissionRegistrar
from permissions_manager.core.database import unit_of_work
from permissions_manager.core.errors import DuplicateNameError, NotFoundError
from permissions_manager.core.permissions import (
    CategoryRegistry,
    DeletionPolicy,
    GuardScopeResolver,
    HolderCounter,
    Permission,
    PolicyDecision,
)
from permissions_manager.core.permissions.guards import check_assignable
from permissions_manager.modules.permissions.repos import PermissionRepo
from permissions_manager.modules.permissions.schemas import (
    PermissionCreate,
    PermissionUpdate,
)
from permissions_manager.modules.roles.repos import RoleRepo


logger = structlog.get_logger()


class PermissionService:
    """Service for permission management operations.

    Every mutation runs as one unit of work: validation and policy checks
    first, then the changes, then registrar invalidation and commit.
    """

    def __init__(
        self,
        repo: PermissionRepo,
        role_repo: RoleRepo,
        guards: Guards,
        categories: Categories,
        policy: Policy,
        holders: Holders,
        registrar: Registrar,
        settings: AppSettings,
    ) -> None:
        self.repo = repo
        self.role_repo = role_repo
        self.guards: GuardScopeResolver = guards
        self.categories: CategoryRegistry = categories
        self.policy: DeletionPolicy = policy
        self.holders: HolderCounter = holders
        self.registrar: PermissionRegistrar = registrar
        self.settings: Settings = settings

    async def get_permission(
        self, permission_id: UUID, guard_name: str | None = None
    ) -> Permission:
        """Get a permission by ID within the caller's guard scope.

        Raises:
            NotFoundError: If the permission does not exist in scope
        """
        scope = self.guards.lookup_scope(guard_name)
        permission = await self.repo.get_by_id(permission_id, scope)
        if not permission:
            raise NotFoundError(
                "Permission not found",
                resource="permission",
                resource_id=str(permission_id),
            )
        return permission

    async def list_permissions(
        self,
        guard_name: str | None = None,
        category: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> tuple[list[tuple[Permission, int]], int, int | None]:
        """List permissions of one guard with their holder counts.

        Args:
            guard_name: Guard to list (forced to the default when selection is off)
            category: Optional category filter, ignored when category filtering
                is disabled
            search: Optional name fragment
            page: Page number
            page_size: Items per page; defaults to ``permissions_per_page``

        Returns:
            Tuple of ((permission, users_count) rows, total count, page size used)
        """
        guard = self.guards.resolve(guard_name)
        if not self.settings.category_filtering:
            category = None
        else:
            category = self.categories.validate(category)
        size = page_size if page_size is not None else self.settings.permissions_per_page

        permissions, total = await self.repo.list_by_guard(
            guard, category=category, search=search, page=page, page_size=size
        )
        counts = await self.holders.permission_holders(
            [permission.id for permission in permissions], guard
        )
        return [(p, counts[p.id]) for p in permissions], total, size

    async def available_permissions(
        self, guard_name: str | None = None, category: str | None = None
    ) -> list[Permission]:
        """Return every permission of a guard, for assignment pick-lists."""
        guard = self.guards.resolve(guard_name)
        if self.settings.category_filtering:
            category = self.categories.validate(category)
        else:
            category = None
        permissions, _ = await self.repo.list_by_guard(guard, category=category)
        return permissions

    async def create_permission(self, data: PermissionCreate) -> Permission:
        """Create a permission, optionally assigning it to roles.

        Raises:
            ValidationFailedError: If the guard or category is invalid
            DuplicateNameError: If the name is taken in the guard
            NotFoundError: If a role does not exist
            GuardMismatchError: If a role belongs to another guard
        """
        guard = self.guards.resolve(data.guard_name)
        category = self.categories.validate(data.category)
        await self._ensure_name_available(data.name, guard)
        roles = check_assignable(
            await self.role_repo.get_many(data.role_ids), data.role_ids, guard, "role"
        )

        async with unit_of_work(self.repo.session, self.registrar, entity="permission"):
            permission = Permission(
                name=data.name,
                description=data.description,
                category=category,
                guard_name=guard,
            )
            permission.roles = roles
            permission = await self.repo.create(permission)

        logger.info(
            "permission_created",
            permission_id=str(permission.id),
            guard=guard,
            role_count=len(roles),
        )
        return permission

    async def update_permission(
        self,
        permission_id: UUID,
        data: PermissionUpdate,
        guard_name: str | None = None,
    ) -> Permission:
        """Update a permission's fields and, when given, its roles.

        The guard of an existing permission never changes.
        """
        permission = await self.get_permission(permission_id, guard_name)
        fields = data.model_dump(exclude_unset=True)

        name = fields.get("name")
        if name is not None and name.lower() != permission.name.lower():
            await self._ensure_name_available(name, permission.guard_name)
        category = (
            self.categories.validate(fields["category"])
            if "category" in fields
            else permission.category
        )
        roles = None
        if data.role_ids is not None:
            roles = check_assignable(
                await self.role_repo.get_many(data.role_ids),
                data.role_ids,
                permission.guard_name,
                "role",
            )

        async with unit_of_work(self.repo.session, self.registrar, entity="permission"):
            if name is not None:
                permission.name = name
            if "description" in fields:
                permission.description = fields["description"]
            permission.category = category
            if roles is not None:
                permission.roles = roles
            await self.repo.update(permission)

        logger.info("permission_updated", permission_id=str(permission.id))
        return permission

    async def sync_permission_roles(
        self, permission_id: UUID, role_ids: list[UUID], guard_name: str | None = None
    ) -> Permission:
        """Replace the full set of roles carrying a permission."""
        permission = await self.get_permission(permission_id, guard_name)
        roles = check_assignable(
            await self.role_repo.get_many(role_ids),
            role_ids,
            permission.guard_name,
            "role",
        )

        async with unit_of_work(self.repo.session, self.registrar, entity="permission"):
            permission.roles = roles
            await self.repo.update(permission)

        logger.info(
            "permission_roles_synced",
            permission_id=str(permission.id),
            role_count=len(roles),
        )
        return permission

    async def can_delete_permission(
        self, permission_id: UUID, guard_name: str | None = None
    ) -> PolicyDecision:
        """Check whether a permission may be deleted."""
        permission = await self.get_permission(permission_id, guard_name)
        return await self.policy.can_delete_permission(permission)

    async def delete_permission(
        self, permission_id: UUID, guard_name: str | None = None
    ) -> str:
        """Delete a permission nobody holds.

        Returns:
            The deleted permission's name

        Raises:
            InUseError: If any principal holds the permission
        """
        permission = await self.get_permission(permission_id, guard_name)
        decision = await self.policy.can_delete_permission(permission)
        decision.enforce(permission.name)

        name = permission.name
        async with unit_of_work(self.repo.session, self.registrar, entity="permission"):
            await self.repo.delete(permission)

        logger.info("permission_deleted", permission_id=str(permission_id))
        return name

    async def _ensure_name_available(self, name: str, guard_name: str) -> None:
        existing = await self.repo.get_by_name(name, guard_name)
        if existing:
            raise DuplicateNameError(
                entity="permission",
                details={"name": name, "guard_name": guard_name},
            )


# Type alias for dependency injection
PermissionSvc = Annotated[PermissionService, Depends(PermissionService)]
