"""Role service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from permissions_manager.api.dependencies import (
    AppSettings,
    Guards,
    Holders,
    Policy,
    Registrar,
)
from permissions_manager.config import Settings
from permissions_manager.core.cache import PermissionRegistrar
from permissions_manager.core.constants import COPY_SUFFIX, MAX_NAME_LENGTH
from permissions_manager.core.database import unit_of_work
from permissions_manager.core.errors import (
    DuplicateNameError,
    NotFoundError,
    ValidationFailedError,
)
from permissions_manager.core.permissions import (
    DeletionPolicy,
    GuardScopeResolver,
    HolderCounter,
    PolicyDecision,
    Role,
)
from permissions_manager.core.permissions.guards import check_assignable
from permissions_manager.modules.permissions.repos import PermissionRepo
from permissions_manager.modules.roles.repos import RoleRepo
from permissions_manager.modules.roles.schemas import RoleCreate, RoleUpdate


logger = structlog.get_logger()


def copy_name(original: str, attempt: int) -> str:
    """Build the name of a duplicated role.

    The first copy of "Manager" is "Manager (Copy)", later ones are
    "Manager (Copy 2)", "Manager (Copy 3)", and so on.
    """
    if attempt <= 1:
        return f"{original} ({COPY_SUFFIX})"
    return f"{original} ({COPY_SUFFIX} {attempt})"


class RoleService:
    """Service for role management operations.

    Every mutation runs as one unit of work: validation and policy checks
    first, then the changes, then registrar invalidation and commit.
    """

    def __init__(
        self,
        repo: RoleRepo,
        permission_repo: PermissionRepo,
        guards: Guards,
        policy: Policy,
        holders: Holders,
        registrar: Registrar,
        settings: AppSettings,
    ) -> None:
        self.repo = repo
        self.permission_repo = permission_repo
        self.guards: GuardScopeResolver = guards
        self.policy: DeletionPolicy = policy
        self.holders: HolderCounter = holders
        self.registrar: PermissionRegistrar = registrar
        self.settings: Settings = settings

    async def get_role(self, role_id: UUID, guard_name: str | None = None) -> Role:
        """Get a role by ID within the caller's guard scope.

        Raises:
            NotFoundError: If the role does not exist in scope
        """
        scope = self.guards.lookup_scope(guard_name)
        role = await self.repo.get_by_id(role_id, scope)
        if not role:
            raise NotFoundError(
                "Role not found",
                resource="role",
                resource_id=str(role_id),
            )
        return role

    async def list_roles(
        self,
        guard_name: str | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> tuple[list[tuple[Role, int, int]], int, int | None]:
        """List roles of one guard with permission and holder counts.

        Args:
            guard_name: Guard to list (forced to the default when selection is off)
            page: Page number
            page_size: Items per page; defaults to ``roles_per_page``, where
                None shows every role

        Returns:
            Tuple of ((role, permissions_count, users_count) rows, total,
            page size used)
        """
        guard = self.guards.resolve(guard_name)
        size = page_size if page_size is not None else self.settings.roles_per_page

        roles, total = await self.repo.list_by_guard(guard, page=page, page_size=size)
        role_ids = [role.id for role in roles]
        permission_counts = await self.repo.permission_counts(role_ids)
        user_counts = await self.holders.role_holders(role_ids)
        rows = [(r, permission_counts[r.id], user_counts[r.id]) for r in roles]
        return rows, total, size

    async def available_roles(self, guard_name: str | None = None) -> list[Role]:
        """Return every role of a guard, for assignment pick-lists."""
        guard = self.guards.resolve(guard_name)
        roles, _ = await self.repo.list_by_guard(guard)
        return roles

    async def create_role(self, data: RoleCreate) -> Role:
        """Create a role, optionally with its permissions.

        Roles named in the protected set are always created protected.

        Raises:
            ValidationFailedError: If the guard is invalid
            DuplicateNameError: If the name is taken in the guard
            NotFoundError: If a permission does not exist
            GuardMismatchError: If a permission belongs to another guard
        """
        guard = self.guards.resolve(data.guard_name)
        await self._ensure_name_available(data.name, guard)
        permissions = check_assignable(
            await self.permission_repo.get_many(data.permission_ids),
            data.permission_ids,
            guard,
            "permission",
        )

        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            is_protected = data.is_protected or self.policy.is_protected_name(data.name)
            role = Role(
                name=data.name,
                description=data.description,
                guard_name=guard,
                is_protected=is_protected,
            )
            role.permissions = permissions
            role = await self.repo.create(role)

        logger.info(
            "role_created",
            role_id=str(role.id),
            guard=guard,
            permission_count=len(permissions),
        )
        return role

    async def update_role(
        self,
        role_id: UUID,
        data: RoleUpdate,
        guard_name: str | None = None,
    ) -> Role:
        """Update a role's fields and, when given, its permissions.

        The guard of an existing role never changes. Renaming a role into
        the protected set makes it protected, as creating it would.

        Raises:
            ProtectedError: If the edit would rename a protected role or
                clear its protection
        """
        role = await self.get_role(role_id, guard_name)
        fields = data.model_dump(exclude_unset=True)
        name = fields.get("name")
        is_protected = fields.get("is_protected")

        self.policy.check_role_edit(role, name=name, is_protected=is_protected)
        if name is not None and name.lower() != role.name.lower():
            await self._ensure_name_available(name, role.guard_name)
        permissions = None
        if data.permission_ids is not None:
            permissions = check_assignable(
                await self.permission_repo.get_many(data.permission_ids),
                data.permission_ids,
                role.guard_name,
                "permission",
            )

        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            if name is not None:
                role.name = name
            if "description" in fields:
                role.description = fields["description"]
            if is_protected is not None:
                role.is_protected = is_protected
            if self.policy.is_protected_name(role.name):
                role.is_protected = True
            if permissions is not None:
                role.permissions = permissions
            await self.repo.update(role)

        logger.info("role_updated", role_id=str(role.id))
        return role

    async def sync_role_permissions(
        self,
        role_id: UUID,
        permission_ids: list[UUID],
        guard_name: str | None = None,
    ) -> Role:
        """Replace the full permission set of a role.

        Absent permissions are unassigned and new ones assigned; either
        the whole set is applied or nothing is.
        """
        role = await self.get_role(role_id, guard_name)
        permissions = check_assignable(
            await self.permission_repo.get_many(permission_ids),
            permission_ids,
            role.guard_name,
            "permission",
        )

        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            role.permissions = permissions
            await self.repo.update(role)

        logger.info(
            "role_permissions_synced",
            role_id=str(role.id),
            permission_count=len(permissions),
        )
        return role

    async def duplicate_role(self, role_id: UUID, guard_name: str | None = None) -> Role:
        """Copy a role and its permissions under the next free copy name.

        The copy is never protected and starts with no principals.

        Raises:
            DuplicateNameError: If a concurrent insert took the chosen name
        """
        original = await self.get_role(role_id, guard_name)

        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            name = await self._next_copy_name(original)
            duplicate = Role(
                name=name,
                description=original.description,
                guard_name=original.guard_name,
                is_protected=False,
            )
            duplicate.permissions = list(original.permissions)
            duplicate = await self.repo.create(duplicate)

        logger.info(
            "role_duplicated",
            role_id=str(original.id),
            duplicate_id=str(duplicate.id),
        )
        return duplicate

    async def can_delete_role(
        self, role_id: UUID, guard_name: str | None = None
    ) -> PolicyDecision:
        """Check whether a role may be deleted."""
        role = await self.get_role(role_id, guard_name)
        return await self.policy.can_delete_role(role)

    async def delete_role(self, role_id: UUID, guard_name: str | None = None) -> str:
        """Delete an unprotected role nobody holds.

        The role's permissions are unlinked, never deleted.

        Returns:
            The deleted role's name

        Raises:
            ProtectedError: If the role is protected
            InUseError: If any principal is assigned the role
        """
        role = await self.get_role(role_id, guard_name)
        decision = await self.policy.can_delete_role(role)
        decision.enforce(role.name)

        name = role.name
        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            await self.repo.delete(role)

        logger.info("role_deleted", role_id=str(role_id))
        return name

    async def _next_copy_name(self, original: Role) -> str:
        attempt = 1
        name = copy_name(original.name, attempt)
        while await self.repo.name_exists(name, original.guard_name):
            attempt += 1
            name = copy_name(original.name, attempt)
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationFailedError(
                field="name",
                rule="max",
                message=f"The copied role name may not exceed {MAX_NAME_LENGTH} characters.",
            )
        return name

    async def _ensure_name_available(self, name: str, guard_name: str) -> None:
        if await self.repo.name_exists(name, guard_name):
            raise DuplicateNameError(
                entity="role",
                details={"name": name, "guard_name": guard_name},
            )


# Type alias for dependency injection
RoleSvc = Annotated[RoleService, Depends(RoleService)]
