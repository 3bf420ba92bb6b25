"""Principal assignment service."""

from dataclasses import dataclass, field
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from permissions_manager.api.dependencies import Checker, Guards, Registrar
from permissions_manager.core.cache import PermissionRegistrar
from permissions_manager.core.constants import MAX_PRINCIPAL_ID_LENGTH
from permissions_manager.core.database import unit_of_work
from permissions_manager.core.errors import NotFoundError, ValidationFailedError
from permissions_manager.core.permissions import (
    GuardScopeResolver,
    Permission,
    PermissionChecker,
    Role,
)
from permissions_manager.core.permissions.guards import check_assignable
from permissions_manager.modules.permissions.repos import PermissionRepo
from permissions_manager.modules.principals.repos import AssignmentRepo
from permissions_manager.modules.roles.repos import RoleRepo


logger = structlog.get_logger()


@dataclass
class PrincipalAccess:
    """Assignments and effective permissions of a principal in one guard."""

    principal_id: str
    guard_name: str
    roles: list[Role] = field(default_factory=list)
    permissions: list[Permission] = field(default_factory=list)
    effective_permissions: list[str] = field(default_factory=list)


def validate_principal_id(principal_id: str) -> str:
    """Check that a principal identifier is usable.

    Raises:
        ValidationFailedError: If the identifier is blank or too long
    """
    principal_id = principal_id.strip()
    if not principal_id:
        raise ValidationFailedError(field="principal_id", rule="required")
    if len(principal_id) > MAX_PRINCIPAL_ID_LENGTH:
        raise ValidationFailedError(field="principal_id", rule="max")
    return principal_id


class PrincipalService:
    """Service for assigning roles and permissions to principals."""

    def __init__(
        self,
        repo: AssignmentRepo,
        role_repo: RoleRepo,
        permission_repo: PermissionRepo,
        guards: Guards,
        checker: Checker,
        registrar: Registrar,
    ) -> None:
        self.repo = repo
        self.role_repo = role_repo
        self.permission_repo = permission_repo
        self.guards: GuardScopeResolver = guards
        self.checker: PermissionChecker = checker
        self.registrar: PermissionRegistrar = registrar

    async def get_access(
        self, principal_id: str, guard_name: str | None = None
    ) -> PrincipalAccess:
        """Describe what a principal holds within a guard."""
        principal_id = validate_principal_id(principal_id)
        guard = self.guards.resolve(guard_name)
        effective = await self.checker.get_principal_permissions(principal_id, guard)
        return PrincipalAccess(
            principal_id=principal_id,
            guard_name=guard,
            roles=await self.repo.roles_for(principal_id, guard),
            permissions=await self.repo.permissions_for(principal_id, guard),
            effective_permissions=sorted(effective, key=str.lower),
        )

    async def check_permission(
        self, principal_id: str, permission: str, guard_name: str | None = None
    ) -> bool:
        """Check whether a principal holds a permission, directly or via a role."""
        principal_id = validate_principal_id(principal_id)
        guard = self.guards.resolve(guard_name)
        return await self.checker.has_permission(principal_id, permission, guard)

    async def sync_principal_roles(
        self,
        principal_id: str,
        role_ids: list[UUID],
        guard_name: str | None = None,
    ) -> list[Role]:
        """Replace a principal's roles within one guard.

        Roles the principal holds in other guards are kept.

        Raises:
            NotFoundError: If a role does not exist
            GuardMismatchError: If a role belongs to another guard
        """
        principal_id = validate_principal_id(principal_id)
        guard = self.guards.resolve(guard_name)
        roles = check_assignable(
            await self.role_repo.get_many(role_ids), role_ids, guard, "role"
        )

        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            await self.repo.replace_roles(principal_id, guard, [r.id for r in roles])

        logger.info(
            "principal_roles_synced",
            principal_id=principal_id,
            guard=guard,
            role_count=len(roles),
        )
        return sorted(roles, key=lambda role: role.name.lower())

    async def sync_principal_permissions(
        self,
        principal_id: str,
        permission_ids: list[UUID],
        guard_name: str | None = None,
    ) -> list[Permission]:
        """Replace a principal's direct permissions within one guard."""
        principal_id = validate_principal_id(principal_id)
        guard = self.guards.resolve(guard_name)
        permissions = check_assignable(
            await self.permission_repo.get_many(permission_ids),
            permission_ids,
            guard,
            "permission",
        )

        async with unit_of_work(self.repo.session, self.registrar, entity="permission"):
            await self.repo.replace_permissions(
                principal_id, guard, [p.id for p in permissions]
            )

        logger.info(
            "principal_permissions_synced",
            principal_id=principal_id,
            guard=guard,
            permission_count=len(permissions),
        )
        return sorted(permissions, key=lambda permission: permission.name.lower())

    async def assign_role(
        self, principal_id: str, role_id: UUID, guard_name: str | None = None
    ) -> Role:
        """Assign one role to a principal. Assigning a held role is a no-op."""
        principal_id = validate_principal_id(principal_id)
        role = await self._get_role(role_id, guard_name)

        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            added = await self.repo.add_role(principal_id, role.id)

        logger.info(
            "principal_role_assigned",
            principal_id=principal_id,
            role_id=str(role.id),
            added=added,
        )
        return role

    async def remove_role(
        self, principal_id: str, role_id: UUID, guard_name: str | None = None
    ) -> Role:
        """Unassign one role from a principal. Removing an unheld role is a no-op."""
        principal_id = validate_principal_id(principal_id)
        role = await self._get_role(role_id, guard_name)

        async with unit_of_work(self.repo.session, self.registrar, entity="role"):
            removed = await self.repo.remove_role(principal_id, role.id)

        logger.info(
            "principal_role_removed",
            principal_id=principal_id,
            role_id=str(role.id),
            removed=removed,
        )
        return role

    async def _get_role(self, role_id: UUID, guard_name: str | None) -> Role:
        role = await self.role_repo.get_by_id(role_id, self.guards.lookup_scope(guard_name))
        if not role:
            raise NotFoundError(
                "Role not found",
                resource="role",
                resource_id=str(role_id),
            )
        return role


# Type alias for dependency injection
PrincipalSvc = Annotated[PrincipalService, Depends(PrincipalService)]
