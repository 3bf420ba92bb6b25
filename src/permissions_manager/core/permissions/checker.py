"""Permission checking logic.

This module resolves a principal's effective permissions within a guard:
the union of permissions granted directly and permissions carried by
the principal's roles. Resolutions are cached in the permission
registrar and recomputed after any invalidation.
"""

from sqlalchemy import select, union
from sqlalchemy.ext.asyncio import AsyncSession

from permissions_manager.core.cache import PermissionRegistrar
from permissions_manager.core.permissions.models import (
    Permission,
    Role,
    principal_permissions,
    principal_roles,
    role_permissions,
)


class PermissionChecker:
    """Service for checking principal permissions."""

    def __init__(self, session: AsyncSession, registrar: PermissionRegistrar) -> None:
        self.session = session
        self.registrar = registrar

    async def get_principal_roles(self, principal_id: str, guard_name: str) -> list[Role]:
        """Get all roles assigned to a principal within a guard.

        Args:
            principal_id: The principal's identifier
            guard_name: The guard to resolve in

        Returns:
            Roles ordered by name
        """
        stmt = (
            select(Role)
            .join(principal_roles, principal_roles.c.role_id == Role.id)
            .where(
                principal_roles.c.principal_id == principal_id,
                Role.guard_name == guard_name,
            )
        )
        result = await self.session.execute(stmt)
        return sorted(result.scalars().all(), key=lambda role: role.name.lower())

    async def get_principal_permissions(
        self, principal_id: str, guard_name: str
    ) -> set[str]:
        """Get the effective permission names of a principal.

        Args:
            principal_id: The principal's identifier
            guard_name: The guard to resolve in

        Returns:
            Set of permission names, direct and role-derived
        """
        cached = await self.registrar.get_resolved(principal_id, guard_name)
        if cached is not None:
            return cached

        direct = (
            select(Permission.name)
            .join(
                principal_permissions,
                principal_permissions.c.permission_id == Permission.id,
            )
            .where(
                principal_permissions.c.principal_id == principal_id,
                Permission.guard_name == guard_name,
            )
        )
        via_roles = (
            select(Permission.name)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .join(principal_roles, principal_roles.c.role_id == role_permissions.c.role_id)
            .join(Role, Role.id == principal_roles.c.role_id)
            .where(
                principal_roles.c.principal_id == principal_id,
                Role.guard_name == guard_name,
                Permission.guard_name == guard_name,
            )
        )
        result = await self.session.execute(union(direct, via_roles))
        names = set(result.scalars().all())

        await self.registrar.store_resolved(principal_id, guard_name, names)
        return names

    async def has_permission(self, principal_id: str, name: str, guard_name: str) -> bool:
        """Check if a principal holds a permission (case-insensitive name)."""
        names = await self.get_principal_permissions(principal_id, guard_name)
        wanted = name.lower()
        return any(held.lower() == wanted for held in names)

    async def has_any_permission(
        self, principal_id: str, names: list[str], guard_name: str
    ) -> bool:
        """Check if a principal holds at least one of the permissions."""
        names_held = await self.get_principal_permissions(principal_id, guard_name)
        held = {name.lower() for name in names_held}
        return any(name.lower() in held for name in names)

    async def has_all_permissions(
        self, principal_id: str, names: list[str], guard_name: str
    ) -> bool:
        """Check if a principal holds every one of the permissions."""
        names_held = await self.get_principal_permissions(principal_id, guard_name)
        held = {name.lower() for name in names_held}
        return all(name.lower() in held for name in names)

    async def has_role(self, principal_id: str, role_name: str, guard_name: str) -> bool:
        """Check if a principal is assigned a role by name."""
        roles = await self.get_principal_roles(principal_id, guard_name)
        wanted = role_name.lower()
        return any(role.name.lower() == wanted for role in roles)
