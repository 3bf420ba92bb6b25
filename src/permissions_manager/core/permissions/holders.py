"""Holder counting for roles and permissions.

A role is held by the principals assigned to it directly. A permission
is held by the distinct union of principals granted it directly and
principals assigned any role of the same guard that carries it; a
principal holding it both ways is counted once.
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select, union
from sqlalchemy.ext.asyncio import AsyncSession

from permissions_manager.core.permissions.models import (
    Role,
    principal_permissions,
    principal_roles,
    role_permissions,
)


class HolderCounter:
    """Counts the principals holding roles and permissions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def role_holders(self, role_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Count directly assigned principals per role.

        Args:
            role_ids: Roles to count for

        Returns:
            Mapping of role id to holder count (zero counts included)
        """
        counts = dict.fromkeys(role_ids, 0)
        if not role_ids:
            return counts

        stmt = (
            select(principal_roles.c.role_id, func.count())
            .where(principal_roles.c.role_id.in_(role_ids))
            .group_by(principal_roles.c.role_id)
        )
        result = await self.session.execute(stmt)
        for role_id, count in result.all():
            counts[role_id] = count
        return counts

    async def permission_holders(
        self,
        permission_ids: Sequence[UUID],
        guard_name: str,
    ) -> dict[UUID, int]:
        """Count distinct principals holding each permission.

        Args:
            permission_ids: Permissions to count for
            guard_name: Guard the permissions belong to; role-derived
                grants only count through roles of this guard

        Returns:
            Mapping of permission id to holder count (zero counts included)
        """
        counts = dict.fromkeys(permission_ids, 0)
        if not permission_ids:
            return counts

        direct = select(
            principal_permissions.c.permission_id.label("permission_id"),
            principal_permissions.c.principal_id.label("principal_id"),
        ).where(principal_permissions.c.permission_id.in_(permission_ids))

        via_roles = (
            select(
                role_permissions.c.permission_id.label("permission_id"),
                principal_roles.c.principal_id.label("principal_id"),
            )
            .select_from(principal_roles)
            .join(role_permissions, role_permissions.c.role_id == principal_roles.c.role_id)
            .join(Role, Role.id == principal_roles.c.role_id)
            .where(
                role_permissions.c.permission_id.in_(permission_ids),
                Role.guard_name == guard_name,
            )
        )

        # UNION (not UNION ALL) drops principals holding a permission both ways
        holders = union(direct, via_roles).subquery()
        stmt = select(holders.c.permission_id, func.count()).group_by(
            holders.c.permission_id
        )
        result = await self.session.execute(stmt)
        for permission_id, count in result.all():
            counts[permission_id] = count
        return counts

    async def count_role_holders(self, role_id: UUID) -> int:
        """Count principals directly assigned a role."""
        counts = await self.role_holders([role_id])
        return counts[role_id]

    async def count_permission_holders(self, permission_id: UUID, guard_name: str) -> int:
        """Count distinct principals holding a permission."""
        counts = await self.permission_holders([permission_id], guard_name)
        return counts[permission_id]
