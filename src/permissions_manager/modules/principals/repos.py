"""Assignment repository for principal grants.

Principals are opaque identifiers, so this repository works directly on
the junction tables rather than on a principal model.
"""

from collections.abc import Sequence
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from permissions_manager.api.dependencies import DBSession
from permissions_manager.core.permissions.models import (
    Permission,
    Role,
    principal_permissions,
    principal_roles,
)


class AssignmentRepository:
    """Repository for principal role and permission assignments.

    Every read and replacement is scoped to one guard; assignments a
    principal holds in other guards are never touched.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def roles_for(self, principal_id: str, guard_name: str) -> list[Role]:
        """Get the roles assigned to a principal within a guard, ordered by name."""
        stmt = (
            select(Role)
            .join(principal_roles, principal_roles.c.role_id == Role.id)
            .where(
                principal_roles.c.principal_id == principal_id,
                Role.guard_name == guard_name,
            )
            .order_by(func.lower(Role.name), Role.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def permissions_for(self, principal_id: str, guard_name: str) -> list[Permission]:
        """Get the permissions granted directly to a principal within a guard."""
        stmt = (
            select(Permission)
            .join(
                principal_permissions,
                principal_permissions.c.permission_id == Permission.id,
            )
            .where(
                principal_permissions.c.principal_id == principal_id,
                Permission.guard_name == guard_name,
            )
            .order_by(func.lower(Permission.name), Permission.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def has_role(self, principal_id: str, role_id: UUID) -> bool:
        """Check whether a principal is assigned a role."""
        stmt = select(func.count()).where(
            principal_roles.c.principal_id == principal_id,
            principal_roles.c.role_id == role_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def replace_roles(
        self, principal_id: str, guard_name: str, role_ids: Sequence[UUID]
    ) -> None:
        """Replace a principal's roles within one guard.

        Args:
            principal_id: The principal's identifier
            guard_name: Guard whose assignments are replaced
            role_ids: Roles to assign; all must belong to the guard
        """
        in_guard = select(Role.id).where(Role.guard_name == guard_name)
        await self.session.execute(
            delete(principal_roles).where(
                principal_roles.c.principal_id == principal_id,
                principal_roles.c.role_id.in_(in_guard),
            )
        )
        if role_ids:
            await self.session.execute(
                insert(principal_roles),
                [{"principal_id": principal_id, "role_id": rid} for rid in role_ids],
            )

    async def replace_permissions(
        self, principal_id: str, guard_name: str, permission_ids: Sequence[UUID]
    ) -> None:
        """Replace a principal's direct permissions within one guard."""
        in_guard = select(Permission.id).where(Permission.guard_name == guard_name)
        await self.session.execute(
            delete(principal_permissions).where(
                principal_permissions.c.principal_id == principal_id,
                principal_permissions.c.permission_id.in_(in_guard),
            )
        )
        if permission_ids:
            await self.session.execute(
                insert(principal_permissions),
                [
                    {"principal_id": principal_id, "permission_id": pid}
                    for pid in permission_ids
                ],
            )

    async def add_role(self, principal_id: str, role_id: UUID) -> bool:
        """Assign a role to a principal.

        Returns:
            False if the principal already held the role
        """
        if await self.has_role(principal_id, role_id):
            return False

        # A concurrent assignment of the same pair is ignored, not an error
        values = {"principal_id": principal_id, "role_id": role_id}
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(principal_roles).values(**values)
            stmt = stmt.on_conflict_do_nothing()
        elif dialect == "sqlite":
            stmt = sqlite_insert(principal_roles).values(**values)
            stmt = stmt.on_conflict_do_nothing()
        else:
            stmt = insert(principal_roles).values(**values)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def remove_role(self, principal_id: str, role_id: UUID) -> bool:
        """Unassign a role from a principal.

        Returns:
            False if the principal did not hold the role
        """
        result = await self.session.execute(
            delete(principal_roles).where(
                principal_roles.c.principal_id == principal_id,
                principal_roles.c.role_id == role_id,
            )
        )
        return result.rowcount > 0


# Type alias for dependency injection
AssignmentRepo = Annotated[AssignmentRepository, Depends(AssignmentRepository)]
