"""Role repository for database operations."""

from collections.abc import Sequence
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from permissions_manager.api.dependencies import DBSession
from permissions_manager.core.permissions.models import Role, role_permissions


class RoleRepository:
    """Repository for Role database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, role: Role) -> Role:
        """Create a new role.

        Args:
            role: Role instance to create

        Returns:
            The created role with ID populated
        """
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_by_id(self, role_id: UUID, guard_name: str | None = None) -> Role | None:
        """Get a role by ID.

        Args:
            role_id: The role's UUID
            guard_name: Optional guard for scoping

        Returns:
            Role if found, None otherwise
        """
        stmt = select(Role).where(Role.id == role_id)
        if guard_name:
            stmt = stmt.where(Role.guard_name == guard_name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str, guard_name: str) -> Role | None:
        """Get a role by name within a guard, ignoring case."""
        stmt = select(Role).where(
            func.lower(Role.name) == name.lower(),
            Role.guard_name == guard_name,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def name_exists(self, name: str, guard_name: str) -> bool:
        """Check whether a role name is taken within a guard."""
        return await self.get_by_name(name, guard_name) is not None

    async def get_many(self, role_ids: Sequence[UUID]) -> list[Role]:
        """Get all roles matching the given IDs, across guards."""
        if not role_ids:
            return []
        stmt = select(Role).where(Role.id.in_(set(role_ids)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_guard(
        self,
        guard_name: str,
        page: int = 1,
        page_size: int | None = None,
    ) -> tuple[list[Role], int]:
        """List roles for a guard, ordered by name ignoring case.

        Args:
            guard_name: The guard to list
            page: Page number (1-indexed)
            page_size: Items per page, or None for everything

        Returns:
            Tuple of (roles list, total count)
        """
        count_stmt = (
            select(func.count()).select_from(Role).where(Role.guard_name == guard_name)
        )
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar_one()

        stmt = (
            select(Role)
            .where(Role.guard_name == guard_name)
            .order_by(func.lower(Role.name), Role.id)
        )
        if page_size:
            stmt = stmt.offset((page - 1) * page_size).limit(page_size)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def permission_counts(self, role_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Count the permissions attached to each role."""
        counts = dict.fromkeys(role_ids, 0)
        if not role_ids:
            return counts
        stmt = (
            select(role_permissions.c.role_id, func.count())
            .where(role_permissions.c.role_id.in_(role_ids))
            .group_by(role_permissions.c.role_id)
        )
        result = await self.session.execute(stmt)
        for role_id, count in result.all():
            counts[role_id] = count
        return counts

    async def update(self, role: Role) -> Role:
        """Flush pending changes to a role."""
        await self.session.flush()
        return role

    async def delete(self, role: Role) -> None:
        """Delete a role and its permission links.

        Args:
            role: Role instance to delete
        """
        role.permissions.clear()
        await self.session.delete(role)
        await self.session.flush()


# Type alias for dependency injection
RoleRepo = Annotated[RoleRepository, Depends(RoleRepository)]
