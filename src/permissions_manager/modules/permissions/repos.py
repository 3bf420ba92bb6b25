"""Permission repository for database operations."""

from collections.abc import Sequence
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from permissions_manager.api.dependencies import DBSession
from permissions_manager.core.permissions.models import Permission


class PermissionRepository:
    """Repository for Permission database operations.

    Listings are scoped to one guard and ordered by name,
    case-insensitively.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, permission: Permission) -> Permission:
        """Create a new permission.

        Args:
            permission: Permission instance to create

        Returns:
            The created permission with ID populated
        """
        self.session.add(permission)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def get_by_id(
        self, permission_id: UUID, guard_name: str | None = None
    ) -> Permission | None:
        """Get a permission by ID.

        Args:
            permission_id: The permission's UUID
            guard_name: Optional guard for scoping

        Returns:
            Permission if found, None otherwise
        """
        stmt = select(Permission).where(Permission.id == permission_id)
        if guard_name:
            stmt = stmt.where(Permission.guard_name == guard_name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str, guard_name: str) -> Permission | None:
        """Get a permission by name within a guard, ignoring case."""
        stmt = select(Permission).where(
            func.lower(Permission.name) == name.lower(),
            Permission.guard_name == guard_name,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, permission_ids: Sequence[UUID]) -> list[Permission]:
        """Get all permissions matching the given IDs, across guards."""
        if not permission_ids:
            return []
        stmt = select(Permission).where(Permission.id.in_(set(permission_ids)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_guard(
        self,
        guard_name: str,
        category: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> tuple[list[Permission], int]:
        """List permissions for a guard.

        Args:
            guard_name: The guard to list
            category: Optional category key filter
            search: Optional case-insensitive name fragment
            page: Page number (1-indexed)
            page_size: Items per page, or None for everything

        Returns:
            Tuple of (permissions list, total count)
        """
        conditions = [Permission.guard_name == guard_name]
        if category:
            conditions.append(Permission.category == category)
        if search:
            conditions.append(
                func.lower(Permission.name).contains(search.lower(), autoescape=True)
            )

        count_stmt = select(func.count()).select_from(Permission).where(*conditions)
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar_one()

        stmt = (
            select(Permission)
            .where(*conditions)
            .order_by(func.lower(Permission.name), Permission.id)
        )
        if page_size:
            stmt = stmt.offset((page - 1) * page_size).limit(page_size)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def update(self, permission: Permission) -> Permission:
        """Flush pending changes to a permission.

        Args:
            permission: Permission instance with updated fields

        Returns:
            The updated permission
        """
        await self.session.flush()
        return permission

    async def delete(self, permission: Permission) -> None:
        """Delete a permission and its role links.

        Args:
            permission: Permission instance to delete
        """
        # Detach from loaded roles so their collections stay current
        permission.roles.clear()
        await self.session.delete(permission)
        await self.session.flush()


# Type alias for dependency injection
PermissionRepo = Annotated[PermissionRepository, Depends(PermissionRepository)]
