"""Permission and role schema factories for tests."""

from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory

from permissions_manager.modules.permissions.schemas import PermissionCreate
from permissions_manager.modules.roles.schemas import RoleCreate


class PermissionCreateFactory(ModelFactory):
    """Factory for creating PermissionCreate schemas."""

    __model__ = PermissionCreate

    @classmethod
    def name(cls) -> str:
        """Generate a unique permission name."""
        return f"manage {uuid4().hex[:8]}"

    @classmethod
    def description(cls) -> str:
        return "Generated permission"

    @classmethod
    def category(cls) -> str | None:
        """Default to a configured category."""
        return "content"

    @classmethod
    def guard_name(cls) -> str | None:
        """Leave the guard to the resolver."""
        return None

    @classmethod
    def role_ids(cls) -> list:
        return []


class RoleCreateFactory(ModelFactory):
    """Factory for creating RoleCreate schemas."""

    __model__ = RoleCreate

    @classmethod
    def name(cls) -> str:
        """Generate a unique role name."""
        return f"Role {uuid4().hex[:8]}"

    @classmethod
    def description(cls) -> str:
        return "Generated role"

    @classmethod
    def guard_name(cls) -> str | None:
        """Leave the guard to the resolver."""
        return None

    @classmethod
    def is_protected(cls) -> bool:
        """Default to unprotected."""
        return False

    @classmethod
    def permission_ids(cls) -> list:
        return []
