"""Permission system database models.

This module defines the RBAC (Role-Based Access Control) models:
- Permission: A named capability, optionally tagged with a category
- Role: A named set of permissions
- role_permissions: Junction table linking roles to permissions
- principal_roles / principal_permissions: Junction tables linking
  external principals (users) to roles and to direct permissions

Every model is scoped to a guard. Names are unique per guard, compared
case-insensitively, and enforced by a functional unique index.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    String,
    Table,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from permissions_manager.core.constants import (
    MAX_CATEGORY_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PRINCIPAL_ID_LENGTH,
)
from permissions_manager.core.database.base import (
    Base,
    GuardMixin,
    TimestampMixin,
    UUIDMixin,
)


# Junction table for Role <-> Permission many-to-many relationship
role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column(
        "role_id", Uuid, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "permission_id",
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

# Principals are opaque identifiers owned by an external directory
principal_roles = Table(
    "principal_roles",
    Base.metadata,
    Column("principal_id", String(MAX_PRINCIPAL_ID_LENGTH), primary_key=True),
    Column(
        "role_id",
        Uuid,
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)

principal_permissions = Table(
    "principal_permissions",
    Base.metadata,
    Column("principal_id", String(MAX_PRINCIPAL_ID_LENGTH), primary_key=True),
    Column(
        "permission_id",
        Uuid,
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)


class Permission(Base, UUIDMixin, TimestampMixin, GuardMixin):
    """Permission model representing a named capability.

    Attributes:
        name: Permission name, unique per guard (e.g., "edit articles")
        description: Human-readable description of the permission
        category: Optional category key from the configured category table
    """

    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    category: Mapped[str | None] = mapped_column(
        String(MAX_CATEGORY_LENGTH),
        nullable=True,
        index=True,
    )

    # Relationships
    roles: Mapped[list["Role"]] = relationship(
        "Role",
        secondary=role_permissions,
        back_populates="permissions",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Permission(id={self.id}, name={self.name}, guard={self.guard_name})>"


class Role(Base, UUIDMixin, TimestampMixin, GuardMixin):
    """Role model representing a named set of permissions.

    Attributes:
        name: Role name, unique per guard (e.g., "Admin", "Editor")
        description: Human-readable description of the role
        is_protected: Whether the role is shielded from deletion
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(MAX_DESCRIPTION_LENGTH),
        nullable=True,
    )
    is_protected: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Relationships
    permissions: Mapped[list["Permission"]] = relationship(
        "Permission",
        secondary=role_permissions,
        back_populates="roles",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name}, guard={self.guard_name})>"


# Case-insensitive uniqueness of (name, guard); authoritative over any pre-check
Index(
    "uq_permissions_name_guard",
    func.lower(Permission.name),
    Permission.guard_name,
    unique=True,
)
Index(
    "uq_roles_name_guard",
    func.lower(Role.name),
    Role.guard_name,
    unique=True,
)

