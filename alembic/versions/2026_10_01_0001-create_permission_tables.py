"""create_permission_tables

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-01 00:01:00.000000

This migration creates:
- permissions and roles, unique per guard on the lowercased name
- role_permissions junction
- principal_roles and principal_permissions junctions
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f1a9c2e7b10"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "permissions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("guard_name", sa.String(100), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_permissions_category", "permissions", ["category"])
    op.create_index("ix_permissions_guard_name", "permissions", ["guard_name"])
    op.create_index(
        "uq_permissions_name_guard",
        "permissions",
        [sa.text("lower(name)"), "guard_name"],
        unique=True,
    )

    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column(
            "is_protected",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column("guard_name", sa.String(100), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_roles_guard_name", "roles", ["guard_name"])
    op.create_index(
        "uq_roles_name_guard",
        "roles",
        [sa.text("lower(name)"), "guard_name"],
        unique=True,
    )

    op.create_table(
        "role_permissions",
        sa.Column(
            "role_id",
            sa.Uuid(),
            sa.ForeignKey("roles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "permission_id",
            sa.Uuid(),
            sa.ForeignKey("permissions.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "principal_roles",
        sa.Column("principal_id", sa.String(255), primary_key=True),
        sa.Column(
            "role_id",
            sa.Uuid(),
            sa.ForeignKey("roles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index("ix_principal_roles_role_id", "principal_roles", ["role_id"])

    op.create_table(
        "principal_permissions",
        sa.Column("principal_id", sa.String(255), primary_key=True),
        sa.Column(
            "permission_id",
            sa.Uuid(),
            sa.ForeignKey("permissions.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index(
        "ix_principal_permissions_permission_id",
        "principal_permissions",
        ["permission_id"],
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index(
        "ix_principal_permissions_permission_id", table_name="principal_permissions"
    )
    op.drop_table("principal_permissions")
    op.drop_index("ix_principal_roles_role_id", table_name="principal_roles")
    op.drop_table("principal_roles")
    op.drop_table("role_permissions")
    op.drop_index("uq_roles_name_guard", table_name="roles")
    op.drop_index("ix_roles_guard_name", table_name="roles")
    op.drop_table("roles")
    op.drop_index("uq_permissions_name_guard", table_name="permissions")
    op.drop_index("ix_permissions_guard_name", table_name="permissions")
    op.drop_index("ix_permissions_category", table_name="permissions")
    op.drop_table("permissions")
