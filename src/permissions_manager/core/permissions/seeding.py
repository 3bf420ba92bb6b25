"""Seed data for roles and permissions.

``ensure_protected_roles`` is idempotent and safe to run on every
deploy. ``seed_demo`` adds a small set of example permissions and an
Editor role for local development.
"""

from dataclasses import dataclass, field

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from permissions_manager.config import Settings
from permissions_manager.core.cache import PermissionRegistrar
from permissions_manager.core.database import unit_of_work
from permissions_manager.core.permissions.models import Permission, Role


logger = structlog.get_logger()

# (name, category, description)
DEMO_PERMISSIONS: list[tuple[str, str, str]] = [
    ("view users", "users", "See the user directory"),
    ("edit users", "users", "Change user profiles"),
    ("view articles", "content", "Read unpublished articles"),
    ("edit articles", "content", "Write and change articles"),
    ("publish articles", "content", "Publish articles"),
    ("manage settings", "settings", "Change application settings"),
]

DEMO_EDITOR_PERMISSIONS = {"view articles", "edit articles", "publish articles"}


@dataclass
class SeedResult:
    """Names of the records a seeding run created."""

    roles: list[str] = field(default_factory=list)
    permissions: list[str] = field(default_factory=list)


async def _find_role(session: AsyncSession, name: str, guard_name: str) -> Role | None:
    result = await session.execute(
        select(Role).where(
            func.lower(Role.name) == name.lower(),
            Role.guard_name == guard_name,
        )
    )
    return result.scalar_one_or_none()


async def _find_permission(
    session: AsyncSession, name: str, guard_name: str
) -> Permission | None:
    result = await session.execute(
        select(Permission).where(
            func.lower(Permission.name) == name.lower(),
            Permission.guard_name == guard_name,
        )
    )
    return result.scalar_one_or_none()


async def ensure_protected_roles(
    session: AsyncSession,
    registrar: PermissionRegistrar,
    settings: Settings,
) -> SeedResult:
    """Create every configured protected role in every available guard.

    Existing roles with a protected name are flagged protected.
    """
    created = SeedResult()
    # Names differing only in case share one role
    names: dict[str, str] = {}
    for name in settings.protected_roles:
        names.setdefault(name.lower(), name)
    async with unit_of_work(session, registrar, entity="role"):
        for guard in settings.available_guards:
            for name in names.values():
                role = await _find_role(session, name, guard)
                if role is None:
                    session.add(
                        Role(
                            name=name,
                            guard_name=guard,
                            is_protected=True,
                            permissions=[],
                        )
                    )
                    created.roles.append(f"{guard}:{name}")
                elif not role.is_protected:
                    role.is_protected = True

    logger.info("protected_roles_seeded", created=len(created.roles))
    return created


async def seed_demo(
    session: AsyncSession,
    registrar: PermissionRegistrar,
    settings: Settings,
) -> SeedResult:
    """Create demo permissions and an Editor role in the default guard."""
    created = await ensure_protected_roles(session, registrar, settings)
    guard = settings.default_guard

    async with unit_of_work(session, registrar, entity="permission"):
        permissions: dict[str, Permission] = {}
        for name, category, description in DEMO_PERMISSIONS:
            permission = await _find_permission(session, name, guard)
            if permission is None:
                permission = Permission(
                    name=name,
                    category=category if category in settings.categories else None,
                    description=description,
                    guard_name=guard,
                )
                session.add(permission)
                created.permissions.append(name)
            permissions[name] = permission

        if await _find_role(session, "Editor", guard) is None:
            editor = Role(
                name="Editor",
                description="Writes and publishes content",
                guard_name=guard,
            )
            editor.permissions = [
                permissions[name] for name in sorted(DEMO_EDITOR_PERMISSIONS)
            ]
            session.add(editor)
            created.roles.append(f"{guard}:Editor")

    logger.info(
        "demo_data_seeded",
        roles=len(created.roles),
        permissions=len(created.permissions),
    )
    return created
