"""Integration tests for PermissionService."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from permissions_manager.core.errors import (
    DuplicateNameError,
    GuardMismatchError,
    InUseError,
    NotFoundError,
    ValidationFailedError,
)
from permissions_manager.core.permissions import (
    DenialReason,
    Permission,
    Role,
    principal_permissions,
    principal_roles,
)
from permissions_manager.modules.permissions.schemas import PermissionUpdate
from tests.factories.permissions import PermissionCreateFactory


pytestmark = pytest.mark.integration


class TestCreatePermission:
    """Tests for creating permissions."""

    async def test_creates_in_default_guard(self, permission_service, registrar):
        data = PermissionCreateFactory.build(name="view reports", guard_name="api")

        permission = await permission_service.create_permission(data)

        assert permission.id is not None
        assert permission.name == "view reports"
        assert permission.guard_name == "web"
        assert permission.category == "content"
        assert registrar.invalidations == 1

    async def test_creates_with_roles(self, permission_service, web_role: Role):
        data = PermissionCreateFactory.build(role_ids=[web_role.id])

        permission = await permission_service.create_permission(data)

        assert [role.name for role in permission.roles] == ["Manager"]
        assert permission in web_role.permissions

    async def test_duplicate_name_is_case_insensitive(
        self, permission_service, web_permission: Permission, registrar
    ):
        data = PermissionCreateFactory.build(name="EDIT Articles")

        with pytest.raises(DuplicateNameError) as exc_info:
            await permission_service.create_permission(data)

        assert exc_info.value.message == (
            "A permission with this name already exists for this guard."
        )
        assert registrar.invalidations == 0

    async def test_same_name_in_other_guard_is_allowed(
        self, permission_service, web_permission: Permission, guards
    ):
        guards.selection_enabled = True
        data = PermissionCreateFactory.build(name="edit articles", guard_name="api")

        permission = await permission_service.create_permission(data)

        assert permission.guard_name == "api"

    async def test_unknown_category_is_rejected(self, permission_service, registrar):
        data = PermissionCreateFactory.build(category="billing")

        with pytest.raises(ValidationFailedError) as exc_info:
            await permission_service.create_permission(data)

        assert exc_info.value.field == "category"
        assert registrar.invalidations == 0

    async def test_empty_category_is_stored_as_none(self, permission_service):
        data = PermissionCreateFactory.build(category="")

        permission = await permission_service.create_permission(data)

        assert permission.category is None

    async def test_role_from_other_guard_is_a_mismatch(
        self, permission_service, api_role: Role, db: AsyncSession
    ):
        data = PermissionCreateFactory.build(name="sync data", role_ids=[api_role.id])

        with pytest.raises(GuardMismatchError):
            await permission_service.create_permission(data)

        count = await db.scalar(select(func.count()).select_from(Permission))
        assert count == 0

    async def test_unknown_role_is_not_found(self, permission_service):
        data = PermissionCreateFactory.build(role_ids=[uuid4()])

        with pytest.raises(NotFoundError):
            await permission_service.create_permission(data)

    async def test_selection_enabled_requires_guard(self, permission_service, guards):
        guards.selection_enabled = True

        with pytest.raises(ValidationFailedError) as exc_info:
            await permission_service.create_permission(PermissionCreateFactory.build())

        assert exc_info.value.rule == "required"

    async def test_racing_insert_hits_unique_index(
        self, permission_service, web_permission: Permission, permission_repo, monkeypatch
    ):
        async def no_existing(name, guard_name):
            return None

        # Simulates a concurrent insert that committed after the pre-check
        monkeypatch.setattr(permission_repo, "get_by_name", no_existing)
        data = PermissionCreateFactory.build(name="Edit Articles")

        with pytest.raises(DuplicateNameError):
            await permission_service.create_permission(data)


class TestUpdatePermission:
    """Tests for updating permissions."""

    async def test_updates_fields(self, permission_service, web_permission: Permission):
        permission = await permission_service.update_permission(
            web_permission.id,
            PermissionUpdate(description="Change any article", category="admin"),
        )

        assert permission.description == "Change any article"
        assert permission.category == "admin"
        assert permission.name == "edit articles"

    async def test_rename_to_taken_name_fails(
        self, permission_service, web_permission: Permission, db: AsyncSession
    ):
        db.add(Permission(name="publish articles", guard_name="web", roles=[]))
        await db.commit()

        with pytest.raises(DuplicateNameError):
            await permission_service.update_permission(
                web_permission.id, PermissionUpdate(name="Publish Articles")
            )

    async def test_case_only_rename_is_allowed(
        self, permission_service, web_permission: Permission
    ):
        permission = await permission_service.update_permission(
            web_permission.id, PermissionUpdate(name="Edit Articles")
        )

        assert permission.name == "Edit Articles"

    async def test_role_ids_replace_roles(
        self, permission_service, web_permission: Permission, web_role: Role, admin_role
    ):
        await permission_service.update_permission(
            web_permission.id, PermissionUpdate(role_ids=[web_role.id, admin_role.id])
        )
        permission = await permission_service.update_permission(
            web_permission.id, PermissionUpdate(role_ids=[admin_role.id])
        )

        assert [role.name for role in permission.roles] == ["Admin"]

    async def test_omitted_role_ids_keep_roles(
        self, permission_service, web_permission: Permission, web_role: Role
    ):
        await permission_service.sync_permission_roles(web_permission.id, [web_role.id])

        permission = await permission_service.update_permission(
            web_permission.id, PermissionUpdate(description="kept")
        )

        assert [role.name for role in permission.roles] == ["Manager"]

    async def test_other_guard_lookup_is_not_found(
        self, permission_service, db: AsyncSession
    ):
        permission = Permission(name="call api", guard_name="api", roles=[])
        db.add(permission)
        await db.commit()

        with pytest.raises(NotFoundError):
            await permission_service.get_permission(permission.id)


class TestListPermissions:
    """Tests for listing permissions."""

    @pytest.fixture
    async def catalogue(self, db: AsyncSession) -> None:
        for name, category, guard in [
            ("view users", "users", "web"),
            ("Edit users", "users", "web"),
            ("archive posts", "content", "web"),
            ("call api", "other", "api"),
        ]:
            db.add(Permission(name=name, category=category, guard_name=guard, roles=[]))
        await db.commit()

    async def test_orders_by_name_ignoring_case(self, permission_service, catalogue):
        rows, total, size = await permission_service.list_permissions()

        assert [p.name for p, _ in rows] == ["archive posts", "Edit users", "view users"]
        assert total == 3
        assert size == 6

    async def test_filters_by_category(self, permission_service, catalogue):
        rows, total, _ = await permission_service.list_permissions(category="users")

        assert total == 2
        assert {p.category for p, _ in rows} == {"users"}

    async def test_category_filter_ignored_when_disabled(
        self, permission_service, catalogue, settings
    ):
        settings.category_filtering = False

        _, total, _ = await permission_service.list_permissions(category="users")

        assert total == 3

    async def test_search_matches_fragment(self, permission_service, catalogue):
        rows, _, _ = await permission_service.list_permissions(search="user")

        assert [p.name for p, _ in rows] == ["Edit users", "view users"]

    async def test_paginates(self, permission_service, catalogue):
        rows, total, size = await permission_service.list_permissions(page=2, page_size=2)

        assert [p.name for p, _ in rows] == ["view users"]
        assert total == 3
        assert size == 2

    async def test_counts_distinct_holders(
        self, permission_service, web_permission: Permission, web_role: Role, db
    ):
        web_role.permissions.append(web_permission)
        await db.commit()
        await db.execute(
            principal_roles.insert(),
            [
                {"principal_id": "u1", "role_id": web_role.id},
                {"principal_id": "u2", "role_id": web_role.id},
            ],
        )
        await db.execute(
            principal_permissions.insert(),
            [
                {"principal_id": "u1", "permission_id": web_permission.id},
                {"principal_id": "u3", "permission_id": web_permission.id},
            ],
        )
        await db.commit()

        rows, _, _ = await permission_service.list_permissions()

        assert rows == [(web_permission, 3)]

    async def test_available_permissions_are_unpaginated(
        self, permission_service, catalogue
    ):
        permissions = await permission_service.available_permissions()

        assert len(permissions) == 3


class TestDeletePermission:
    """Tests for deleting permissions."""

    async def test_deletes_unheld_permission(
        self, permission_service, web_permission: Permission, db, registrar
    ):
        permission_id = web_permission.id

        name = await permission_service.delete_permission(permission_id)

        assert name == "edit articles"
        assert await db.get(Permission, permission_id) is None
        assert registrar.invalidations == 1

    async def test_direct_holder_blocks_deletion(
        self, permission_service, web_permission: Permission, db, registrar
    ):
        await db.execute(
            principal_permissions.insert().values(
                principal_id="u1", permission_id=web_permission.id
            )
        )
        await db.commit()

        decision = await permission_service.can_delete_permission(web_permission.id)
        with pytest.raises(InUseError) as exc_info:
            await permission_service.delete_permission(web_permission.id)

        assert decision.reason is DenialReason.IN_USE
        assert exc_info.value.count == 1
        assert registrar.invalidations == 0
