"""API tests for principal assignment endpoints."""

import pytest
from httpx import AsyncClient

from permissions_manager.core.permissions import Permission, Role


pytestmark = pytest.mark.integration


async def test_sync_roles_and_read_access(
    client: AsyncClient, web_role: Role, web_permission: Permission
):
    await client.put(
        f"/api/v1/roles/{web_role.id}/permissions",
        json={"ids": [str(web_permission.id)]},
    )

    response = await client.put(
        "/api/v1/principals/u1/roles", json={"ids": [str(web_role.id)]}
    )
    assert response.status_code == 200
    assert response.json()["notification"]["message"] == "Roles successfully synced."

    access = await client.get("/api/v1/principals/u1/access")
    assert access.json() == {
        "principal_id": "u1",
        "guard_name": "web",
        "roles": [{"id": str(web_role.id), "name": "Manager"}],
        "permissions": [],
        "effective_permissions": ["edit articles"],
    }

    check = await client.get(
        "/api/v1/principals/u1/check", params={"permission": "EDIT ARTICLES"}
    )
    assert check.json()["allowed"] is True


async def test_cross_guard_assignment_is_rejected(client: AsyncClient, api_role: Role):
    response = await client.put(
        "/api/v1/principals/u1/roles", json={"ids": [str(api_role.id)]}
    )

    assert response.status_code == 422
    assert response.json()["title"] == "Guard Mismatch"


async def test_assign_and_remove_role(client: AsyncClient, web_role: Role):
    assigned = await client.post(f"/api/v1/principals/u1/roles/{web_role.id}")
    blocked = await client.delete(f"/api/v1/roles/{web_role.id}")
    removed = await client.delete(f"/api/v1/principals/u1/roles/{web_role.id}")
    deleted = await client.delete(f"/api/v1/roles/{web_role.id}")

    assert assigned.status_code == 200
    assert blocked.status_code == 409
    assert blocked.json()["count"] == 1
    assert removed.json()["notification"]["message"] == "Role 'Manager' successfully removed."
    assert deleted.status_code == 200


async def test_sync_direct_permissions(client: AsyncClient, web_permission: Permission):
    response = await client.put(
        "/api/v1/principals/u1/permissions", json={"ids": [str(web_permission.id)]}
    )

    assert response.status_code == 200
    assert [p["name"] for p in response.json()["data"]] == ["edit articles"]
