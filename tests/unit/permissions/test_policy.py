"""Unit tests for the protection and deletion-safety policy."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from permissions_manager.core.errors import InUseError, ProtectedError
from permissions_manager.core.permissions import (
    DeletionPolicy,
    DenialReason,
    Permission,
    PolicyDecision,
    Role,
)


pytestmark = pytest.mark.unit


def make_role(name: str, is_protected: bool = False) -> Role:
    return Role(id=uuid4(), name=name, guard_name="web", is_protected=is_protected)


@pytest.fixture
def holders() -> AsyncMock:
    holders = AsyncMock()
    holders.count_role_holders.return_value = 0
    holders.count_permission_holders.return_value = 0
    return holders


@pytest.fixture
def policy(holders: AsyncMock) -> DeletionPolicy:
    return DeletionPolicy(holders, ["Admin", "Basic"])


class TestPolicyDecision:
    """Tests for PolicyDecision."""

    def test_allow_enforces_nothing(self):
        PolicyDecision.allow().enforce("Editor")

    def test_protected_raises_protected_error(self):
        with pytest.raises(ProtectedError) as exc_info:
            PolicyDecision.protected().enforce("Admin")
        assert exc_info.value.message == "Cannot delete protected role: Admin"

    def test_in_use_raises_with_count(self):
        with pytest.raises(InUseError) as exc_info:
            PolicyDecision.in_use(3).enforce("Editor")
        assert exc_info.value.count == 3
        assert exc_info.value.message == (
            "Cannot delete 'Editor' because it is assigned to 3 user(s). "
            "Please remove user assignments first."
        )


class TestRoleDeletion:
    """Tests for DeletionPolicy.can_delete_role."""

    async def test_unheld_role_can_be_deleted(self, policy, holders):
        decision = await policy.can_delete_role(make_role("Editor"))

        assert decision.allowed
        holders.count_role_holders.assert_awaited_once()

    async def test_flagged_role_is_protected_without_holders(self, policy, holders):
        decision = await policy.can_delete_role(make_role("Editor", is_protected=True))

        assert not decision.allowed
        assert decision.reason is DenialReason.PROTECTED
        holders.count_role_holders.assert_not_awaited()

    @pytest.mark.parametrize("name", ["Admin", "admin", "BASIC"])
    async def test_protected_name_wins_over_flag(self, policy, name):
        decision = await policy.can_delete_role(make_role(name, is_protected=False))

        assert decision.reason is DenialReason.PROTECTED

    async def test_protection_checked_before_holders(self, policy, holders):
        holders.count_role_holders.return_value = 5

        decision = await policy.can_delete_role(make_role("Admin"))

        assert decision.reason is DenialReason.PROTECTED
        assert decision.count == 0

    async def test_held_role_is_in_use(self, policy, holders):
        holders.count_role_holders.return_value = 2

        decision = await policy.can_delete_role(make_role("Editor"))

        assert decision.reason is DenialReason.IN_USE
        assert decision.count == 2


class TestPermissionDeletion:
    """Tests for DeletionPolicy.can_delete_permission."""

    async def test_counts_holders_in_permission_guard(self, policy, holders):
        permission = Permission(id=uuid4(), name="edit articles", guard_name="api")

        decision = await policy.can_delete_permission(permission)

        assert decision.allowed
        holders.count_permission_holders.assert_awaited_once_with(permission.id, "api")

    async def test_held_permission_is_in_use(self, policy, holders):
        holders.count_permission_holders.return_value = 1
        permission = Permission(id=uuid4(), name="edit articles", guard_name="web")

        decision = await policy.can_delete_permission(permission)

        assert decision == PolicyDecision.in_use(1)


class TestRoleEdits:
    """Tests for DeletionPolicy.check_role_edit."""

    def test_protected_name_cannot_be_renamed(self, policy):
        with pytest.raises(ProtectedError):
            policy.check_role_edit(make_role("Admin", is_protected=True), name="Owner")

    def test_protected_name_keeps_its_flag(self, policy):
        with pytest.raises(ProtectedError):
            policy.check_role_edit(
                make_role("Admin", is_protected=True), is_protected=False
            )

    def test_case_change_is_not_a_rename(self, policy):
        policy.check_role_edit(make_role("Admin", is_protected=True), name="ADMIN")

    def test_flagged_role_can_be_unflagged(self, policy):
        policy.check_role_edit(
            make_role("Editor", is_protected=True), name="Writer", is_protected=False
        )

    def test_rename_into_protected_set_keeps_flag(self, policy):
        with pytest.raises(ProtectedError):
            policy.check_role_edit(make_role("Editor"), name="admin", is_protected=False)
