"""Protection and deletion-safety policy.

Roles named in the protected set, or flagged protected, can never be
deleted. Roles and permissions still held by principals cannot be
deleted either; callers must remove the assignments first. A denial is
final: there is no force-delete path.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

import structlog

from permissions_manager.core.errors import InUseError, ProtectedError
from permissions_manager.core.permissions.holders import HolderCounter
from permissions_manager.core.permissions.models import Permission, Role


logger = structlog.get_logger()


class DenialReason(StrEnum):
    """Why a deletion was refused."""

    PROTECTED = "protected"
    IN_USE = "in_use"


@dataclass(frozen=True)
class PolicyDecision:
    """Outcome of a deletion check.

    Attributes:
        allowed: Whether the deletion may proceed
        reason: Why it was denied, if it was
        count: Number of principals still holding the entity
    """

    allowed: bool
    reason: DenialReason | None = None
    count: int = 0

    @classmethod
    def allow(cls) -> "PolicyDecision":
        return cls(allowed=True)

    @classmethod
    def protected(cls) -> "PolicyDecision":
        return cls(allowed=False, reason=DenialReason.PROTECTED)

    @classmethod
    def in_use(cls, count: int) -> "PolicyDecision":
        return cls(allowed=False, reason=DenialReason.IN_USE, count=count)

    def enforce(self, name: str) -> None:
        """Raise the matching error when the decision is a denial.

        Args:
            name: Name of the entity, used in the error message

        Raises:
            ProtectedError: If denied because the role is protected
            InUseError: If denied because principals still hold the entity
        """
        if self.reason is DenialReason.PROTECTED:
            raise ProtectedError(name)
        if self.reason is DenialReason.IN_USE:
            raise InUseError(name, count=self.count)


class DeletionPolicy:
    """Decides whether roles and permissions may be deleted or renamed."""

    def __init__(self, holders: HolderCounter, protected_roles: Iterable[str]) -> None:
        self.holders = holders
        self._protected_names = {name.lower() for name in protected_roles}

    def is_protected_name(self, name: str) -> bool:
        """Check if a role name is in the protected set (case-insensitive)."""
        return name.lower() in self._protected_names

    def is_protected(self, role: Role) -> bool:
        """Check if a role is protected by flag or by name."""
        return role.is_protected or self.is_protected_name(role.name)

    async def can_delete_role(self, role: Role) -> PolicyDecision:
        """Check whether a role may be deleted.

        Protection is checked first, so a protected role is refused even
        when nobody holds it.
        """
        if self.is_protected(role):
            decision = PolicyDecision.protected()
        else:
            count = await self.holders.count_role_holders(role.id)
            decision = PolicyDecision.in_use(count) if count else PolicyDecision.allow()

        if not decision.allowed:
            logger.info(
                "role_deletion_denied",
                role_id=str(role.id),
                reason=str(decision.reason),
                count=decision.count,
            )
        return decision

    async def can_delete_permission(self, permission: Permission) -> PolicyDecision:
        """Check whether a permission may be deleted."""
        count = await self.holders.count_permission_holders(
            permission.id, permission.guard_name
        )
        if not count:
            return PolicyDecision.allow()

        logger.info(
            "permission_deletion_denied",
            permission_id=str(permission.id),
            count=count,
        )
        return PolicyDecision.in_use(count)

    def check_role_edit(
        self,
        role: Role,
        name: str | None = None,
        is_protected: bool | None = None,
    ) -> None:
        """Refuse edits that would strip a protected role of its protection.

        Roles named in the protected set keep their name and their flag,
        and a role renamed into the set cannot be unflagged at the same time.

        Raises:
            ProtectedError: If the edit renames a protected-name role or
                clears its protected flag
        """
        if not self.is_protected_name(role.name):
            renamed_into_set = name is not None and self.is_protected_name(name)
            if renamed_into_set and is_protected is False:
                raise ProtectedError(
                    name, message=f"Cannot remove protection from role: {name}"
                )
            return
        if name is not None and name.lower() != role.name.lower():
            raise ProtectedError(
                role.name, message=f"Cannot rename protected role: {role.name}"
            )
        if is_protected is False:
            raise ProtectedError(
                role.name,
                message=f"Cannot remove protection from role: {role.name}",
            )
