"""Permission system: models, guard scoping, categories, policy, and checks."""

from permissions_manager.core.permissions.categories import (
    CategoryRegistry,
    get_category_registry,
)
from permissions_manager.core.permissions.checker import PermissionChecker
from permissions_manager.core.permissions.guards import (
    GuardScopeResolver,
    get_guard_resolver,
)
from permissions_manager.core.permissions.holders import HolderCounter
from permissions_manager.core.permissions.models import (
    Permission,
    Role,
    principal_permissions,
    principal_roles,
    role_permissions,
)
from permissions_manager.core.permissions.policy import (
    DeletionPolicy,
    DenialReason,
    PolicyDecision,
)


__all__ = [
    # Models
    "Permission",
    "Role",
    "principal_permissions",
    "principal_roles",
    "role_permissions",
    # Scoping
    "CategoryRegistry",
    "GuardScopeResolver",
    "get_category_registry",
    "get_guard_resolver",
    # Policy
    "DeletionPolicy",
    "DenialReason",
    "HolderCounter",
    "PolicyDecision",
    # Checker
    "PermissionChecker",
]
