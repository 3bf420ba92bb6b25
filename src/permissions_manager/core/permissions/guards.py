"""Guard scope resolution.

Roles and permissions live in guard namespaces. Deployments either hide
guard selection, in which case every operation runs in the default
guard whatever the caller asks for, or expose it, in which case callers
name the guard explicitly and it must be one of the configured guards.
"""

from collections.abc import Sequence
from functools import lru_cache
from typing import Protocol, TypeVar
from uuid import UUID

from permissions_manager.config import Settings, get_settings
from permissions_manager.core.errors import (
    GuardMismatchError,
    NotFoundError,
    ValidationFailedError,
)


class GuardScoped(Protocol):
    id: UUID
    guard_name: str


E = TypeVar("E", bound=GuardScoped)


class GuardScopeResolver:
    """Resolves the guard an operation runs in."""

    def __init__(
        self,
        available_guards: list[str],
        default_guard: str,
        selection_enabled: bool = False,
    ) -> None:
        self._available = list(available_guards)
        self._default = default_guard
        self.selection_enabled = selection_enabled

    @classmethod
    def from_settings(cls, settings: Settings) -> "GuardScopeResolver":
        """Build a resolver from application settings."""
        return cls(
            available_guards=settings.available_guards,
            default_guard=settings.default_guard,
            selection_enabled=settings.guard_show_selection,
        )

    def available_guards(self) -> list[str]:
        """Return the configured guards."""
        return list(self._available)

    def default_guard(self) -> str:
        """Return the configured default guard."""
        return self._default

    def resolve(self, requested: str | None) -> str:
        """Resolve the guard for a create or list operation.

        Args:
            requested: Guard named by the caller, if any

        Returns:
            The guard to operate in

        Raises:
            ValidationFailedError: If selection is enabled and the guard is
                missing or not configured
        """
        if not self.selection_enabled:
            return self._default
        if not requested:
            raise ValidationFailedError(
                field="guard_name",
                rule="required",
                message="The guard name field is required.",
            )
        if requested not in self._available:
            raise ValidationFailedError(
                field="guard_name",
                rule="in",
                message=f"The guard '{requested}' is not available.",
            )
        return requested

    def lookup_scope(self, requested: str | None) -> str | None:
        """Resolve the guard restriction for a lookup by id.

        Ids are globally unique, so with selection enabled an id lookup
        without a guard is unrestricted.

        Returns:
            The guard the entity must belong to, or None for any guard
        """
        if not self.selection_enabled:
            return self._default
        if requested is None:
            return None
        return self.resolve(requested)


@lru_cache
def get_guard_resolver() -> GuardScopeResolver:
    """Get the resolver for the application settings."""
    return GuardScopeResolver.from_settings(get_settings())


def check_assignable(
    entities: Sequence[E],
    requested_ids: Sequence[UUID],
    guard_name: str,
    resource: str,
) -> list[E]:
    """Verify that entities loaded for an assignment can be linked.

    Args:
        entities: Entities found for the requested ids
        requested_ids: Ids the caller asked to assign
        guard_name: Guard of the entity receiving the assignment
        resource: Resource name used in error details

    Returns:
        The entities, in the order requested

    Raises:
        NotFoundError: If any requested id does not exist
        GuardMismatchError: If any entity belongs to another guard
    """
    by_id = {entity.id: entity for entity in entities}
    ordered: list[E] = []
    for requested_id in dict.fromkeys(requested_ids):
        entity = by_id.get(requested_id)
        if entity is None:
            raise NotFoundError(
                f"{resource.title()} not found",
                resource=resource,
                resource_id=str(requested_id),
            )
        if entity.guard_name != guard_name:
            raise GuardMismatchError(expected=guard_name, actual=entity.guard_name)
        ordered.append(entity)
    return ordered
