"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from permissions_manager.config import Settings, get_settings
from permissions_manager.core.cache import PermissionRegistrar, get_registrar
from permissions_manager.core.database import get_db
from permissions_manager.core.permissions import (
    CategoryRegistry,
    DeletionPolicy,
    GuardScopeResolver,
    HolderCounter,
    PermissionChecker,
    get_category_registry,
    get_guard_resolver,
)


# Type alias for database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]

AppSettings = Annotated[Settings, Depends(get_settings)]
Registrar = Annotated[PermissionRegistrar, Depends(get_registrar)]
Guards = Annotated[GuardScopeResolver, Depends(get_guard_resolver)]
Categories = Annotated[CategoryRegistry, Depends(get_category_registry)]


def get_holder_counter(db: DBSession) -> HolderCounter:
    """Provide a holder counter bound to the request session."""
    return HolderCounter(db)


Holders = Annotated[HolderCounter, Depends(get_holder_counter)]


def get_deletion_policy(holders: Holders, settings: AppSettings) -> DeletionPolicy:
    """Provide the deletion policy with the configured protected roles."""
    return DeletionPolicy(holders, settings.protected_roles)


Policy = Annotated[DeletionPolicy, Depends(get_deletion_policy)]


def get_permission_checker(db: DBSession, registrar: Registrar) -> PermissionChecker:
    """Provide a permission checker bound to the request session."""
    return PermissionChecker(db, registrar)


Checker = Annotated[PermissionChecker, Depends(get_permission_checker)]
