"""Database layer - session management, base models, mixins, and units of work."""

from permissions_manager.core.database.base import (
    Base,
    GuardMixin,
    TimestampMixin,
    UUIDMixin,
)
from permissions_manager.core.database.session import (
    close_engine,
    get_db,
    get_engine,
    get_session_factory,
)
from permissions_manager.core.database.unit_of_work import unit_of_work


__all__ = [
    "Base",
    "GuardMixin",
    "TimestampMixin",
    "UUIDMixin",
    "close_engine",
    "get_db",
    "get_engine",
    "get_session_factory",
    "unit_of_work",
]
