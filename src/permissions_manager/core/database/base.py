"""SQLAlchemy declarative base and common mixins."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from permissions_manager.core.constants import MAX_GUARD_NAME_LENGTH


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class UUIDMixin:
    """Mixin that adds a UUID primary key."""

    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        index=True,
    )


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps.

    Values are set client-side so they are available on the instance
    right after a flush, without an extra round trip.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
    )


class GuardMixin:
    """Mixin that adds the guard namespace column.

    Guard-scoped models are partitioned by guard_name: two guards can
    hold entities with the same name independently.
    """

    guard_name: Mapped[str] = mapped_column(
        String(MAX_GUARD_NAME_LENGTH),
        nullable=False,
        index=True,
    )
