"""Transactional unit of work for mutating operations.

A unit of work wraps one mutation request: the caller applies its
changes inside the block, then the block flushes them, signals the
permission registrar, and commits. Any failure rolls everything back
and the registrar is never signalled for work that did not commit.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from permissions_manager.core.errors import (
    AppException,
    DuplicateNameError,
    TransactionFailedError,
)


if TYPE_CHECKING:
    from permissions_manager.core.cache import PermissionRegistrar


logger = structlog.get_logger()

# Fragments that identify a unique-constraint violation across drivers
_UNIQUE_VIOLATION_MARKERS = (
    "unique constraint",
    "duplicate entry",
    "duplicate key",
    "uniqueviolation",
)


def is_unique_violation(exc: IntegrityError) -> bool:
    """Check whether an IntegrityError was raised by a unique constraint."""
    message = str(exc.orig if exc.orig is not None else exc).lower()
    return any(marker in message for marker in _UNIQUE_VIOLATION_MARKERS)


@asynccontextmanager
async def unit_of_work(
    session: AsyncSession,
    registrar: "PermissionRegistrar",
    entity: str,
) -> AsyncGenerator[AsyncSession, None]:
    """Run a block of changes as a single atomic mutation.

    Usage:
        async with unit_of_work(session, registrar, entity="role"):
            role.name = "Editor"

    Args:
        session: The session holding the pending changes
        registrar: Permission registrar to invalidate before commit
        entity: Entity name used in error messages ("role", "permission")

    Yields:
        The session

    Raises:
        DuplicateNameError: If a unique constraint rejected the changes
        TransactionFailedError: If the store or the registrar failed
    """
    try:
        yield session
        await session.flush()
        await registrar.invalidate()
        await session.commit()
    except AppException:
        await session.rollback()
        raise
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            logger.info("unique_constraint_rejected", entity=entity)
            raise DuplicateNameError(entity=entity) from exc
        logger.error("transaction_failed", entity=entity, error=str(exc.orig))
        raise TransactionFailedError(entity=entity) from exc
    except Exception as exc:
        await session.rollback()
        logger.exception(
            "transaction_failed",
            entity=entity,
            error_type=type(exc).__name__,
        )
        raise TransactionFailedError(entity=entity) from exc
