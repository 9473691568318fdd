"""
Transaction helpers shared by the store and the application manager.

One rule: a failed write is rolled back in full and surfaced as a domain
error. Nothing is retried here — retry policy belongs to the caller.
"""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.services.errors import ConflictError, NotFoundError, StorageError

logger = logging.getLogger(__name__)


def parse_project_id(project_id: uuid.UUID | str) -> uuid.UUID:
    """Coerce a path/caller id to a UUID. Malformed ids do not resolve."""
    if isinstance(project_id, uuid.UUID):
        return project_id
    try:
        return uuid.UUID(str(project_id))
    except ValueError as exc:
        raise NotFoundError(
            f"Project '{project_id}' not found.", project_id=str(project_id),
        ) from exc


async def commit_or_raise(session: AsyncSession, action: str) -> None:
    """
    Commit the unit of work.

    StaleDataError (optimistic version check lost) → ConflictError.
    Any other database failure → StorageError, after rollback.
    """
    try:
        await session.commit()
    except StaleDataError as exc:
        await session.rollback()
        logger.info("Concurrent modification while trying to %s", action)
        raise ConflictError(
            "The project was modified concurrently. Reload and retry.",
        ) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("Failed to %s", action)
        raise StorageError(f"Failed to {action}. Please try again.") from exc


async def rollback_as_storage_error(
    session: AsyncSession,
    action: str,
    exc: SQLAlchemyError,
) -> StorageError:
    """
    Roll back after a failed statement and build the error to raise.

    Call from inside the `except` block so the traceback is logged.
    """
    await session.rollback()
    logger.exception("Failed to %s (%s)", action, exc.__class__.__name__)
    return StorageError(f"Failed to {action}. Please try again.")
