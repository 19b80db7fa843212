import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..errors import ConflictError

logger = logging.getLogger("backoffice.transaction")

T = TypeVar("T")


async def run_in_transaction(
    session: AsyncSession,
    work: Callable[[], Awaitable[T]],
    *,
    action: str,
    retries: int | None = None,
) -> T:
    """Run ``work`` and commit once; roll back on any error.

    A storage unique/FK violation is retried up to ``retries`` times (defaults
    to ``settings.db_conflict_retries``) before surfacing as ``ConflictError``.
    ``work`` must load everything it touches itself, since a rollback expires
    previously loaded instances.
    """
    max_retries = settings.db_conflict_retries if retries is None else retries
    attempt = 0
    while True:
        try:
            result = await work()
            await session.commit()
            return result
        except IntegrityError as exc:
            await session.rollback()
            if attempt < max_retries:
                attempt += 1
                logger.warning("integrity_conflict_retry action=%s attempt=%s", action, attempt)
                continue
            logger.warning("integrity_conflict action=%s attempts=%s", action, attempt + 1)
            raise ConflictError(
                "The record conflicts with existing data",
                details={"retryable": True},
            ) from exc
        except Exception:
            await session.rollback()
            raise
