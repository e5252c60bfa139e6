"""Transaction boundary for service operations

``run_in_transaction`` executes one operation and commits it. Failures are
sorted into three buckets so callers can tell them apart:

* domain errors roll back and propagate unchanged
* storage failures before commit roll back, are retried a bounded number of
  times, and finally surface as ``StorageUnavailable`` (nothing applied)
* a failure while committing surfaces as ``CommitOutcomeUnknown``
"""

from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
import structlog

from tableside.config import settings
from tableside.errors import (
    TablesideError,
    ConcurrentModification,
    StorageUnavailable,
    CommitOutcomeUnknown,
)

logger = structlog.get_logger()

T = TypeVar("T")


async def run_in_transaction(
    db: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    name: str = "operation",
    max_attempts: Optional[int] = None,
) -> T:
    """Run ``operation`` and commit, as one atomic unit of work"""
    if max_attempts is None:
        # The first try plus the configured number of retries
        attempts = 1 + max(0, settings.transaction_max_retries)
    else:
        attempts = max(1, max_attempts)
    
    for attempt in range(1, attempts + 1):
        try:
            result = await operation()
            # Surface constraint and version conflicts before the commit point
            await db.flush()
        except TablesideError:
            await db.rollback()
            raise
        except StaleDataError as exc:
            await db.rollback()
            logger.info("Stale write rejected", operation=name, error=str(exc))
            raise ConcurrentModification()
        except IntegrityError as exc:
            await db.rollback()
            logger.info("Conflicting write rejected", operation=name, error=str(exc.orig))
            raise ConcurrentModification()
        except OperationalError as exc:
            await db.rollback()
            if attempt < attempts:
                logger.warning(
                    "Transient storage failure, retrying",
                    operation=name,
                    attempt=attempt,
                    error=str(exc.orig),
                )
                continue
            logger.error("Storage unavailable", operation=name, attempts=attempts, error=str(exc.orig))
            raise StorageUnavailable()
        
        try:
            await db.commit()
        except (StaleDataError, DBAPIError) as exc:
            await db.rollback()
            logger.error("Commit failed, outcome unknown", operation=name, error=str(exc))
            raise CommitOutcomeUnknown()
        
        return result
