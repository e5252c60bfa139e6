"""Usage history ledger

Append-only record of occupancy sessions. A session is opened when a table
becomes occupied and closed when it leaves occupancy; once closed it is
frozen. Open and close are deliberately not idempotent: a repeated call
fails (``SessionAlreadyOpen`` / ``NoOpenSession``) so a caller retrying after
a timeout can tell that the first attempt already applied.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.errors import (
    InvalidMilestoneOrder,
    NoOpenSession,
    SessionAlreadyOpen,
    SessionClosed,
    UsageSessionNotFound,
)
from tableside.models.usage import UsageSession, MilestoneKind, MILESTONE_FIELDS

logger = structlog.get_logger()

# Fields the order and payment subsystems may change on an open session
UPDATABLE_FIELDS = (
    "order_id",
    "total_order_amount",
    "total_payment_amount",
    "customer_name",
    "customer_phone",
    "notes",
)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to the naive UTC datetimes stored in the database"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def elapsed_minutes(start: datetime, end: datetime) -> int:
    """Whole minutes between start and end, never negative"""
    seconds = (end - start).total_seconds()
    return max(0, int(seconds // 60))


class UsageHistoryLedger:
    """Occupancy sessions per table"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_open_session(self, table_id: UUID) -> Optional[UsageSession]:
        result = await self.db.execute(
            select(UsageSession).where(
                UsageSession.table_id == table_id,
                UsageSession.end_time.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def require_open_session(self, table_id: UUID) -> UsageSession:
        session = await self.get_open_session(table_id)
        if not session:
            raise NoOpenSession(table_id=str(table_id))
        return session

    async def has_open_session(self, table_id: UUID) -> bool:
        return await self.get_open_session(table_id) is not None

    async def get_session(self, usage_id: UUID) -> UsageSession:
        result = await self.db.execute(
            select(UsageSession).where(UsageSession.usage_id == usage_id)
        )
        session = result.scalar_one_or_none()
        if not session:
            raise UsageSessionNotFound(usage_id=str(usage_id))
        return session

    async def open_session(
        self,
        table_id: UUID,
        guest_count: int,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        *,
        usage_type: str = "walk_in",
        notes: Optional[str] = None,
        waiter_assigned: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> UsageSession:
        if await self.has_open_session(table_id):
            raise SessionAlreadyOpen(table_id=str(table_id))

        session = UsageSession(
            table_id=table_id,
            guest_count=guest_count,
            customer_name=customer_name,
            customer_phone=customer_phone,
            start_time=to_naive_utc(at) or datetime.utcnow(),
            usage_type=usage_type,
            notes=notes,
            waiter_assigned=waiter_assigned,
            total_order_amount=Decimal("0"),
            total_payment_amount=Decimal("0"),
        )
        self.db.add(session)
        try:
            await self.db.flush()
        except IntegrityError:
            # Another writer opened a session between the check and the insert
            raise SessionAlreadyOpen(table_id=str(table_id))

        logger.info(
            "Usage session opened",
            table_id=str(table_id),
            usage_id=str(session.usage_id),
            guest_count=guest_count,
        )
        return session

    async def close_session(self, table_id: UUID, at: Optional[datetime] = None) -> UsageSession:
        session = await self.require_open_session(table_id)

        end_time = to_naive_utc(at) or datetime.utcnow()
        session.end_time = end_time
        session.duration_minutes = elapsed_minutes(session.start_time, end_time)
        await self.db.flush()

        logger.info(
            "Usage session closed",
            table_id=str(table_id),
            usage_id=str(session.usage_id),
            duration_minutes=session.duration_minutes,
        )
        return session

    async def record_milestone(
        self,
        table_id: UUID,
        kind: MilestoneKind,
        timestamp: Optional[datetime] = None,
    ) -> UsageSession:
        session = await self.require_open_session(table_id)
        kind = MilestoneKind(kind)
        field = MILESTONE_FIELDS[kind]
        timestamp = to_naive_utc(timestamp) or datetime.utcnow()

        if timestamp < session.start_time:
            raise InvalidMilestoneOrder(
                f"{kind.value} cannot precede the session start",
                milestone=kind.value,
            )
        previous = getattr(session, field)
        if previous is not None and timestamp < previous:
            raise InvalidMilestoneOrder(
                f"{kind.value} is earlier than the recorded {previous.isoformat()}",
                milestone=kind.value,
            )

        setattr(session, field, timestamp)
        await self.db.flush()
        logger.info(
            "Milestone recorded",
            table_id=str(table_id),
            usage_id=str(session.usage_id),
            milestone=kind.value,
        )
        return session

    async def update_session(self, usage_id: UUID, fields: Dict[str, Any]) -> UsageSession:
        """Apply order/payment updates to an open session"""
        session = await self.get_session(usage_id)
        if not session.is_open:
            raise SessionClosed(usage_id=str(usage_id))

        for field, value in fields.items():
            if field not in UPDATABLE_FIELDS:
                continue
            if value is None and field.startswith("total_"):
                continue
            setattr(session, field, value)
        await self.db.flush()
        return session

    async def list_history(
        self,
        table_id: UUID,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[UsageSession], int]:
        """Sessions for a table, newest first"""
        query = select(UsageSession).where(UsageSession.table_id == table_id)
        count_query = select(func.count(UsageSession.usage_id)).where(UsageSession.table_id == table_id)

        if start_date:
            query = query.where(UsageSession.start_time >= to_naive_utc(start_date))
            count_query = count_query.where(UsageSession.start_time >= to_naive_utc(start_date))

        if end_date:
            query = query.where(UsageSession.start_time <= to_naive_utc(end_date))
            count_query = count_query.where(UsageSession.start_time <= to_naive_utc(end_date))

        total_result = await self.db.execute(count_query)
        total = total_result.scalar()

        offset = (page - 1) * page_size
        query = query.order_by(UsageSession.start_time.desc()).offset(offset).limit(page_size)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def recent_activity(self, limit: int = 10) -> List[UsageSession]:
        result = await self.db.execute(
            select(UsageSession).order_by(UsageSession.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def delete_history(self, table_id: UUID) -> None:
        """Drop all closed history of a deleted table"""
        await self.db.execute(
            delete(UsageSession).where(UsageSession.table_id == table_id)
        )
