"""Status transition engine

Validates a requested status change against the table's current status and
applies it together with the matching ledger effect:

* entering ``occupied`` opens a usage session
* leaving ``occupied`` closes the open session

Releasing an occupied table always goes through ``cleaning``; there is no
direct ``occupied -> available`` edge. Requesting the current status is
rejected like any other pair outside the table below.

Per-table serialization relies on the table's version column: the status
write is flushed before any ledger row, so of two racing requests the loser
fails with ``ConcurrentModification`` (or, if it read after the winner
committed, ``InvalidTransition``) and writes nothing.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Optional, Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
import structlog

from tableside.errors import ConcurrentModification, InvalidTransition, SessionAlreadyOpen
from tableside.models.table import Table, TableStatus
from tableside.models.usage import UsageSession
from tableside.models.user import StaffUser
from tableside.services.audit import record_audit
from tableside.services.ledger import UsageHistoryLedger
from tableside.services.tables import TableStore

logger = structlog.get_logger()


ALLOWED_TRANSITIONS: Dict[TableStatus, FrozenSet[TableStatus]] = {
    TableStatus.AVAILABLE: frozenset({
        TableStatus.OCCUPIED,
        TableStatus.RESERVED,
        TableStatus.OUT_OF_ORDER,
    }),
    TableStatus.OCCUPIED: frozenset({
        TableStatus.CLEANING,
        TableStatus.OUT_OF_ORDER,
    }),
    TableStatus.RESERVED: frozenset({
        TableStatus.OCCUPIED,
        TableStatus.AVAILABLE,
        TableStatus.OUT_OF_ORDER,
    }),
    TableStatus.CLEANING: frozenset({
        TableStatus.AVAILABLE,
        TableStatus.OUT_OF_ORDER,
    }),
    TableStatus.OUT_OF_ORDER: frozenset({
        TableStatus.AVAILABLE,
    }),
}

_missing_transitions = set(TableStatus) - set(ALLOWED_TRANSITIONS)
if _missing_transitions:
    raise RuntimeError(f"No transitions defined for: {sorted(s.value for s in _missing_transitions)}")


def is_transition_allowed(current: TableStatus, target: TableStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def parse_status(value: Union[str, TableStatus]) -> TableStatus:
    try:
        return TableStatus(value)
    except ValueError:
        raise InvalidTransition(f"Unknown status '{value}'", to_status=str(value))


@dataclass
class TransitionResult:
    """Outcome of an applied transition"""
    table: Table
    from_status: TableStatus
    to_status: TableStatus
    opened_session: Optional[UsageSession] = None
    closed_session: Optional[UsageSession] = None


class StatusTransitionEngine:
    """Applies status changes and their ledger side effects"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = TableStore(db)
        self.ledger = UsageHistoryLedger(db)

    async def request_transition(
        self,
        table_id: UUID,
        target_status: Union[str, TableStatus],
        notes: Optional[str] = None,
        guest_count: Optional[int] = None,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        actor: Optional[StaffUser] = None,
        at: Optional[datetime] = None,
    ) -> TransitionResult:
        target = parse_status(target_status)
        table = await self.store.get_table(table_id, include_inactive=False, for_update=True)
        current = table.status

        if not is_transition_allowed(current, target):
            raise InvalidTransition(
                f"Cannot change status from {current.value} to {target.value}",
                from_status=current.value,
                to_status=target.value,
                allowed=sorted(s.value for s in ALLOWED_TRANSITIONS[current]),
            )

        table.status = target
        try:
            await self.db.flush()
        except StaleDataError:
            logger.info(
                "Transition lost a concurrent race",
                table_id=str(table_id),
                from_status=current.value,
                to_status=target.value,
            )
            raise ConcurrentModification(table_id=str(table_id))

        result = TransitionResult(table=table, from_status=current, to_status=target)

        if current == TableStatus.OCCUPIED:
            result.closed_session = await self.ledger.close_session(table.id, at=at)

        if target == TableStatus.OCCUPIED:
            try:
                result.opened_session = await self.ledger.open_session(
                    table.id,
                    guest_count or 1,
                    customer_name,
                    customer_phone,
                    usage_type="reservation" if current == TableStatus.RESERVED else "walk_in",
                    notes=notes,
                    waiter_assigned=actor.display_name if actor else None,
                    at=at,
                )
            except SessionAlreadyOpen:
                # A session without a matching occupied status means another
                # writer got in between; report it as a conflict
                raise ConcurrentModification(table_id=str(table_id))

        record_audit(
            self.db,
            actor,
            "change_status",
            "table",
            table.id,
            before={"status": current.value},
            after={"status": target.value, "notes": notes},
        )
        logger.info(
            "Table status changed",
            table_id=str(table.id),
            number=table.number,
            from_status=current.value,
            to_status=target.value,
            actor=actor.display_name if actor else None,
        )
        return result
