"""Usage session API endpoints

Consumed by the order and payment subsystems to attach order references and
running totals to the open session, and by callers resolving a retried
request by re-reading a session.
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.database import get_db
from tableside.models.user import StaffUser, StaffRole
from tableside.schemas.usage import UsageSessionResponse, UsageSessionUpdate
from tableside.services import UsageHistoryLedger, run_in_transaction
from tableside.api.auth import get_current_active_user, require_role

router = APIRouter()


@router.get("/{usage_id}", response_model=UsageSessionResponse)
async def get_usage_session(
    usage_id: UUID,
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get one usage session, open or closed"""
    return await UsageHistoryLedger(db).get_session(usage_id)


@router.patch("/{usage_id}", response_model=UsageSessionResponse)
async def update_usage_session(
    usage_id: UUID,
    session_data: UsageSessionUpdate,
    current_user: StaffUser = Depends(require_role(StaffRole.WAITER)),
    db: AsyncSession = Depends(get_db),
):
    """Update order reference and totals on an open session"""
    ledger = UsageHistoryLedger(db)
    return await run_in_transaction(
        db,
        lambda: ledger.update_session(usage_id, session_data.model_dump(exclude_unset=True)),
        name="update_usage_session",
    )
