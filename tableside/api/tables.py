"""Table management API endpoints"""

from typing import Optional
from uuid import UUID
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.config import settings
from tableside.database import get_db
from tableside.models.table import TableStatus
from tableside.models.user import StaffUser, StaffRole
from tableside.schemas.table import (
    TableCreate,
    TableUpdate,
    TableResponse,
    TableListResponse,
    StatusChangeRequest,
    StatusCount,
    TableStatsResponse,
    TableDashboardResponse,
)
from tableside.schemas.usage import (
    UsageSessionResponse,
    UsageSessionListResponse,
    MilestoneRequest,
)
from tableside.services import (
    TableStore,
    UsageHistoryLedger,
    StatusTransitionEngine,
    run_in_transaction,
)
from tableside.api.auth import get_current_active_user, require_role

router = APIRouter()


def build_stats_response(stats: dict) -> TableStatsResponse:
    counts = stats["counts"]
    return TableStatsResponse(
        total=stats["total"],
        available=counts[TableStatus.AVAILABLE],
        occupied=counts[TableStatus.OCCUPIED],
        reserved=counts[TableStatus.RESERVED],
        cleaning=counts[TableStatus.CLEANING],
        out_of_order=counts[TableStatus.OUT_OF_ORDER],
        statuses=[
            StatusCount(status=status, label=status.label, color=status.color, count=count)
            for status, count in counts.items()
        ],
        by_area=stats["by_area"],
        by_capacity=stats["by_capacity"],
        utilization_rate=stats["utilization_rate"],
    )


@router.get("", response_model=TableListResponse)
async def list_tables(
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status: Optional[TableStatus] = None,
    area: Optional[str] = None,
    capacity_min: Optional[int] = Query(None, ge=1),
    capacity_max: Optional[int] = Query(None, ge=1),
    search: Optional[str] = None,
    include_inactive: bool = False,
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List tables with filters and pagination"""
    tables, total = await TableStore(db).list_tables(
        status=status,
        area=area,
        capacity_min=capacity_min,
        capacity_max=capacity_max,
        search=search,
        include_inactive=include_inactive,
        page=page,
        page_size=page_size,
    )

    return TableListResponse(
        items=tables,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/stats", response_model=TableStatsResponse)
async def get_table_stats(
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Aggregate counts by status, area and capacity"""
    stats = await TableStore(db).stats()
    return build_stats_response(stats)


@router.get("/dashboard", response_model=TableDashboardResponse)
async def get_tables_dashboard(
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Floor overview: active tables, statistics and recent sessions"""
    store = TableStore(db)
    tables = await store.active_tables()
    stats = await store.stats()
    recent = await UsageHistoryLedger(db).recent_activity(limit=10)

    return TableDashboardResponse(
        tables=tables,
        statistics=build_stats_response(stats),
        recent_activity=recent,
    )


@router.post("", response_model=TableResponse, status_code=201)
async def create_table(
    table_data: TableCreate,
    current_user: StaffUser = Depends(require_role(StaffRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Create a new table"""
    store = TableStore(db)
    return await run_in_transaction(
        db,
        lambda: store.create_table(
            capacity=table_data.capacity,
            area=table_data.area,
            number=table_data.number,
            location_description=table_data.location_description,
            notes=table_data.notes,
            actor=current_user,
        ),
        name="create_table",
    )


@router.get("/{table_id}", response_model=TableResponse)
async def get_table(
    table_id: UUID,
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Get table details"""
    return await TableStore(db).get_table(table_id)


@router.put("/{table_id}", response_model=TableResponse)
async def update_table(
    table_id: UUID,
    table_data: TableUpdate,
    current_user: StaffUser = Depends(require_role(StaffRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Update table fields (status changes go through PATCH /status)"""
    store = TableStore(db)
    return await run_in_transaction(
        db,
        lambda: store.update_table(
            table_id,
            table_data.model_dump(exclude_unset=True),
            actor=current_user,
        ),
        name="update_table",
    )


@router.delete("/{table_id}")
async def delete_table(
    table_id: UUID,
    current_user: StaffUser = Depends(require_role(StaffRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Delete a table together with its QR binding and history"""
    store = TableStore(db)
    await run_in_transaction(
        db,
        lambda: store.delete_table(table_id, actor=current_user),
        name="delete_table",
    )
    return {"message": "Table deleted successfully", "table_id": str(table_id)}


@router.patch("/{table_id}/status", response_model=TableResponse)
async def change_table_status(
    table_id: UUID,
    request: StatusChangeRequest,
    current_user: StaffUser = Depends(require_role(StaffRole.WAITER)),
    db: AsyncSession = Depends(get_db),
):
    """Request a status transition"""
    engine = StatusTransitionEngine(db)
    result = await run_in_transaction(
        db,
        lambda: engine.request_transition(
            table_id,
            request.status,
            notes=request.notes,
            guest_count=request.guest_count,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            actor=current_user,
        ),
        name="change_status",
    )
    return result.table


@router.get("/{table_id}/history", response_model=UsageSessionListResponse)
async def get_table_history(
    table_id: UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Usage sessions for a table, newest first"""
    await TableStore(db).get_table(table_id)

    sessions, total = await UsageHistoryLedger(db).list_history(
        table_id,
        start_date=start_date,
        end_date=end_date,
        page=page,
        page_size=page_size,
    )

    return UsageSessionListResponse(
        items=sessions,
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{table_id}/session", response_model=UsageSessionResponse)
async def get_open_session(
    table_id: UUID,
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """The table's currently open session"""
    await TableStore(db).get_table(table_id)
    return await UsageHistoryLedger(db).require_open_session(table_id)


@router.post("/{table_id}/session/milestones", response_model=UsageSessionResponse)
async def record_milestone(
    table_id: UUID,
    request: MilestoneRequest,
    current_user: StaffUser = Depends(require_role(StaffRole.WAITER)),
    db: AsyncSession = Depends(get_db),
):
    """Record order placed / food served / payment completed"""
    ledger = UsageHistoryLedger(db)

    async def _record():
        await TableStore(db).get_table(table_id, include_inactive=False)
        return await ledger.record_milestone(table_id, request.kind, request.timestamp)

    return await run_in_transaction(db, _record, name="record_milestone")
