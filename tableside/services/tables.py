"""Table store: table entities and their structural invariants"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.errors import (
    DuplicateTableNumber,
    InvalidCapacity,
    InvalidTableNumber,
    TableInUse,
    TableNotFound,
)
from tableside.models.table import Table, TableStatus
from tableside.models.user import StaffUser
from tableside.services.areas import AreaRegistry
from tableside.services.audit import record_audit, table_snapshot
from tableside.services.ledger import UsageHistoryLedger
from tableside.services.qr import QRCodeBinding

logger = structlog.get_logger()

MAX_AUTO_NUMBER = 999

EDITABLE_FIELDS = (
    "number",
    "capacity",
    "area",
    "location_description",
    "notes",
    "is_active",
)


def auto_number(index: int) -> str:
    return f"T{index:03d}"


def validate_capacity(capacity: Any) -> int:
    if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
        raise InvalidCapacity(capacity=capacity)
    return capacity


class TableStore:
    """Owns table rows; creation, edits and removal"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.areas = AreaRegistry(db)
        self.ledger = UsageHistoryLedger(db)
        self.qr = QRCodeBinding(db)

    async def get_table(
        self,
        table_id: UUID,
        *,
        include_inactive: bool = True,
        for_update: bool = False,
    ) -> Table:
        query = select(Table).where(Table.id == table_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        table = result.scalar_one_or_none()

        if not table or (not include_inactive and not table.is_active):
            raise TableNotFound(table_id=str(table_id))
        return table

    async def find_by_number(self, number: str) -> Optional[Table]:
        result = await self.db.execute(select(Table).where(Table.number == number))
        return result.scalar_one_or_none()

    async def next_table_number(self) -> str:
        """First free label in T001..T999"""
        result = await self.db.execute(select(Table.number))
        existing = set(result.scalars().all())
        for index in range(1, MAX_AUTO_NUMBER + 1):
            candidate = auto_number(index)
            if candidate not in existing:
                return candidate
        raise DuplicateTableNumber("No available table numbers left in T001-T999")

    async def active_tables(self) -> List[Table]:
        result = await self.db.execute(
            select(Table).where(Table.is_active == True).order_by(Table.number)
        )
        return list(result.scalars().all())

    async def list_tables(
        self,
        status: Optional[TableStatus] = None,
        area: Optional[str] = None,
        capacity_min: Optional[int] = None,
        capacity_max: Optional[int] = None,
        search: Optional[str] = None,
        include_inactive: bool = False,
        page: int = 1,
        page_size: int = 20,
    ) -> Tuple[List[Table], int]:
        filters = []
        if not include_inactive:
            filters.append(Table.is_active == True)
        if status:
            filters.append(Table.status == status)
        if area:
            filters.append(Table.area == area)
        if capacity_min is not None:
            filters.append(Table.capacity >= capacity_min)
        if capacity_max is not None:
            filters.append(Table.capacity <= capacity_max)
        if search:
            search_term = f"%{search.lower()}%"
            filters.append(
                or_(
                    func.lower(Table.number).like(search_term),
                    func.lower(Table.location_description).like(search_term),
                )
            )

        count_result = await self.db.execute(select(func.count(Table.id)).where(*filters))
        total = count_result.scalar()

        offset = (page - 1) * page_size
        result = await self.db.execute(
            select(Table).where(*filters).order_by(Table.number).offset(offset).limit(page_size)
        )
        return list(result.scalars().all()), total

    async def create_table(
        self,
        capacity: int,
        area: str,
        number: Optional[str] = None,
        location_description: Optional[str] = None,
        notes: Optional[str] = None,
        actor: Optional[StaffUser] = None,
    ) -> Table:
        capacity = validate_capacity(capacity)
        await self.areas.require_area(area)

        if number is None or not number.strip():
            number = await self.next_table_number()
        else:
            number = number.strip()
            if await self.find_by_number(number):
                raise DuplicateTableNumber(f"Table number '{number}' already exists", number=number)

        table = Table(
            number=number,
            capacity=capacity,
            area=area,
            location_description=location_description,
            notes=notes,
            status=TableStatus.AVAILABLE,
            is_active=True,
        )
        self.db.add(table)
        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateTableNumber(f"Table number '{number}' already exists", number=number)

        await self.qr.get_or_create_token(table.id)
        record_audit(self.db, actor, "create_table", "table", table.id, after=table_snapshot(table))
        logger.info("Table created", table_id=str(table.id), number=number, area=area)
        return table

    async def update_table(
        self,
        table_id: UUID,
        fields: Dict[str, Any],
        actor: Optional[StaffUser] = None,
    ) -> Table:
        """Partial update of administrative fields; status is not editable here"""
        table = await self.get_table(table_id, for_update=True)
        before = table_snapshot(table)
        updates = {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
        # Non-nullable columns: an explicit null means "leave unchanged"
        for field in ("number", "capacity", "area", "is_active"):
            if field in updates and updates[field] is None:
                del updates[field]

        if "capacity" in updates:
            updates["capacity"] = validate_capacity(updates["capacity"])

        if "number" in updates:
            number = updates["number"].strip()
            if not number:
                raise InvalidTableNumber(table_id=str(table.id))
            if number != table.number and await self.find_by_number(number):
                raise DuplicateTableNumber(f"Table number '{number}' already exists", number=number)
            updates["number"] = number

        reactivating = updates.get("is_active") is True and not table.is_active
        if "area" in updates or reactivating:
            await self.areas.require_area(updates.get("area", table.area))

        if updates.get("is_active") is False and table.is_active:
            if await self.ledger.has_open_session(table.id):
                raise TableInUse("Release the table before deactivating it", table_id=str(table.id))

        for field, value in updates.items():
            setattr(table, field, value)

        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateTableNumber(number=updates.get("number"))

        record_audit(self.db, actor, "update_table", "table", table.id, before=before, after=table_snapshot(table))
        logger.info("Table updated", table_id=str(table.id), fields=sorted(updates))
        return table

    async def delete_table(self, table_id: UUID, actor: Optional[StaffUser] = None) -> None:
        """Hard delete; removes the QR binding and the table's history"""
        table = await self.get_table(table_id, for_update=True)

        if await self.ledger.has_open_session(table.id):
            raise TableInUse("Release the table before deleting it", table_id=str(table.id))

        before = table_snapshot(table)
        await self.qr.revoke_token(table.id)
        await self.ledger.delete_history(table.id)
        await self.db.delete(table)
        await self.db.flush()

        record_audit(self.db, actor, "delete_table", "table", table_id, before=before)
        logger.info("Table deleted", table_id=str(table_id), number=before["number"])

    async def stats(self) -> Dict[str, Any]:
        """Aggregate counts over active tables"""
        status_result = await self.db.execute(
            select(Table.status, func.count(Table.id))
            .where(Table.is_active == True)
            .group_by(Table.status)
        )
        by_status = {status: count for status, count in status_result.all()}
        counts = {status: by_status.get(status, 0) for status in TableStatus}
        total = sum(counts.values())

        area_result = await self.db.execute(
            select(Table.area, func.count(Table.id))
            .where(Table.is_active == True)
            .group_by(Table.area)
            .order_by(Table.area)
        )
        labels = {area.value: area.label for area in await self.areas.list_areas()}
        by_area = [
            {"area": area, "label": labels.get(area, area), "count": count}
            for area, count in area_result.all()
        ]

        capacity_result = await self.db.execute(
            select(Table.capacity, func.count(Table.id))
            .where(Table.is_active == True)
            .group_by(Table.capacity)
            .order_by(Table.capacity)
        )
        by_capacity = [
            {"capacity": capacity, "count": count}
            for capacity, count in capacity_result.all()
        ]

        busy = counts[TableStatus.OCCUPIED] + counts[TableStatus.RESERVED]
        utilization_rate = round(busy / total * 100, 1) if total else 0.0

        return {
            "total": total,
            "counts": counts,
            "by_area": by_area,
            "by_capacity": by_capacity,
            "utilization_rate": utilization_rate,
        }
