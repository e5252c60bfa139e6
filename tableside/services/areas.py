"""Area registry: the server-side set of seating areas"""

from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tableside.errors import AreaInUse, AreaNotFound, DuplicateArea, UnknownArea
from tableside.models.area import AreaOption
from tableside.models.table import Table
from tableside.models.user import StaffUser
from tableside.services.audit import record_audit

logger = structlog.get_logger()


class AreaRegistry:
    """Maintains valid area labels and their referential constraint"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_areas(self) -> List[AreaOption]:
        """All areas in insertion order"""
        result = await self.db.execute(select(AreaOption).order_by(AreaOption.id))
        return list(result.scalars().all())

    async def find_area(self, value: str, *, lock: Optional[str] = None) -> Optional[AreaOption]:
        query = select(AreaOption).where(AreaOption.value == value)
        if lock == "update":
            query = query.with_for_update()
        elif lock == "share":
            query = query.with_for_update(read=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_area(self, value: str) -> AreaOption:
        area = await self.find_area(value)
        if not area:
            raise AreaNotFound(f"Area '{value}' not found", area=value)
        return area

    async def require_area(self, value: str) -> AreaOption:
        """Check that a table may reference ``value``.

        Takes a share lock on the area row so a concurrent removal cannot
        commit between this check and the table write.
        """
        area = await self.find_area(value, lock="share")
        if not area:
            raise UnknownArea(f"Area '{value}' is not registered", area=value)
        return area

    async def add_area(self, value: str, label: str, actor: Optional[StaffUser] = None) -> AreaOption:
        value = value.strip()
        if await self.find_area(value):
            raise DuplicateArea(f"Area '{value}' already exists", area=value)

        area = AreaOption(value=value, label=label.strip() or value)
        self.db.add(area)
        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateArea(f"Area '{value}' already exists", area=value)

        record_audit(self.db, actor, "add_area", "area", value, after={"label": area.label})
        logger.info("Area added", area=value, label=area.label)
        return area

    async def relabel_area(self, value: str, label: str, actor: Optional[StaffUser] = None) -> AreaOption:
        area = await self.get_area(value)
        before = {"label": area.label}
        area.label = label.strip() or area.value
        record_audit(self.db, actor, "relabel_area", "area", value, before=before, after={"label": area.label})
        return area

    async def count_active_tables(self, value: str) -> int:
        result = await self.db.execute(
            select(func.count(Table.id)).where(
                Table.area == value,
                Table.is_active == True,
            )
        )
        return result.scalar()

    async def remove_area(self, value: str, actor: Optional[StaffUser] = None) -> None:
        area = await self.find_area(value, lock="update")
        if not area:
            raise AreaNotFound(f"Area '{value}' not found", area=value)

        in_use = await self.count_active_tables(value)
        if in_use:
            raise AreaInUse(
                f"Area '{value}' is used by {in_use} active table(s)",
                area=value,
                active_tables=in_use,
            )

        await self.db.delete(area)
        record_audit(self.db, actor, "remove_area", "area", value, before={"label": area.label})
        logger.info("Area removed", area=value)

    async def ensure_areas(self, pairs: Iterable[Tuple[str, str]]) -> List[AreaOption]:
        """Add any of ``pairs`` that are not registered yet"""
        added = []
        for value, label in pairs:
            if not await self.find_area(value):
                added.append(await self.add_area(value, label))
        return added
