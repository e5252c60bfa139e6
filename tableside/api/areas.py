"""Seating area API endpoints"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tableside.database import get_db
from tableside.models.user import StaffUser, StaffRole
from tableside.schemas.area import AreaCreate, AreaUpdate, AreaResponse
from tableside.services import AreaRegistry, run_in_transaction
from tableside.api.auth import get_current_active_user, require_role

router = APIRouter()


@router.get("", response_model=List[AreaResponse])
async def list_areas(
    current_user: StaffUser = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """List areas in insertion order"""
    return await AreaRegistry(db).list_areas()


@router.post("", response_model=AreaResponse, status_code=201)
async def add_area(
    area_data: AreaCreate,
    current_user: StaffUser = Depends(require_role(StaffRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Register a new area"""
    registry = AreaRegistry(db)
    return await run_in_transaction(
        db,
        lambda: registry.add_area(area_data.value, area_data.label, actor=current_user),
        name="add_area",
    )


@router.put("/{value}", response_model=AreaResponse)
async def relabel_area(
    value: str,
    area_data: AreaUpdate,
    current_user: StaffUser = Depends(require_role(StaffRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Change an area's display label"""
    registry = AreaRegistry(db)
    return await run_in_transaction(
        db,
        lambda: registry.relabel_area(value, area_data.label, actor=current_user),
        name="relabel_area",
    )


@router.delete("/{value}")
async def remove_area(
    value: str,
    current_user: StaffUser = Depends(require_role(StaffRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    """Remove an area no active table references"""
    registry = AreaRegistry(db)
    await run_in_transaction(
        db,
        lambda: registry.remove_area(value, actor=current_user),
        name="remove_area",
    )
    return {"message": "Area removed successfully", "value": value}
