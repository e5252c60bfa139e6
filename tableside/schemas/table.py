"""Table schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from tableside.models.table import TableStatus
from tableside.schemas.usage import UsageSessionResponse


class TableCreate(BaseModel):
    """Create table request"""
    number: Optional[str] = Field(None, max_length=20)  # Auto-assigned when omitted
    capacity: int
    area: str
    location_description: Optional[str] = None
    notes: Optional[str] = None


class TableUpdate(BaseModel):
    """Update table request"""
    number: Optional[str] = Field(None, min_length=1, max_length=20)
    capacity: Optional[int] = None
    area: Optional[str] = None
    location_description: Optional[str] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class TableResponse(BaseModel):
    """Table response"""
    id: UUID
    number: str
    capacity: int
    status: TableStatus
    area: str
    location_description: Optional[str]
    notes: Optional[str]
    is_active: bool
    version: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TableListResponse(BaseModel):
    """Paginated table list"""
    items: List[TableResponse]
    total: int
    page: int
    page_size: int


class StatusChangeRequest(BaseModel):
    """Status change request"""
    status: TableStatus
    notes: Optional[str] = None
    guest_count: Optional[int] = Field(None, ge=1)
    customer_name: Optional[str] = Field(None, max_length=100)
    customer_phone: Optional[str] = Field(None, max_length=20)


class StatusCount(BaseModel):
    """Count of tables in one status, with display metadata"""
    status: TableStatus
    label: str
    color: str
    count: int


class AreaCount(BaseModel):
    area: str
    label: str
    count: int


class CapacityCount(BaseModel):
    capacity: int
    count: int


class TableStatsResponse(BaseModel):
    """Aggregate table statistics"""
    total: int
    available: int
    occupied: int
    reserved: int
    cleaning: int
    out_of_order: int
    statuses: List[StatusCount]
    by_area: List[AreaCount]
    by_capacity: List[CapacityCount]
    utilization_rate: float


class TableDashboardResponse(BaseModel):
    """Floor overview"""
    tables: List[TableResponse]
    statistics: TableStatsResponse
    recent_activity: List[UsageSessionResponse]
