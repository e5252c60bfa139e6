"""Usage history schemas"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from tableside.models.usage import MilestoneKind


class UsageSessionResponse(BaseModel):
    """Usage session response"""
    usage_id: UUID
    table_id: UUID
    order_id: Optional[UUID]
    customer_name: Optional[str]
    customer_phone: Optional[str]
    guest_count: int
    start_time: datetime
    end_time: Optional[datetime]
    duration_minutes: Optional[int]
    total_order_amount: Decimal
    total_payment_amount: Decimal
    usage_type: Optional[str]
    notes: Optional[str]
    waiter_assigned: Optional[str]
    order_placed_at: Optional[datetime]
    food_served_at: Optional[datetime]
    payment_completed_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class UsageSessionListResponse(BaseModel):
    """Paginated usage history"""
    items: List[UsageSessionResponse]
    total: int
    page: int
    page_size: int


class UsageSessionUpdate(BaseModel):
    """Order/payment updates to an open session"""
    order_id: Optional[UUID] = None
    total_order_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    total_payment_amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    customer_name: Optional[str] = Field(None, max_length=100)
    customer_phone: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None


class MilestoneRequest(BaseModel):
    """Record a service milestone; timestamp defaults to now"""
    kind: MilestoneKind
    timestamp: Optional[datetime] = None
