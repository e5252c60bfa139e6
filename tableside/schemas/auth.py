"""Staff identity schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from tableside.models.user import StaffRole


class StaffResponse(BaseModel):
    """Acting staff member"""
    id: UUID
    email: str
    full_name: Optional[str]
    role: StaffRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
