"""QR code schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from tableside.models.table import TableStatus


class QRCodeResponse(BaseModel):
    """Token bound to a table"""
    table_id: UUID
    table_number: str
    token: str
    order_url: str
    qr_type: Optional[str]
    is_active: bool
    expires_at: Optional[datetime]
    scan_count: int
    last_scanned_at: Optional[datetime]
    generated_at: datetime


class QRResolveResponse(BaseModel):
    """Table a customer token grants access to"""
    table_id: UUID
    table_number: str
    area: str
    capacity: int
    status: TableStatus
