"""Pydantic schemas for request/response validation"""

from tableside.schemas.auth import StaffResponse
from tableside.schemas.table import (
    TableCreate,
    TableUpdate,
    TableResponse,
    TableListResponse,
    StatusChangeRequest,
    TableStatsResponse,
    TableDashboardResponse,
)
from tableside.schemas.usage import (
    UsageSessionResponse,
    UsageSessionListResponse,
    UsageSessionUpdate,
    MilestoneRequest,
)
from tableside.schemas.area import (
    AreaCreate,
    AreaUpdate,
    AreaResponse,
)
from tableside.schemas.qr import (
    QRCodeResponse,
    QRResolveResponse,
)

__all__ = [
    "StaffResponse",
    "TableCreate",
    "TableUpdate",
    "TableResponse",
    "TableListResponse",
    "StatusChangeRequest",
    "TableStatsResponse",
    "TableDashboardResponse",
    "UsageSessionResponse",
    "UsageSessionListResponse",
    "UsageSessionUpdate",
    "MilestoneRequest",
    "AreaCreate",
    "AreaUpdate",
    "AreaResponse",
    "QRCodeResponse",
    "QRResolveResponse",
]
