"""Database models"""

from tableside.models.table import Table, TableStatus, STATUS_DISPLAY
from tableside.models.usage import UsageSession, MilestoneKind, MILESTONE_FIELDS
from tableside.models.area import AreaOption
from tableside.models.qr import QRBinding
from tableside.models.user import StaffUser, StaffRole
from tableside.models.audit import AuditLog

__all__ = [
    "Table",
    "TableStatus",
    "STATUS_DISPLAY",
    "UsageSession",
    "MilestoneKind",
    "MILESTONE_FIELDS",
    "AreaOption",
    "QRBinding",
    "StaffUser",
    "StaffRole",
    "AuditLog",
]
