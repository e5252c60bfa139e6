"""Dining table model"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, Enum
from sqlalchemy.dialects.postgresql import UUID

from tableside.database import Base


class TableStatus(str, enum.Enum):
    """Occupancy states of a physical table"""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    CLEANING = "cleaning"
    OUT_OF_ORDER = "out_of_order"

    @property
    def label(self) -> str:
        return STATUS_DISPLAY[self]["label"]

    @property
    def color(self) -> str:
        return STATUS_DISPLAY[self]["color"]


STATUS_DISPLAY = {
    TableStatus.AVAILABLE: {"label": "Available", "color": "success"},
    TableStatus.OCCUPIED: {"label": "Occupied", "color": "error"},
    TableStatus.RESERVED: {"label": "Reserved", "color": "warning"},
    TableStatus.CLEANING: {"label": "Cleaning", "color": "info"},
    TableStatus.OUT_OF_ORDER: {"label": "Out of Order", "color": "default"},
}

_missing_display = set(TableStatus) - set(STATUS_DISPLAY)
if _missing_display:
    raise RuntimeError(f"No display metadata for statuses: {sorted(s.value for s in _missing_display)}")


class Table(Base):
    """Physical dining table"""
    __tablename__ = "tables"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    number = Column(String(20), unique=True, nullable=False)  # Display label, e.g. T001
    capacity = Column(Integer, nullable=False)
    status = Column(
        Enum(
            TableStatus,
            name="table_status",
            native_enum=False,
            length=20,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=TableStatus.AVAILABLE,
        index=True,
    )
    area = Column(String(50), nullable=False, index=True)  # References area_options.value
    location_description = Column(Text)
    notes = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    
    # Optimistic concurrency counter, checked and incremented on every write
    version = Column(Integer, nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    __mapper_args__ = {"version_id_col": version}
