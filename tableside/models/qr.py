"""QR access binding model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID

from tableside.database import Base


class QRBinding(Base):
    """Customer-facing access token bound to one table"""
    __tablename__ = "qr_codes"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    table_id = Column(
        UUID(as_uuid=True),
        ForeignKey("tables.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    token = Column(String(255), unique=True, nullable=False)
    qr_type = Column(String(50), default="table_ordering")
    is_active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime)
    
    # Scan tracking
    scan_count = Column(Integer, nullable=False, default=0)
    last_scanned_at = Column(DateTime)
    
    generated_at = Column(DateTime, default=datetime.utcnow)
