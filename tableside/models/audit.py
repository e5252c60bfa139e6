"""Audit log model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID

from tableside.database import Base


class AuditLog(Base):
    """Audit trail for table, area and QR changes"""
    __tablename__ = "audit_logs"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    
    # Actor information
    actor_id = Column(UUID(as_uuid=True))  # User ID or null for system
    actor_name = Column(String(255))
    
    # Action details
    action = Column(String(100), nullable=False)  # change_status, create_table, remove_area, etc.
    resource_type = Column(String(50))  # table, area, qr_code
    resource_id = Column(String(64))
    
    # Change data
    data_json = Column(JSON)  # {"before": {...}, "after": {...}}
    
    created_at = Column(DateTime, default=datetime.utcnow)
