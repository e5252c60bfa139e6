"""Table usage history model"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Numeric, Index, text
from sqlalchemy.dialects.postgresql import UUID

from tableside.database import Base


class MilestoneKind(str, enum.Enum):
    """Service milestones recorded on an open session"""
    ORDER_PLACED = "order_placed"
    FOOD_SERVED = "food_served"
    PAYMENT_COMPLETED = "payment_completed"


MILESTONE_FIELDS = {
    MilestoneKind.ORDER_PLACED: "order_placed_at",
    MilestoneKind.FOOD_SERVED: "food_served_at",
    MilestoneKind.PAYMENT_COMPLETED: "payment_completed_at",
}


class UsageSession(Base):
    """One occupancy session of a table"""
    __tablename__ = "table_usage_history"
    
    usage_id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    table_id = Column(
        UUID(as_uuid=True),
        ForeignKey("tables.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_id = Column(UUID(as_uuid=True))  # Supplied by the order subsystem
    
    # Party
    customer_name = Column(String(100))
    customer_phone = Column(String(20))
    guest_count = Column(Integer, nullable=False)
    
    # Interval
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, index=True)
    duration_minutes = Column(Integer)
    
    # Amounts, maintained by the order and payment subsystems
    total_order_amount = Column(Numeric(12, 2), nullable=False, default=0)
    total_payment_amount = Column(Numeric(12, 2), nullable=False, default=0)
    
    usage_type = Column(String(50))  # walk_in, reservation
    notes = Column(Text)
    waiter_assigned = Column(String(100))
    
    # Milestones
    order_placed_at = Column(DateTime)
    food_served_at = Column(DateTime)
    payment_completed_at = Column(DateTime)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    
    __table_args__ = (
        # At most one open session per table
        Index(
            "uq_usage_open_session_per_table",
            "table_id",
            unique=True,
            postgresql_where=text("end_time IS NULL"),
            sqlite_where=text("end_time IS NULL"),
        ),
    )
    
    @property
    def is_open(self) -> bool:
        return self.end_time is None
