"""Staff directory model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
import enum

from tableside.database import Base


class StaffRole(str, enum.Enum):
    """Staff roles for RBAC"""
    WAITER = "waiter"
    CASHIER = "cashier"
    ADMIN = "admin"
    OWNER = "owner"


class StaffUser(Base):
    """Staff accounts (cashier terminals, waiter tablets, back office)"""
    __tablename__ = "users"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    
    # Identity, as known to the sign-in service
    email = Column(String(255), unique=True, nullable=False)
    
    # Profile
    full_name = Column(String(255))
    
    # Role
    role = Column(
        Enum(
            StaffRole,
            name="staff_role",
            native_enum=False,
            length=50,
            values_callable=lambda members: [m.value for m in members],
        ),
        default=StaffRole.WAITER,
    )
    
    # Status
    is_active = Column(Boolean, default=True)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    @property
    def display_name(self) -> str:
        return self.full_name or self.email
    
    def has_permission(self, required_role: StaffRole) -> bool:
        """Check if user has at least the required role level"""
        role_hierarchy = {
            StaffRole.WAITER: 1,
            StaffRole.CASHIER: 2,
            StaffRole.ADMIN: 3,
            StaffRole.OWNER: 4,
        }
        return role_hierarchy.get(self.role, 0) >= role_hierarchy.get(required_role, 0)
