"""Seating area model"""

from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime

from tableside.database import Base


class AreaOption(Base):
    """Seating area a table can be assigned to"""
    __tablename__ = "area_options"
    
    id = Column(Integer, primary_key=True, autoincrement=True)  # Insertion order
    value = Column(String(50), unique=True, nullable=False)
    label = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
