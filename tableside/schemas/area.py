"""Area schemas"""

from pydantic import BaseModel, Field


class AreaCreate(BaseModel):
    """Add area request"""
    value: str = Field(..., min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_\-]+$")
    label: str = Field(..., min_length=1, max_length=100)


class AreaUpdate(BaseModel):
    """Relabel area request"""
    label: str = Field(..., min_length=1, max_length=100)


class AreaResponse(BaseModel):
    """Area response"""
    value: str
    label: str

    class Config:
        from_attributes = True
