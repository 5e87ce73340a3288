"""
Pydantic schemas for API request/response models
Court inventory
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ===== COURT SCHEMAS =====

class CourtCreate(CamelModel):
    """Payload for creating a court"""
    name: str
    description: Optional[str] = None
    surface_type: Optional[str] = None  # "HARD", "CLAY", "GRASS"
    is_indoor: Optional[bool] = None
    is_active: Optional[bool] = None


class CourtUpdate(CamelModel):
    """Partial court update - only provided fields change"""
    name: Optional[str] = None
    description: Optional[str] = None
    surface_type: Optional[str] = None
    is_indoor: Optional[bool] = None
    is_active: Optional[bool] = None


class Court(CamelModel):
    """Court response"""
    id: str
    name: str
    description: Optional[str] = None
    surface_type: Optional[str] = None
    is_indoor: Optional[bool] = None
    is_active: bool
    created_at: str
    updated_at: str
