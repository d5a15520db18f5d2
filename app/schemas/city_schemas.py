# app/schemas/city_schemas.py
from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field

class CityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    image_url: str = Field(..., min_length=1, max_length=500)

class CityUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    image_url: Optional[str] = Field(default=None, min_length=1, max_length=500)

class CityResponse(CityCreate):
    id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}
