# app/schemas/user_schemas.py
from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field
from ..models.enums import Gender, UserRole

class UserBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    age: int = Field(..., ge=0, le=130)
    gender: Gender
    phone: Optional[str] = Field(default=None, max_length=30)
    city_id: Optional[UUID] = None

class UserCreate(UserBase):
    email: EmailStr
    password: str

class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=130)
    gender: Optional[Gender] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    city_id: Optional[UUID] = None

class UserResponse(UserBase):
    id: UUID
    email: str
    role: UserRole
    created_at: datetime

    model_config = {"from_attributes": True}

class UserSummary(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None

    model_config = {"from_attributes": True}
