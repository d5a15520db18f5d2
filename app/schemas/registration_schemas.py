# app/schemas/registration_schemas.py
from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field
from ..models.enums import RegistrationStatus
from .user_schemas import UserSummary
from .class_schemas import ClassSummary

class RegistrationCreate(BaseModel):
    class_id: UUID

class RegistrationUpdate(BaseModel):
    # Validated by the service so that bad values surface as 400
    status: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

class RegistrationResponse(BaseModel):
    id: UUID
    user_id: UUID
    class_id: UUID
    status: RegistrationStatus
    registration_date: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

class ClassRegistrationResponse(RegistrationResponse):
    user: UserSummary

class MyRegistrationResponse(RegistrationResponse):
    class_offering: ClassSummary

class CancelRegistrationResponse(BaseModel):
    message: str
    registration: RegistrationResponse
