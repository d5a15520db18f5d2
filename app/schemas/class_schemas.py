# app/schemas/class_schemas.py
from typing import List, Optional
from datetime import date as date_type, datetime
from uuid import UUID
from pydantic import BaseModel, Field, model_validator
from ..models.enums import ClassType, TargetGender, RegistrationType, TimeOfDay

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

class Instructor(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    bio: Optional[str] = None

class AgeRange(BaseModel):
    min: int = Field(..., ge=0)
    max: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self):
        if self.max is not None and self.max < self.min:
            raise ValueError("target_age_range.max must be greater than or equal to min")
        return self

class ScheduleEntry(BaseModel):
    date: date_type
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)

class ClassBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=300)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    instructor: Instructor
    type: ClassType
    cost: float = Field(default=0, ge=0)
    target_gender: TargetGender = TargetGender.ANY
    target_age_range: AgeRange
    capacity: int = Field(..., gt=0)
    schedule: List[ScheduleEntry] = Field(default_factory=list)
    registration_type: RegistrationType = RegistrationType.INTERNAL
    external_link: Optional[str] = Field(default=None, max_length=500)

class ClassCreate(ClassBase):
    pass

class ClassUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1)
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    address: Optional[str] = Field(default=None, min_length=1, max_length=300)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    instructor: Optional[Instructor] = None
    type: Optional[ClassType] = None
    cost: Optional[float] = Field(default=None, ge=0)
    target_gender: Optional[TargetGender] = None
    target_age_range: Optional[AgeRange] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    schedule: Optional[List[ScheduleEntry]] = None
    registration_type: Optional[RegistrationType] = None
    external_link: Optional[str] = Field(default=None, max_length=500)

class ClassResponse(ClassBase):
    id: UUID
    enrolled_count: int = 0
    available_spots: int = 0
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, class_obj, enrolled_count: int = 0) -> "ClassResponse":
        return cls(
            id=class_obj.id,
            title=class_obj.title,
            description=class_obj.description,
            city=class_obj.city,
            address=class_obj.address,
            latitude=class_obj.latitude,
            longitude=class_obj.longitude,
            instructor=Instructor(name=class_obj.instructor_name, bio=class_obj.instructor_bio),
            type=class_obj.type,
            cost=class_obj.cost,
            target_gender=class_obj.target_gender,
            target_age_range=AgeRange(min=class_obj.age_min, max=class_obj.age_max),
            capacity=class_obj.capacity,
            schedule=class_obj.schedule or [],
            registration_type=class_obj.registration_type,
            external_link=class_obj.external_link,
            enrolled_count=enrolled_count,
            available_spots=max(class_obj.capacity - enrolled_count, 0),
            created_at=class_obj.created_at,
            updated_at=class_obj.updated_at,
        )

class ClassSummary(BaseModel):
    id: UUID
    title: str
    city: str
    schedule: List[ScheduleEntry] = Field(default_factory=list)
    cost: float
    type: ClassType
    instructor_name: str

    model_config = {"from_attributes": True}

class ClassFilter(BaseModel):
    city: Optional[str] = None
    gender: Optional[TargetGender] = None
    min_age: Optional[int] = Field(default=None, ge=0)
    max_age: Optional[int] = Field(default=None, ge=0)
    max_cost: Optional[float] = Field(default=None, ge=0)
    type: Optional[ClassType] = None
    time_of_day: Optional[TimeOfDay] = None
