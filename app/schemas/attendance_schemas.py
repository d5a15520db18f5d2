# app/schemas/attendance_schemas.py
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel
from ..models.enums import AttendanceStatus

class AttendanceRecordCreate(BaseModel):
    # Both are required; the service reports a missing value as 400
    class_id: Optional[UUID] = None
    session_date: Optional[datetime] = None

class AttendanceStatusUpdate(BaseModel):
    student_id: UUID
    status: str

class StudentInfo(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str

    model_config = {"from_attributes": True}

class AttendeeResponse(BaseModel):
    student_id: UUID
    check_in_time: Optional[datetime] = None
    status: AttendanceStatus
    student: Optional[StudentInfo] = None

    model_config = {"from_attributes": True}

class AttendanceRecordResponse(BaseModel):
    id: UUID
    class_id: UUID
    session_date: datetime
    attendees: List[AttendeeResponse] = []
    created_at: datetime

    model_config = {"from_attributes": True}

class AttendanceRecordDetail(AttendanceRecordResponse):
    class_title: Optional[str] = None

class SessionStats(BaseModel):
    attendance_record_id: UUID
    session_date: datetime
    present_count: int
    absent_count: int
    attendance_rate: float

class StudentStats(BaseModel):
    student_id: UUID
    name: str
    email: str
    sessions_present: int
    sessions_absent: int
    sessions_late: int
    attendance_rate: float

class AttendanceStats(BaseModel):
    class_id: UUID
    class_name: str
    total_sessions: int
    total_registered_students: int
    sessions: List[SessionStats]
    student_stats: List[StudentStats]
