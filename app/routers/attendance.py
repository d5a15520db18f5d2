from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.security import Principal, get_current_principal, require_admin
from ..schemas.attendance_schemas import (
    AttendanceRecordCreate, AttendanceStatusUpdate, AttendanceRecordResponse,
    AttendanceRecordDetail, AttendanceStats
)
from ..services.attendance_service import AttendanceService

router = APIRouter(prefix="/api/v1/attendance", tags=["Attendance"])

@router.post("/", response_model=AttendanceRecordResponse, status_code=status.HTTP_201_CREATED)
async def create_attendance_record(
    record_in: AttendanceRecordCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Open an attendance record for one class session"""
    return await AttendanceService(db).create_attendance_record(record_in.class_id, record_in.session_date)

@router.post("/{attendance_id}/checkin", response_model=AttendanceRecordResponse)
async def check_in(
    attendance_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Check the current user in to a session"""
    return await AttendanceService(db).check_in_student(attendance_id, principal)

@router.put("/{attendance_id}/status", response_model=AttendanceRecordResponse)
async def update_attendance_status(
    attendance_id: UUID,
    status_in: AttendanceStatusUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AttendanceService(db).update_attendance_status(attendance_id, status_in.student_id, status_in.status)

@router.get("/class/{class_id}", response_model=List[AttendanceRecordResponse])
async def get_class_attendance(
    class_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await AttendanceService(db).get_class_attendance(class_id)

@router.get("/stats/{class_id}", response_model=AttendanceStats)
async def get_attendance_stats(
    class_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Per-session and per-student attendance statistics for a class"""
    return await AttendanceService(db).get_attendance_stats(class_id)

@router.get("/{attendance_id}", response_model=AttendanceRecordDetail)
async def get_attendance_by_id(
    attendance_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    record = await AttendanceService(db).get_record(attendance_id)
    detail = AttendanceRecordDetail.model_validate(record)
    detail.class_title = record.class_offering.title if record.class_offering else None
    return detail
