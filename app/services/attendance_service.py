# app/services/attendance_service.py
from typing import List, Optional, Dict, Any
from uuid import UUID
from datetime import datetime, timezone
import logging
import math
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from .base_service import BaseService
from ..core.config import settings
from ..core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from ..core.security import Principal
from ..models.attendance import AttendanceRecord, AttendanceEntry
from ..models.base import utcnow
from ..models.class_offering import ClassOffering
from ..models.enums import (
    AttendanceStatus, RegistrationStatus, ACTIVE_REGISTRATION_STATUSES, ATTENDED_STATUSES
)
from ..models.registration import Registration

logger = logging.getLogger(__name__)


def round_rate(value: float) -> float:
    """Round half up to one decimal place"""
    return math.floor(value * 10 + 0.5) / 10


def percentage(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round_rate(part / whole * 100)


def normalize_session_date(session_date: datetime, truncate_to_day: bool = False) -> datetime:
    """Convert to UTC, optionally dropping the time of day"""
    if session_date.tzinfo is None:
        session_date = session_date.replace(tzinfo=timezone.utc)
    else:
        session_date = session_date.astimezone(timezone.utc)
    if truncate_to_day:
        session_date = session_date.replace(hour=0, minute=0, second=0, microsecond=0)
    return session_date


class AttendanceService(BaseService[AttendanceRecord]):
    resource_name = "Attendance record"

    def __init__(self, db: AsyncSession):
        super().__init__(AttendanceRecord, db)

    def _record_query(self):
        return select(self.model).options(
            selectinload(self.model.attendees).selectinload(AttendanceEntry.student),
            selectinload(self.model.class_offering)
        )

    async def get_record(self, attendance_id: UUID) -> AttendanceRecord:
        """Load a record with its attendees, always reflecting the latest write"""
        stmt = self._record_query().where(self.model.id == attendance_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        record = result.scalar_one_or_none()
        if not record:
            raise NotFoundError("Attendance record", attendance_id)
        return record

    async def _get_class(self, class_id: UUID) -> ClassOffering:
        class_obj = await self.db.get(ClassOffering, class_id)
        if not class_obj:
            raise NotFoundError("Class", class_id)
        return class_obj

    async def _has_registration(self, user_id: UUID, class_id: UUID, statuses) -> bool:
        stmt = select(Registration.id).where(
            Registration.user_id == user_id,
            Registration.class_id == class_id,
            Registration.status.in_(statuses)
        )
        return (await self.db.scalar(stmt)) is not None

    async def create_attendance_record(self, class_id: Optional[UUID], session_date: Optional[datetime]) -> AttendanceRecord:
        if not class_id or not session_date:
            raise BadRequestError("Class ID and Session Date are required.")

        await self._get_class(class_id)

        session_date = normalize_session_date(session_date, settings.normalize_session_dates)

        existing = await self.db.scalar(
            select(self.model.id).where(
                self.model.class_id == class_id,
                self.model.session_date == session_date
            )
        )
        if existing:
            raise ConflictError("Attendance record already exists for this session")

        record = self.model(class_id=class_id, session_date=session_date)
        self.db.add(record)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Attendance record already exists for this session")

        logger.info(f"Attendance record {record.id} created for class {class_id} at {session_date.isoformat()}")
        return await self.get_record(record.id)

    async def check_in_student(self, attendance_id: UUID, principal: Principal) -> AttendanceRecord:
        record = await self.get_record(attendance_id)

        # Only an enrolled registration allows self check-in
        if not await self._has_registration(principal.user_id, record.class_id, (RegistrationStatus.ENROLLED,)):
            raise ForbiddenError("Student is not registered for this class")

        if any(entry.student_id == principal.user_id for entry in record.attendees):
            raise ConflictError("Student already checked in for this session")

        self.db.add(AttendanceEntry(
            attendance_id=record.id,
            student_id=principal.user_id,
            check_in_time=utcnow(),
            status=AttendanceStatus.PRESENT
        ))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Student already checked in for this session")

        logger.info(f"Student {principal.user_id} checked in to session {attendance_id}")
        return await self.get_record(attendance_id)

    async def update_attendance_status(self, attendance_id: UUID, student_id: UUID, status: str) -> AttendanceRecord:
        """Admin correction of one student's status for a session.

        A missing entry is added when the student holds an active
        registration for the class.
        """
        try:
            status = AttendanceStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in AttendanceStatus)
            raise BadRequestError(f"Invalid status. Must be one of: {allowed}")

        record = await self.get_record(attendance_id)
        entry = next((e for e in record.attendees if e.student_id == student_id), None)

        if entry:
            self._apply_status(entry, status)
        else:
            if not await self._has_registration(student_id, record.class_id, ACTIVE_REGISTRATION_STATUSES):
                raise BadRequestError("Cannot update status: Student is not registered for this class.")
            self.db.add(AttendanceEntry(
                attendance_id=record.id,
                student_id=student_id,
                check_in_time=utcnow() if status in ATTENDED_STATUSES else None,
                status=status
            ))

        try:
            await self.db.commit()
        except IntegrityError:
            # The student checked in after the record was read; update that entry instead
            await self.db.rollback()
            record = await self.get_record(attendance_id)
            entry = next((e for e in record.attendees if e.student_id == student_id), None)
            if entry is None:
                raise ConflictError("Attendance entry changed concurrently, please retry")
            self._apply_status(entry, status)
            await self.db.commit()

        logger.info(f"Attendance for student {student_id} in session {attendance_id} set to {status.value}")
        return await self.get_record(attendance_id)

    @staticmethod
    def _apply_status(entry: AttendanceEntry, status: AttendanceStatus) -> None:
        entry.status = status
        if status in ATTENDED_STATUSES and entry.check_in_time is None:
            entry.check_in_time = utcnow()

    async def get_class_attendance(self, class_id: UUID) -> List[AttendanceRecord]:
        """All session records for a class, most recent first"""
        await self._get_class(class_id)
        stmt = self._record_query().where(self.model.class_id == class_id).order_by(self.model.session_date.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_attendance_stats(self, class_id: UUID) -> Dict[str, Any]:
        class_obj = await self._get_class(class_id)

        reg_result = await self.db.execute(
            select(Registration)
            .where(
                Registration.class_id == class_id,
                Registration.status.in_(ACTIVE_REGISTRATION_STATUSES)
            )
            .options(selectinload(Registration.user))
            .execution_options(populate_existing=True)
        )
        registrations = reg_result.scalars().all()

        rec_result = await self.db.execute(
            select(self.model)
            .where(self.model.class_id == class_id)
            .options(selectinload(self.model.attendees))
            .order_by(self.model.session_date.asc(), self.model.id)
            .execution_options(populate_existing=True)
        )
        records = rec_result.scalars().all()

        total_sessions = len(records)
        total_registered = len(registrations)

        # Absent counts are relative to the registered population, not to explicit "absent" entries
        sessions = []
        statuses_by_student: Dict[UUID, List[AttendanceStatus]] = {}
        for record in records:
            present_count = 0
            for entry in record.attendees:
                statuses_by_student.setdefault(entry.student_id, []).append(entry.status)
                if entry.status in ATTENDED_STATUSES:
                    present_count += 1
            sessions.append({
                "attendance_record_id": record.id,
                "session_date": record.session_date,
                "present_count": present_count,
                "absent_count": total_registered - present_count,
                "attendance_rate": percentage(present_count, total_registered),
            })

        student_stats = []
        for registration in registrations:
            student = registration.user
            statuses = statuses_by_student.get(student.id, [])
            sessions_present = sum(1 for s in statuses if s in ATTENDED_STATUSES)
            sessions_late = sum(1 for s in statuses if s == AttendanceStatus.LATE)
            student_stats.append({
                "student_id": student.id,
                "name": student.full_name,
                "email": student.email,
                "sessions_present": sessions_present,
                "sessions_absent": total_sessions - sessions_present,
                "sessions_late": sessions_late,
                "attendance_rate": percentage(sessions_present, total_sessions),
            })
        student_stats.sort(key=lambda s: (s["name"].casefold(), str(s["student_id"])))

        return {
            "class_id": class_obj.id,
            "class_name": class_obj.title,
            "total_sessions": total_sessions,
            "total_registered_students": total_registered,
            "sessions": sessions,
            "student_stats": student_stats,
        }
