"""Attendance sessions, check-in, admin corrections and statistics."""
from datetime import datetime, timedelta, timezone
import uuid

import pytest
from sqlalchemy import insert

from app.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from app.models.attendance import AttendanceEntry
from app.models.base import utcnow
from app.models.enums import AttendanceStatus
from app.services.attendance_service import (
    AttendanceService, normalize_session_date, percentage, round_rate
)
from app.services.registration_service import RegistrationService
from tests.conftest import principal_for

SESSION = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)


async def enroll(db, user, class_obj):
    return await RegistrationService(db).create_registration(principal_for(user), class_obj.id)


class TestRateHelpers:

    def test_percentage_rounds_half_up(self):
        assert percentage(2, 3) == 66.7
        assert percentage(1, 3) == 33.3
        assert percentage(1, 8) == 12.5
        assert round_rate(12.25) == 12.3

    def test_percentage_with_empty_denominator(self):
        assert percentage(0, 0) == 0.0
        assert percentage(3, 0) == 0.0

    def test_normalize_session_date(self):
        naive = datetime(2026, 3, 2, 18, 30)
        assert normalize_session_date(naive) == datetime(2026, 3, 2, 18, 30, tzinfo=timezone.utc)

        offset = datetime(2026, 3, 2, 1, 0, tzinfo=timezone(timedelta(hours=2)))
        assert normalize_session_date(offset) == datetime(2026, 3, 1, 23, 0, tzinfo=timezone.utc)
        assert normalize_session_date(offset, truncate_to_day=True) == datetime(2026, 3, 1, tzinfo=timezone.utc)


class TestAttendanceRecords:

    async def test_create_record(self, db, make_class):
        class_obj = await make_class()

        record = await AttendanceService(db).create_attendance_record(class_obj.id, SESSION)

        assert record.class_id == class_obj.id
        assert record.attendees == []

    async def test_create_requires_class_and_date(self, db, make_class):
        class_obj = await make_class()
        service = AttendanceService(db)

        with pytest.raises(BadRequestError):
            await service.create_attendance_record(None, SESSION)
        with pytest.raises(BadRequestError):
            await service.create_attendance_record(class_obj.id, None)

    async def test_create_for_unknown_class(self, db):
        with pytest.raises(NotFoundError):
            await AttendanceService(db).create_attendance_record(uuid.uuid4(), SESSION)

    async def test_duplicate_session_is_rejected(self, db, make_class):
        class_obj = await make_class()
        service = AttendanceService(db)
        await service.create_attendance_record(class_obj.id, SESSION)

        with pytest.raises(ConflictError):
            await service.create_attendance_record(class_obj.id, SESSION)

    async def test_class_attendance_newest_first(self, db, make_class):
        class_obj = await make_class()
        service = AttendanceService(db)
        await service.create_attendance_record(class_obj.id, SESSION)
        await service.create_attendance_record(class_obj.id, SESSION + timedelta(days=7))

        records = await service.get_class_attendance(class_obj.id)

        assert len(records) == 2
        assert records[0].session_date > records[1].session_date

    async def test_get_missing_record(self, db):
        with pytest.raises(NotFoundError):
            await AttendanceService(db).get_record(uuid.uuid4())


class TestCheckIn:

    async def test_enrolled_student_checks_in(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        record = await service.check_in_student(record.id, principal_for(student))

        assert len(record.attendees) == 1
        entry = record.attendees[0]
        assert entry.student_id == student.id
        assert entry.status == AttendanceStatus.PRESENT
        assert entry.check_in_time is not None

    async def test_unregistered_student_is_forbidden(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        with pytest.raises(ForbiddenError):
            await service.check_in_student(record.id, principal_for(student))

    async def test_waitlisted_student_cannot_self_check_in(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        registration = await enroll(db, student, class_obj)
        await RegistrationService(db).update_registration(registration.id, status="waitlisted")
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        with pytest.raises(ForbiddenError):
            await service.check_in_student(record.id, principal_for(student))

    async def test_second_check_in_is_rejected(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)
        await service.check_in_student(record.id, principal_for(student))

        with pytest.raises(ConflictError):
            await service.check_in_student(record.id, principal_for(student))

        record = await service.get_record(record.id)
        assert len(record.attendees) == 1


class TestStatusUpdates:

    async def test_rejects_unknown_status(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        with pytest.raises(BadRequestError):
            await service.update_attendance_status(record.id, student.id, "excused")

    async def test_adds_missing_entry_for_registered_student(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        record = await service.update_attendance_status(record.id, student.id, "absent")

        assert len(record.attendees) == 1
        assert record.attendees[0].status == AttendanceStatus.ABSENT
        assert record.attendees[0].check_in_time is None

    async def test_unregistered_student_is_bad_request(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        with pytest.raises(BadRequestError):
            await service.update_attendance_status(record.id, student.id, "present")

    async def test_marking_attended_backfills_check_in_time(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)
        await service.update_attendance_status(record.id, student.id, "absent")

        record = await service.update_attendance_status(record.id, student.id, "late")

        assert record.attendees[0].status == AttendanceStatus.LATE
        assert record.attendees[0].check_in_time is not None

    async def test_repeated_update_keeps_one_entry(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        await service.update_attendance_status(record.id, student.id, "present")
        record = await service.update_attendance_status(record.id, student.id, "present")

        assert len(record.attendees) == 1
        assert record.attendees[0].status == AttendanceStatus.PRESENT

    async def test_check_in_during_status_update_is_not_a_store_error(self, db, make_user, make_class, monkeypatch):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)
        load_record = service.get_record
        checked_in = []

        async def load_then_student_checks_in(attendance_id):
            loaded = await load_record(attendance_id)
            if not checked_in:
                checked_in.append(True)
                await db.execute(insert(AttendanceEntry.__table__).values(
                    attendance_id=attendance_id,
                    student_id=student.id,
                    check_in_time=utcnow(),
                    status=AttendanceStatus.PRESENT
                ))
                await db.commit()
            return loaded

        monkeypatch.setattr(service, "get_record", load_then_student_checks_in)

        record = await service.update_attendance_status(record.id, student.id, "late")

        assert len(record.attendees) == 1
        assert record.attendees[0].status == AttendanceStatus.LATE
        assert record.attendees[0].check_in_time is not None


class TestAttendanceStats:

    async def test_session_and_student_rates(self, db, make_user, make_class):
        ada = await make_user(first_name="Ada", last_name="Alpha")
        bea = await make_user(first_name="Bea", last_name="Beta")
        class_obj = await make_class(title="Street Safety")
        await enroll(db, ada, class_obj)
        await enroll(db, bea, class_obj)
        service = AttendanceService(db)

        first = await service.create_attendance_record(class_obj.id, SESSION)
        second = await service.create_attendance_record(class_obj.id, SESSION + timedelta(days=7))
        await service.create_attendance_record(class_obj.id, SESSION + timedelta(days=14))

        await service.check_in_student(first.id, principal_for(ada))
        await service.update_attendance_status(first.id, bea.id, "late")
        await service.check_in_student(second.id, principal_for(ada))
        await service.update_attendance_status(second.id, bea.id, "absent")

        stats = await service.get_attendance_stats(class_obj.id)

        assert stats["class_name"] == "Street Safety"
        assert stats["total_sessions"] == 3
        assert stats["total_registered_students"] == 2
        assert [s["attendance_rate"] for s in stats["sessions"]] == [100.0, 50.0, 0.0]
        assert [s["present_count"] for s in stats["sessions"]] == [2, 1, 0]
        assert [s["absent_count"] for s in stats["sessions"]] == [0, 1, 2]

        ada_stats, bea_stats = stats["student_stats"]
        assert ada_stats["name"] == "Ada Alpha"
        assert ada_stats["sessions_present"] == 2
        assert ada_stats["sessions_absent"] == 1
        assert ada_stats["attendance_rate"] == 66.7
        assert bea_stats["sessions_present"] == 1
        assert bea_stats["sessions_late"] == 1
        assert bea_stats["sessions_absent"] == 2
        assert bea_stats["attendance_rate"] == 33.3

    async def test_no_sessions(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)

        stats = await AttendanceService(db).get_attendance_stats(class_obj.id)

        assert stats["total_sessions"] == 0
        assert stats["sessions"] == []
        assert stats["student_stats"][0]["attendance_rate"] == 0.0

    async def test_cancelled_students_are_not_counted(self, db, make_user, make_class):
        stays = await make_user(first_name="Stays")
        leaves = await make_user(first_name="Leaves")
        class_obj = await make_class()
        await enroll(db, stays, class_obj)
        registration = await enroll(db, leaves, class_obj)
        await RegistrationService(db).cancel_my_registration(registration.id, principal_for(leaves))
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)
        await service.check_in_student(record.id, principal_for(stays))

        stats = await service.get_attendance_stats(class_obj.id)

        assert stats["total_registered_students"] == 1
        assert [s["name"] for s in stats["student_stats"]] == ["Stays Student"]
        assert stats["sessions"][0]["attendance_rate"] == 100.0

    async def test_unknown_class(self, db):
        with pytest.raises(NotFoundError):
            await AttendanceService(db).get_attendance_stats(uuid.uuid4())

    async def test_three_students_two_sessions(self, db, make_user, make_class):
        ada = await make_user(first_name="Ada")
        ben = await make_user(first_name="Ben")
        cy = await make_user(first_name="Cy")
        class_obj = await make_class()
        for student in (ada, ben, cy):
            await enroll(db, student, class_obj)
        service = AttendanceService(db)
        first = await service.create_attendance_record(class_obj.id, SESSION)
        second = await service.create_attendance_record(class_obj.id, SESSION + timedelta(days=1))
        await service.check_in_student(first.id, principal_for(ada))
        await service.check_in_student(first.id, principal_for(ben))
        await service.check_in_student(second.id, principal_for(ada))

        stats = await service.get_attendance_stats(class_obj.id)

        rates = {s["name"].split()[0]: s["attendance_rate"] for s in stats["student_stats"]}
        assert rates == {"Ada": 100.0, "Ben": 50.0, "Cy": 0.0}
        assert [s["attendance_rate"] for s in stats["sessions"]] == [66.7, 33.3]

    async def test_stats_are_idempotent(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)
        await service.check_in_student(record.id, principal_for(student))

        assert await service.get_attendance_stats(class_obj.id) == await service.get_attendance_stats(class_obj.id)


class TestAccessRules:

    async def test_cancelled_registration_cannot_check_in(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        registration = await enroll(db, student, class_obj)
        await RegistrationService(db).cancel_my_registration(registration.id, principal_for(student))
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)

        with pytest.raises(ForbiddenError):
            await service.check_in_student(record.id, principal_for(student))

    async def test_invalid_status_leaves_record_unchanged(self, db, make_user, make_class):
        student = await make_user()
        class_obj = await make_class()
        await enroll(db, student, class_obj)
        service = AttendanceService(db)
        record = await service.create_attendance_record(class_obj.id, SESSION)
        await service.check_in_student(record.id, principal_for(student))

        with pytest.raises(BadRequestError):
            await service.update_attendance_status(record.id, student.id, "invalid")

        record = await service.get_record(record.id)
        assert [e.status for e in record.attendees] == [AttendanceStatus.PRESENT]
