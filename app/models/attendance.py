from sqlalchemy import Column, DateTime, ForeignKey, Enum, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base
from .enums import AttendanceStatus, enum_column_values


class AttendanceRecord(Base):
    """One session of a class and the students seen at it."""
    __tablename__ = "attendance_records"

    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    session_date = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("class_id", "session_date", name="uq_attendance_class_session"),
    )

    # Relationships
    class_offering = relationship("ClassOffering", back_populates="attendance_records")
    attendees = relationship(
        "AttendanceEntry",
        back_populates="record",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AttendanceEntry.created_at"
    )


class AttendanceEntry(Base):
    __tablename__ = "attendance_entries"

    attendance_id = Column(Uuid(as_uuid=True), ForeignKey("attendance_records.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    check_in_time = Column(DateTime(timezone=True))
    status = Column(
        Enum(AttendanceStatus, name="attendance_status", values_callable=enum_column_values),
        default=AttendanceStatus.PRESENT,
        nullable=False
    )

    __table_args__ = (
        UniqueConstraint("attendance_id", "student_id", name="uq_attendance_entry_student"),
    )

    # Relationships
    record = relationship("AttendanceRecord", back_populates="attendees")
    student = relationship("User")
