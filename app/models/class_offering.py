from sqlalchemy import Column, String, Integer, Float, Text, Enum, JSON, CheckConstraint
from sqlalchemy.orm import relationship
from .base import Base
from .enums import ClassType, TargetGender, RegistrationType, enum_column_values


class ClassOffering(Base):
    __tablename__ = "classes"

    # Class Information
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    type = Column(Enum(ClassType, name="class_type", values_callable=enum_column_values), nullable=False)
    cost = Column(Float, nullable=False, default=0)
    capacity = Column(Integer, nullable=False)

    # Location
    city = Column(String(100), nullable=False, index=True)
    address = Column(String(300), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)

    # Instructor
    instructor_name = Column(String(150), nullable=False)
    instructor_bio = Column(Text)

    # Audience
    target_gender = Column(
        Enum(TargetGender, name="target_gender", values_callable=enum_column_values),
        nullable=False,
        default=TargetGender.ANY
    )
    age_min = Column(Integer, nullable=False)
    age_max = Column(Integer)  # open-ended when null

    # Ordered list of {"date", "start_time", "end_time"}
    schedule = Column(JSON, nullable=False, default=list)

    registration_type = Column(
        Enum(RegistrationType, name="registration_type", values_callable=enum_column_values),
        nullable=False,
        default=RegistrationType.INTERNAL
    )
    external_link = Column(String(500))

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_classes_capacity_positive"),
        CheckConstraint("cost >= 0", name="ck_classes_cost_non_negative"),
    )

    # Relationships
    registrations = relationship("Registration", back_populates="class_offering", cascade="all, delete-orphan", passive_deletes=True)
    attendance_records = relationship("AttendanceRecord", back_populates="class_offering", cascade="all, delete-orphan", passive_deletes=True)
