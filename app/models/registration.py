from sqlalchemy import Column, DateTime, Text, ForeignKey, Enum, Uuid, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base, utcnow
from .enums import RegistrationStatus, enum_column_values


class Registration(Base):
    __tablename__ = "registrations"

    # Foreign Keys
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id = Column(Uuid(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)

    # Registration Details
    registration_date = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    status = Column(
        Enum(RegistrationStatus, name="registration_status", values_callable=enum_column_values),
        default=RegistrationStatus.ENROLLED,
        nullable=False,
        index=True
    )
    notes = Column(Text)

    __table_args__ = (
        UniqueConstraint("user_id", "class_id", name="uq_registration_user_class"),
    )

    # Relationships
    user = relationship("User", back_populates="registrations")
    class_offering = relationship("ClassOffering", back_populates="registrations")
