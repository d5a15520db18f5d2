from sqlalchemy import Column, String, Integer, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
from .base import Base
from .enums import UserRole, Gender, enum_column_values


class User(Base):
    __tablename__ = "users"

    city_id = Column(Uuid(as_uuid=True), ForeignKey("cities.id", ondelete="SET NULL"), nullable=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)  # always stored lowercase
    password_hash = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(Enum(Gender, name="user_gender", values_callable=enum_column_values), nullable=False)
    phone = Column(String(30))
    role = Column(
        Enum(UserRole, name="user_role", values_callable=enum_column_values),
        default=UserRole.STUDENT,
        nullable=False,
        index=True
    )

    # Relationships
    city = relationship("City", back_populates="users")
    registrations = relationship("Registration", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
