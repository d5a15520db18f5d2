# app/services/user_service.py
from typing import List, Optional
from uuid import UUID
import io
import logging
import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from .base_service import BaseService
from ..core.exceptions import BadRequestError, ConflictError
from ..core.security import Principal, hash_password
from ..models.city import City
from ..models.enums import Gender, UserRole, ACTIVE_REGISTRATION_STATUSES
from ..models.registration import Registration
from ..models.user import User
from ..schemas.user_schemas import UserCreate, UserUpdate

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

EXPORT_COLUMNS = [
    "first_name", "last_name", "email", "age", "gender", "phone", "city",
    "active_registrations", "created_at",
]


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService(BaseService[User]):
    resource_name = "User"

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(self.model).where(self.model.email == normalize_email(email))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _ensure_city(self, city_id: Optional[UUID]):
        if city_id and not await self.db.get(City, city_id):
            raise BadRequestError(f"Unknown city_id: {city_id}")

    async def register_user(self, user_in: UserCreate) -> User:
        """Create a student account; emails are unique case-insensitively"""
        if len(user_in.password) < MIN_PASSWORD_LENGTH:
            raise BadRequestError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        email = normalize_email(user_in.email)
        if await self.get_by_email(email):
            raise ConflictError("User already exists with this email")
        await self._ensure_city(user_in.city_id)

        data = user_in.model_dump(exclude={"password", "email"})
        data.update(email=email, password_hash=hash_password(user_in.password), role=UserRole.STUDENT)
        try:
            user = await self.create(data)
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("User already exists with this email")

        logger.info(f"User {user.id} registered")
        return user

    async def get_profile(self, principal: Principal) -> User:
        return await self.get_or_404(principal.user_id)

    async def update_profile(self, principal: Principal, user_in: UserUpdate) -> User:
        user = await self.get_or_404(principal.user_id)
        values = user_in.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in values:
            email = normalize_email(values.pop("email"))
            if email != user.email:
                if await self.get_by_email(email):
                    raise ConflictError("Email already in use by another account.")
                user.email = email

        if "password" in values:
            password = values.pop("password")
            if len(password) < MIN_PASSWORD_LENGTH:
                raise BadRequestError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")
            user.password_hash = hash_password(password)

        if "city_id" in values:
            await self._ensure_city(values["city_id"])

        for key, value in values.items():
            setattr(user, key, value)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Email already in use by another account.")
        await self.db.refresh(user)
        logger.info(f"User {user.id} updated profile")
        return user

    async def list_users(self) -> List[User]:
        stmt = select(self.model).order_by(self.model.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def filter_users(
        self,
        role: Optional[UserRole] = None,
        gender: Optional[Gender] = None,
        city_id: Optional[UUID] = None,
        min_age: Optional[int] = None,
        max_age: Optional[int] = None,
        search: Optional[str] = None
    ) -> List[User]:
        """Admin user search"""
        stmt = select(self.model)

        if role:
            stmt = stmt.where(self.model.role == role)
        if gender:
            stmt = stmt.where(self.model.gender == gender)
        if city_id:
            stmt = stmt.where(self.model.city_id == city_id)
        if min_age is not None:
            stmt = stmt.where(self.model.age >= min_age)
        if max_age is not None:
            stmt = stmt.where(self.model.age <= max_age)
        if search:
            term = f"%{search.strip().lower()}%"
            stmt = stmt.where(or_(
                func.lower(self.model.first_name).like(term),
                func.lower(self.model.last_name).like(term),
                self.model.email.like(term)
            ))

        stmt = stmt.order_by(self.model.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def export_students_csv(self) -> str:
        """All students with their active registration counts, as CSV"""
        counts = (
            select(Registration.user_id, func.count(Registration.id).label("active_registrations"))
            .where(Registration.status.in_(ACTIVE_REGISTRATION_STATUSES))
            .group_by(Registration.user_id)
            .subquery()
        )
        stmt = (
            select(self.model, func.coalesce(counts.c.active_registrations, 0))
            .outerjoin(counts, counts.c.user_id == self.model.id)
            .where(self.model.role == UserRole.STUDENT)
            .options(selectinload(self.model.city))
            .order_by(self.model.last_name, self.model.first_name)
        )
        result = await self.db.execute(stmt)

        rows = [
            {
                "first_name": user.first_name,
                "last_name": user.last_name,
                "email": user.email,
                "age": user.age,
                "gender": user.gender.value,
                "phone": user.phone,
                "city": user.city.name if user.city else None,
                "active_registrations": active,
                "created_at": user.created_at.isoformat(),
            }
            for user, active in result.all()
        ]

        df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)
        buffer = io.StringIO()
        df.to_csv(buffer, index=False)
        logger.info(f"Exported {len(df)} students")
        return buffer.getvalue()
