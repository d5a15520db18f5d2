# app/services/registration_service.py
from typing import List, Optional
from uuid import UUID
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from .base_service import BaseService
from ..core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from ..core.security import Principal
from ..models.base import utcnow
from ..models.class_offering import ClassOffering
from ..models.enums import RegistrationStatus, ACTIVE_REGISTRATION_STATUSES
from ..models.registration import Registration

logger = logging.getLogger(__name__)


class RegistrationService(BaseService[Registration]):
    resource_name = "Registration"

    def __init__(self, db: AsyncSession):
        super().__init__(Registration, db)

    async def get_by_user_and_class(self, user_id: UUID, class_id: UUID) -> Optional[Registration]:
        """Get the registration for a user and class, whatever its status"""
        stmt = select(self.model).where(
            self.model.user_id == user_id,
            self.model.class_id == class_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def count_active(self, class_id: UUID) -> int:
        """Count registrations holding a seat in the class"""
        stmt = select(func.count()).select_from(self.model).where(
            self.model.class_id == class_id,
            self.model.status.in_(ACTIVE_REGISTRATION_STATUSES)
        )
        result = await self.db.execute(stmt)
        return result.scalar()

    async def _lock_class(self, class_id: UUID) -> Optional[ClassOffering]:
        # Row lock serialises concurrent registrations for the same class
        stmt = select(ClassOffering).where(ClassOffering.id == class_id).with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_registration(self, principal: Principal, class_id: UUID) -> Registration:
        """Register the acting user for a class.

        The capacity check and the write share one transaction, opened by
        locking the class row, so two requests cannot both take the last seat.
        Past capacity the request is rejected; nothing is waitlisted.
        """
        class_obj = await self._lock_class(class_id)
        if not class_obj:
            raise NotFoundError("Class", class_id)

        existing = await self.get_by_user_and_class(principal.user_id, class_id)
        if existing and existing.status in ACTIVE_REGISTRATION_STATUSES:
            raise ConflictError("Already registered or waitlisted for this class")

        active_count = await self.count_active(class_id)
        if active_count >= class_obj.capacity:
            logger.warning(f"Registration rejected, class {class_id} is full ({active_count}/{class_obj.capacity})")
            raise ConflictError("Class is full")

        try:
            if existing:
                # The (user, class) pair is unique, so a cancelled registration is reused
                existing.status = RegistrationStatus.ENROLLED
                existing.registration_date = utcnow()
                existing.notes = None
                registration = existing
            else:
                registration = self.model(
                    user_id=principal.user_id,
                    class_id=class_id,
                    status=RegistrationStatus.ENROLLED,
                    registration_date=utcnow()
                )
                self.db.add(registration)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Already registered or waitlisted for this class")

        await self.db.refresh(registration)
        logger.info(f"User {principal.user_id} enrolled in class {class_id} ({active_count + 1}/{class_obj.capacity})")
        return registration

    async def cancel_my_registration(self, registration_id: UUID, principal: Principal) -> Registration:
        registration = await self.get_or_404(registration_id)

        if registration.user_id != principal.user_id:
            raise ForbiddenError("You are not authorized to cancel this registration")

        registration.status = RegistrationStatus.CANCELLED_BY_USER
        await self.db.commit()
        await self.db.refresh(registration)
        logger.info(f"Registration {registration_id} cancelled by user {principal.user_id}")
        return registration

    async def update_registration(self, registration_id: UUID, status: Optional[str] = None, notes: Optional[str] = None) -> Registration:
        """Admin update of status and notes. Capacity is not re-checked."""
        if status is not None:
            try:
                status = RegistrationStatus(status)
            except ValueError:
                allowed = ", ".join(s.value for s in RegistrationStatus)
                raise BadRequestError(f"Invalid status. Allowed: {allowed}")

        registration = await self.get_or_404(registration_id)

        if status is not None:
            registration.status = status
        if notes is not None:
            registration.notes = notes

        await self.db.commit()
        await self.db.refresh(registration)
        logger.info(f"Registration {registration_id} updated (status={registration.status.value})")
        return registration

    async def delete_registration(self, registration_id: UUID) -> None:
        if not await self.hard_delete(registration_id):
            raise NotFoundError("Registration", registration_id)
        logger.info(f"Registration {registration_id} deleted")

    async def get_class_registrations(self, class_id: UUID) -> List[Registration]:
        """Registrations for a class with user display fields, newest first"""
        class_exists = await self.db.scalar(select(ClassOffering.id).where(ClassOffering.id == class_id))
        if class_exists is None:
            raise NotFoundError("Class", class_id)

        stmt = (
            select(self.model)
            .where(self.model.class_id == class_id)
            .options(selectinload(self.model.user))
            .order_by(self.model.registration_date.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_my_registrations(self, principal: Principal) -> List[Registration]:
        """The acting user's registrations with class display fields, newest first"""
        stmt = (
            select(self.model)
            .where(self.model.user_id == principal.user_id)
            .options(selectinload(self.model.class_offering))
            .order_by(self.model.registration_date.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
