# app/services/class_service.py
from typing import List, Optional, Tuple
from uuid import UUID
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from .base_service import BaseService
from ..core.exceptions import NotFoundError
from ..models.class_offering import ClassOffering
from ..models.enums import TargetGender, TimeOfDay, ACTIVE_REGISTRATION_STATUSES
from ..models.registration import Registration
from ..schemas.class_schemas import ClassCreate, ClassUpdate, ClassFilter

logger = logging.getLogger(__name__)

ClassWithCount = Tuple[ClassOffering, int]


def start_hour(start_time: str) -> Optional[int]:
    try:
        return int(str(start_time).split(":")[0])
    except (TypeError, ValueError):
        return None


def in_time_bucket(hour: int, bucket: TimeOfDay) -> bool:
    if bucket == TimeOfDay.MORNING:
        return 6 <= hour < 12
    if bucket == TimeOfDay.AFTERNOON:
        return 12 <= hour < 17
    # evening wraps past midnight
    return hour >= 17 or hour < 6


def matches_time_of_day(schedule: list, bucket: TimeOfDay) -> bool:
    for entry in schedule or []:
        hour = start_hour(entry.get("start_time"))
        if hour is not None and in_time_bucket(hour, bucket):
            return True
    return False


def _column_values(data: dict) -> dict:
    """Flatten request fields onto the table columns"""
    values = dict(data)
    if "instructor" in values:
        instructor = values.pop("instructor")
        if instructor is not None:
            values["instructor_name"] = instructor["name"]
            values["instructor_bio"] = instructor.get("bio")
    if "target_age_range" in values:
        age_range = values.pop("target_age_range")
        if age_range is not None:
            values["age_min"] = age_range["min"]
            values["age_max"] = age_range.get("max")
    return values


class ClassService(BaseService[ClassOffering]):
    resource_name = "Class"

    def __init__(self, db: AsyncSession):
        super().__init__(ClassOffering, db)

    def _enrollment_counts(self):
        """Active registrations per class, for an outer join"""
        return (
            select(Registration.class_id, func.count(Registration.id).label("enrolled_count"))
            .where(Registration.status.in_(ACTIVE_REGISTRATION_STATUSES))
            .group_by(Registration.class_id)
            .subquery()
        )

    def _select_with_counts(self):
        counts = self._enrollment_counts()
        return (
            select(self.model, func.coalesce(counts.c.enrolled_count, 0))
            .outerjoin(counts, counts.c.class_id == self.model.id)
        )

    async def create_class(self, class_in: ClassCreate) -> ClassOffering:
        class_obj = await self.create(_column_values(class_in.model_dump(mode="json")))
        logger.info(f"Class {class_obj.id} '{class_obj.title}' created in {class_obj.city}")
        return class_obj

    async def get_class(self, class_id: UUID) -> ClassWithCount:
        stmt = self._select_with_counts().where(self.model.id == class_id)
        result = await self.db.execute(stmt)
        row = result.first()
        if row is None:
            raise NotFoundError("Class", class_id)
        return row[0], row[1]

    async def update_class(self, class_id: UUID, class_in: ClassUpdate) -> ClassWithCount:
        """Partial update; only fields present in the request change"""
        values = _column_values(class_in.model_dump(mode="json", exclude_unset=True))
        class_obj = await self.update(class_id, values)
        if not class_obj:
            raise NotFoundError("Class", class_id)
        logger.info(f"Class {class_id} updated: {sorted(values)}")
        return await self.get_class(class_id)

    async def delete_class(self, class_id: UUID) -> None:
        if not await self.hard_delete(class_id):
            raise NotFoundError("Class", class_id)
        logger.info(f"Class {class_id} deleted")

    async def list_classes(self, filters: Optional[ClassFilter] = None) -> List[ClassWithCount]:
        """Filtered class listing with enrollment counts, newest first"""
        filters = filters or ClassFilter()
        stmt = self._select_with_counts()

        if filters.city:
            stmt = stmt.where(func.lower(self.model.city) == filters.city.strip().lower())
        if filters.gender:
            stmt = stmt.where(self.model.target_gender.in_([filters.gender, TargetGender.ANY]))
        if filters.min_age is not None:
            stmt = stmt.where(or_(self.model.age_max.is_(None), self.model.age_max >= filters.min_age))
        if filters.max_age is not None:
            stmt = stmt.where(self.model.age_min <= filters.max_age)
        if filters.max_cost is not None:
            stmt = stmt.where(self.model.cost <= filters.max_cost)
        if filters.type:
            stmt = stmt.where(self.model.type == filters.type)

        stmt = stmt.order_by(self.model.created_at.desc())
        result = await self.db.execute(stmt)
        rows = [(row[0], row[1]) for row in result.all()]

        # Schedules are JSON, so the time-of-day bucket is applied in memory
        if filters.time_of_day:
            rows = [row for row in rows if matches_time_of_day(row[0].schedule, filters.time_of_day)]

        return rows

    async def list_cities(self) -> List[str]:
        """Distinct cities that have classes"""
        stmt = select(self.model.city).distinct().order_by(self.model.city)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_classes_by_city(self, city: str) -> List[ClassWithCount]:
        return await self.list_classes(ClassFilter(city=city))
