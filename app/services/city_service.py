# app/services/city_service.py
from typing import List
from uuid import UUID
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from .base_service import BaseService
from ..core.exceptions import ConflictError, NotFoundError
from ..models.city import City
from ..schemas.city_schemas import CityCreate, CityUpdate

logger = logging.getLogger(__name__)


class CityService(BaseService[City]):
    resource_name = "City"

    def __init__(self, db: AsyncSession):
        super().__init__(City, db)

    async def _ensure_name_free(self, name: str, exclude_id: UUID = None):
        stmt = select(self.model.id).where(func.lower(self.model.name) == name.strip().lower())
        if exclude_id:
            stmt = stmt.where(self.model.id != exclude_id)
        if await self.db.scalar(stmt):
            raise ConflictError(f"City '{name}' already exists")

    async def create_city(self, city_in: CityCreate) -> City:
        await self._ensure_name_free(city_in.name)
        try:
            city = await self.create({"name": city_in.name.strip(), "image_url": city_in.image_url})
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(f"City '{city_in.name}' already exists")
        logger.info(f"City {city.id} '{city.name}' created")
        return city

    async def list_cities(self) -> List[City]:
        return await self.get_multi(limit=1000, order_by="name")

    async def update_city(self, city_id: UUID, city_in: CityUpdate) -> City:
        values = city_in.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in values:
            values["name"] = values["name"].strip()
            await self._ensure_name_free(values["name"], exclude_id=city_id)
        city = await self.update(city_id, values)
        if not city:
            raise NotFoundError("City", city_id)
        return city

    async def delete_city(self, city_id: UUID) -> None:
        if not await self.hard_delete(city_id):
            raise NotFoundError("City", city_id)
        logger.info(f"City {city_id} deleted")
