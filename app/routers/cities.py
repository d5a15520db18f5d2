from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache_decorators import cache_response, invalidate_cache_pattern
from ..core.database import get_db
from ..core.security import Principal, require_admin
from ..schemas.city_schemas import CityCreate, CityUpdate, CityResponse
from ..services.city_service import CityService

router = APIRouter(prefix="/api/v1/cities", tags=["Cities"])

@router.get("/", response_model=List[CityResponse])
@cache_response("cities")
async def list_cities(db: AsyncSession = Depends(get_db)):
    """All cities ordered by name"""
    cities = await CityService(db).list_cities()
    return [CityResponse.model_validate(city).model_dump(mode="json") for city in cities]

@router.post("/", response_model=CityResponse, status_code=status.HTTP_201_CREATED)
@invalidate_cache_pattern("cities*")
async def create_city(
    city_in: CityCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await CityService(db).create_city(city_in)

@router.put("/{city_id}", response_model=CityResponse)
@invalidate_cache_pattern("cities*")
async def update_city(
    city_id: UUID,
    city_in: CityUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await CityService(db).update_city(city_id, city_in)

@router.delete("/{city_id}")
@invalidate_cache_pattern("cities*")
async def delete_city(
    city_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await CityService(db).delete_city(city_id)
    return {"message": "City deleted successfully"}
