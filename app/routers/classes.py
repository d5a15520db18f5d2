from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.cache_decorators import cache_response, invalidate_cache_pattern
from ..core.database import get_db
from ..core.security import Principal, get_current_principal, require_admin
from ..models.enums import ClassType, TargetGender, TimeOfDay
from ..schemas.class_schemas import ClassCreate, ClassUpdate, ClassResponse, ClassFilter
from ..schemas.registration_schemas import RegistrationResponse
from ..services.class_service import ClassService
from ..services.registration_service import RegistrationService

router = APIRouter(prefix="/api/v1/classes", tags=["Classes"])

@router.get("/", response_model=List[ClassResponse])
async def list_classes(
    city: Optional[str] = Query(None),
    gender: Optional[TargetGender] = Query(None),
    min_age: Optional[int] = Query(None, ge=0),
    max_age: Optional[int] = Query(None, ge=0),
    max_cost: Optional[float] = Query(None, ge=0),
    type: Optional[ClassType] = Query(None),
    time_of_day: Optional[TimeOfDay] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Class catalog with filtering options"""
    filters = ClassFilter(
        city=city,
        gender=gender,
        min_age=min_age,
        max_age=max_age,
        max_cost=max_cost,
        type=type,
        time_of_day=time_of_day
    )
    rows = await ClassService(db).list_classes(filters)
    return [ClassResponse.from_model(class_obj, count) for class_obj, count in rows]

@router.get("/cities", response_model=List[str])
@cache_response("cities:distinct")
async def list_class_cities(db: AsyncSession = Depends(get_db)):
    """Distinct cities that currently have classes"""
    return await ClassService(db).list_cities()

@router.get("/cities/{city}", response_model=List[ClassResponse])
async def get_classes_by_city(city: str, db: AsyncSession = Depends(get_db)):
    rows = await ClassService(db).get_classes_by_city(city)
    return [ClassResponse.from_model(class_obj, count) for class_obj, count in rows]

@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(class_id: UUID, db: AsyncSession = Depends(get_db)):
    class_obj, count = await ClassService(db).get_class(class_id)
    return ClassResponse.from_model(class_obj, count)

@router.post("/{class_id}/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_for_class(
    class_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Register the current user for a class"""
    return await RegistrationService(db).create_registration(principal, class_id)

@router.post("/", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
@invalidate_cache_pattern("cities:distinct*")
async def create_class(
    class_in: ClassCreate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    class_obj = await ClassService(db).create_class(class_in)
    return ClassResponse.from_model(class_obj, 0)

@router.put("/{class_id}", response_model=ClassResponse)
@invalidate_cache_pattern("cities:distinct*")
async def update_class(
    class_id: UUID,
    class_in: ClassUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    class_obj, count = await ClassService(db).update_class(class_id, class_in)
    return ClassResponse.from_model(class_obj, count)

@router.delete("/{class_id}")
@invalidate_cache_pattern("cities:distinct*")
async def delete_class(
    class_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await ClassService(db).delete_class(class_id)
    return {"message": "Class removed successfully"}
