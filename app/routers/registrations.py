from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.security import Principal, get_current_principal, require_admin
from ..schemas.registration_schemas import (
    RegistrationCreate, RegistrationUpdate, RegistrationResponse,
    ClassRegistrationResponse, MyRegistrationResponse, CancelRegistrationResponse
)
from ..services.registration_service import RegistrationService

router = APIRouter(prefix="/api/v1/registrations", tags=["Registrations"])

@router.post("/", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def create_registration(
    registration_in: RegistrationCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    """Register the current user for a class"""
    return await RegistrationService(db).create_registration(principal, registration_in.class_id)

@router.get("/my", response_model=List[MyRegistrationResponse])
async def get_my_registrations(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    return await RegistrationService(db).get_my_registrations(principal)

@router.get("/class/{class_id}", response_model=List[ClassRegistrationResponse])
async def get_class_registrations(
    class_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await RegistrationService(db).get_class_registrations(class_id)

@router.put("/{registration_id}/cancel", response_model=CancelRegistrationResponse)
async def cancel_my_registration(
    registration_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    registration = await RegistrationService(db).cancel_my_registration(registration_id, principal)
    return {"message": "Registration cancelled", "registration": registration}

@router.put("/{registration_id}", response_model=RegistrationResponse)
async def update_registration(
    registration_id: UUID,
    registration_in: RegistrationUpdate,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await RegistrationService(db).update_registration(
        registration_id,
        status=registration_in.status,
        notes=registration_in.notes
    )

@router.delete("/{registration_id}")
async def delete_registration(
    registration_id: UUID,
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await RegistrationService(db).delete_registration(registration_id)
    return {"message": "Registration deleted successfully"}
