from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.security import Principal, get_current_principal, require_admin
from ..models.enums import Gender, UserRole
from ..schemas.user_schemas import UserCreate, UserUpdate, UserResponse
from ..services.user_service import UserService

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create a student account"""
    return await UserService(db).register_user(user_in)

@router.get("/profile", response_model=UserResponse)
async def get_profile(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    return await UserService(db).get_profile(principal)

@router.put("/profile", response_model=UserResponse)
async def update_profile(
    user_in: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db)
):
    return await UserService(db).update_profile(principal, user_in)

@router.get("/", response_model=List[UserResponse])
async def list_users(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All users, newest first (admin)"""
    return await UserService(db).list_users()

@router.get("/admin", response_model=List[UserResponse])
async def filter_users(
    role: Optional[UserRole] = Query(None),
    gender: Optional[Gender] = Query(None),
    city_id: Optional[UUID] = Query(None),
    min_age: Optional[int] = Query(None, ge=0),
    max_age: Optional[int] = Query(None, ge=0),
    search: Optional[str] = Query(None, max_length=100),
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Filtered user search (admin)"""
    return await UserService(db).filter_users(
        role=role,
        gender=gender,
        city_id=city_id,
        min_age=min_age,
        max_age=max_age,
        search=search
    )

@router.get("/export")
async def export_students(
    principal: Principal = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Download all students as CSV (admin)"""
    content = await UserService(db).export_students_csv()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=students.csv"}
    )
