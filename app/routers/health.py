"""Health check endpoints."""
from fastapi import APIRouter

from ..core.config import settings
from ..core.database import health_check_db, get_pool_status

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("/")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": "Stand Strong API",
        "version": settings.app_version,
        "environment": settings.environment
    }

@router.get("/db-health")
async def database_health():
    """Database health check with pool status"""
    healthy = await health_check_db()
    return {
        "status": "healthy" if healthy else "unhealthy",
        "pool": await get_pool_status()
    }
