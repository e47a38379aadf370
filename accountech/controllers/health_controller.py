"""
Health Controller
Handles health check API endpoints
"""

from fastapi import APIRouter

from ..services.health_service import health_service

router = APIRouter()


@router.get("")
async def health_check():
    """Complete health check"""
    return await health_service.check_all()


@router.get("/database")
async def database_health():
    """Database health check"""
    return await health_service.check_database()
