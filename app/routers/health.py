import time
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from app.core.config import settings
from app.core.database import ping_database
from app.managers.redis_manager import redis_manager

router = APIRouter()

STARTED_AT = time.monotonic()


@router.get("")
async def health_check():
    db_connected = await ping_database()
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "dbState": "connected" if db_connected else "disconnected",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }


@router.get("/redis")
async def redis_health():
    if not await redis_manager.ping():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Redis connection failed"
        )
    return {
        "status": "healthy",
        "service": "redis",
        "connected": True
    }


@router.get("/database")
async def database_health():
    if not await ping_database():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database connection failed"
        )
    return {
        "status": "healthy",
        "service": "postgresql",
        "connected": True
    }
