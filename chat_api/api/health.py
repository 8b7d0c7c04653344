from datetime import datetime

from fastapi import APIRouter, HTTPException

from chat_api.core.config import settings
from chat_api.database import check_database_health

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Application health check endpoint"""
    db_health = await check_database_health()

    overall_status = "healthy" if db_health["overall"] else "unhealthy"

    return {
        "status": overall_status,
        "timestamp": datetime.utcnow(),
        "databases": {
            "mongodb": "connected" if db_health["mongodb"] else "disconnected"
        },
        "service": settings.app_name,
        "version": settings.version
    }


@router.get("/health/ready")
async def readiness_check():
    """Kubernetes readiness probe endpoint"""
    db_health = await check_database_health()

    if not db_health["overall"]:
        raise HTTPException(
            status_code=503,
            detail="Service not ready - database connection failed"
        )

    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes liveness probe endpoint"""
    return {"status": "alive", "timestamp": datetime.utcnow()}
