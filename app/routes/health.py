"""
Health endpoints for deployment probes and on-call checks.

/health answers without touching the database; /health/db proves the
Firestore (or mock) client can list collections.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, status

from app.config.firebase import get_db
from app.core.errors import APIError
from app.core.settings import settings
from app.services.distance_matrix import get_distance_matrix_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check():
    distance_service = get_distance_matrix_service()
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "distance_provider": distance_service.provider.name if distance_service.provider else "haversine",
        "distance_cache_entries": len(distance_service.cache),
        "timestamp": _now(),
    }


@router.get("/db")
def database_health():
    """503 when the database client cannot be reached."""
    try:
        collections = [collection.id for collection in get_db().collections()]
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        raise APIError(status.HTTP_503_SERVICE_UNAVAILABLE, "Database connection failed", details=str(e))

    return {
        "status": "healthy",
        "database": "mock" if settings.USE_MOCK_DB else "firestore",
        "connected": True,
        "collections": sorted(collections),
        "timestamp": _now(),
    }
