"""
Dashboard statistics endpoint.
"""

from fastapi import APIRouter

from app.services.stats_service import get_dashboard_stats

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("")
def dashboard_stats():
    return get_dashboard_stats()
