"""
Community alert endpoints.
"""

import logging
from typing import List

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool

from app.core.errors import APIError, read_model_body
from app.models.alert import Alert, AlertCreate
from app.services.alert_service import get_alert_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("", response_model=List[Alert])
def list_alerts():
    try:
        return get_alert_service().list_alerts()
    except Exception as e:
        logger.error(f"GET /alerts - Failed to fetch alerts: {e}", exc_info=True)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch alerts")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Alert)
async def create_alert(request: Request):
    """Post an alert; it expires ALERT_TTL_HOURS (default 24) after creation."""
    payload = await read_model_body(request, AlertCreate)
    try:
        return await run_in_threadpool(get_alert_service().create_alert, payload)
    except Exception as e:
        logger.error(f"POST /alerts - Alert creation failed: {e}", exc_info=True)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create alert")
