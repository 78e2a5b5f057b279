"""
Admin endpoints - moderation of community-reported resources.

Reports move a resource to FLAGGED automatically and nothing undoes that on
its own. Clearing the flag is an explicit, logged admin action.
"""

from typing import Optional

from fastapi import APIRouter, status

from app.core.errors import APIError
from app.models.resource import ReportResetRequest, Resource
from app.services.resource_service import ResourceNotFoundError, get_resource_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/resources/{resource_id}/reset-reports", response_model=Resource, response_model_exclude_none=True)
def reset_resource_reports(resource_id: str, reset: Optional[ReportResetRequest] = None):
    """
    Zero a resource's report count and set its trust tier explicitly
    (UNVERIFIED unless another level is given).
    """
    reset = reset or ReportResetRequest()
    try:
        return get_resource_service().reset_reports(resource_id, reset.verification_level)
    except ResourceNotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Resource not found")
