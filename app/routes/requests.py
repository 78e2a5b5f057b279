"""
Help request endpoints - community requests and their lifecycle timeline.
"""

import logging
from typing import List

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool

from app.core.errors import APIError, read_model_body
from app.models.help_request import HelpRequest, HelpRequestCreate, HelpRequestUpdate
from app.services.request_service import RequestNotFoundError, get_request_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["Requests"])


@router.get("", response_model=List[HelpRequest])
def list_requests():
    return get_request_service().list_requests()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=HelpRequest)
async def create_request(request: Request):
    """
    Create a help request.

    Matching resources are suggested immediately and recorded on the timeline.
    """
    payload = await read_model_body(request, HelpRequestCreate)
    try:
        return await run_in_threadpool(get_request_service().create_request, payload)
    except Exception as e:
        logger.error(f"POST /requests - Request creation failed: {e}", exc_info=True)
        raise APIError(status.HTTP_400_BAD_REQUEST, "Failed to create request", details=str(e))


@router.get("/{request_id}", response_model=HelpRequest)
def get_request(request_id: str):
    try:
        return get_request_service().get_request(request_id)
    except RequestNotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Request not found")


@router.put("/{request_id}", response_model=HelpRequest)
async def update_request(request_id: str, request: Request):
    updates = await read_model_body(request, HelpRequestUpdate)
    try:
        return await run_in_threadpool(get_request_service().update_request, request_id, updates)
    except RequestNotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Request not found")


@router.delete("/{request_id}")
def delete_request(request_id: str):
    if not get_request_service().delete_request(request_id):
        raise APIError(status.HTTP_404_NOT_FOUND, "Request not found")
    return {"success": True}
