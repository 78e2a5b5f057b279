"""
Volunteer board endpoints.
"""

import logging
from typing import List

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool

from app.core.errors import APIError, read_model_body
from app.models.volunteer_task import VolunteerTask, VolunteerTaskCreate
from app.services.volunteer_task_service import get_volunteer_task_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/volunteer", tags=["Volunteer"])


@router.get("/tasks", response_model=List[VolunteerTask])
def list_open_tasks():
    """OPEN tasks only, newest first."""
    try:
        return get_volunteer_task_service().list_open_tasks()
    except Exception as e:
        logger.error(f"GET /volunteer/tasks - Failed to fetch tasks: {e}", exc_info=True)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch tasks")


@router.post("/tasks", response_model=VolunteerTask)
async def create_task(request: Request):
    payload = await read_model_body(request, VolunteerTaskCreate)
    try:
        return await run_in_threadpool(get_volunteer_task_service().create_task, payload)
    except Exception as e:
        logger.error(f"POST /volunteer/tasks - Task creation failed: {e}", exc_info=True)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create task")
