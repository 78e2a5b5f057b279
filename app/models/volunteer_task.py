"""
Pydantic models for volunteer tasks posted by coordinators.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any, Optional
from enum import Enum

DEFAULT_TASK_POINTS = 10


class TaskStatus(str, Enum):
    OPEN = "OPEN"
    ASSIGNED = "ASSIGNED"
    COMPLETED = "COMPLETED"


class VolunteerTaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1, max_length=300)
    urgent: bool = False
    points: int = Field(DEFAULT_TASK_POINTS, ge=1)

    class Config:
        extra = "ignore"

    @field_validator("urgent", mode="before")
    @classmethod
    def _urgent_defaults_to_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("points", mode="before")
    @classmethod
    def _points_default_when_unset(cls, value: Any) -> Any:
        # Clients send null or 0 for "use the default"
        return DEFAULT_TASK_POINTS if value in (None, 0, "") else value


class VolunteerTask(BaseModel):
    id: str = Field(..., description="Firestore document ID")
    title: str
    location: str
    urgent: bool = False
    points: int = DEFAULT_TASK_POINTS
    status: str = TaskStatus.OPEN.value
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        populate_by_name = True
