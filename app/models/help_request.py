"""
Pydantic models for community help requests and their lifecycle timeline.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional
from enum import Enum

from app.models.resource import ResourceType


class UrgencyLevel(str, Enum):
    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RequestStatus(str, Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    ESCALATED = "ESCALATED"
    CANCELLED = "CANCELLED"
    FULFILLED = "FULFILLED"
    EXPIRED = "EXPIRED"


class ActivityType(str, Enum):
    CREATED = "CREATED"
    STATUS_CHANGE = "STATUS_CHANGE"
    NOTE_ADDED = "NOTE_ADDED"
    MATCH_FOUND = "MATCH_FOUND"
    ALERT_SENT = "ALERT_SENT"


class Actor(str, Enum):
    USER = "USER"
    SYSTEM = "SYSTEM"
    ADMIN = "ADMIN"


class ActivityLogItem(BaseModel):
    """One entry of a request's append-only timeline."""
    id: str
    type: ActivityType
    timestamp: str = Field(..., description="ISO-8601 timestamp")
    message: str
    actor: Actor


class MatchSuggestion(BaseModel):
    resource_id: str = Field(..., alias="resourceId")
    resource_name: str = Field(..., alias="resourceName")
    type: str
    distance: Optional[float] = Field(None, description="km, when the request carries coordinates")
    match_score: int = Field(..., ge=0, le=100, alias="matchScore")
    verification_level: str = Field(..., alias="verificationLevel")
    contact: Optional[str] = None

    class Config:
        populate_by_name = True


class HelpRequestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    type: ResourceType
    contact: str = Field(..., min_length=1, max_length=100)
    location: str = Field(..., min_length=1, max_length=300, description="Free-text location")
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    urgency: UrgencyLevel = UrgencyLevel.MODERATE

    class Config:
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "title": "Urgent Oxygen Needed",
                "description": "Patient SPO2 dropping below 85, need B-type cylinder immediately.",
                "type": "OXYGEN",
                "contact": "9998887776",
                "location": "Sector 4, Dwarka, Delhi",
                "urgency": "CRITICAL",
            }
        }


class HelpRequestUpdate(BaseModel):
    status: Optional[RequestStatus] = None
    admin_notes: Optional[str] = Field(None, max_length=1000, alias="adminNotes")
    urgency: Optional[UrgencyLevel] = None
    response_count: Optional[int] = Field(None, ge=0, alias="responseCount")

    class Config:
        populate_by_name = True
        extra = "ignore"


class HelpRequest(BaseModel):
    id: str = Field(..., description="Firestore document ID")
    title: str
    description: str
    type: str
    contact: str
    location: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    urgency: str
    status: str
    created_at: datetime = Field(..., alias="createdAt")
    response_count: int = Field(default=0, alias="responseCount")
    timeline: List[ActivityLogItem] = Field(default_factory=list)
    matches: List[MatchSuggestion] = Field(default_factory=list)
    admin_notes: Optional[str] = Field(None, alias="adminNotes")

    class Config:
        populate_by_name = True
