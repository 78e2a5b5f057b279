"""
Pydantic models for community alerts (road closures, weather, outbreaks, ...).
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from enum import Enum


class AlertSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class AlertType(str, Enum):
    TRAFFIC = "TRAFFIC"
    WEATHER = "WEATHER"
    MEDICAL = "MEDICAL"
    SECURITY = "SECURITY"


class AlertCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    district: str = Field(..., min_length=1, max_length=100)
    severity: AlertSeverity = AlertSeverity.INFO
    type: AlertType

    class Config:
        extra = "ignore"
        json_schema_extra = {
            "example": {
                "title": "Waterlogging on Ring Road",
                "message": "Avoid the Dhaula Kuan underpass; ambulances are being diverted.",
                "district": "South West Delhi",
                "severity": "WARNING",
                "type": "TRAFFIC",
            }
        }


class Alert(BaseModel):
    id: str = Field(..., description="Firestore document ID")
    title: str
    message: str
    district: str
    severity: str
    type: str
    created_at: datetime = Field(..., alias="createdAt")
    expires_at: Optional[datetime] = Field(None, alias="expiresAt")

    class Config:
        populate_by_name = True
