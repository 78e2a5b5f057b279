"""
Pydantic models for directory resources (hospitals, ambulances, blood banks, ...).

Responses use camelCase keys (verificationLevel, reportCount, ...) because the
map and dashboard clients read them that way; Python code uses snake_case.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional
from enum import Enum


class ResourceType(str, Enum):
    BLOOD = "BLOOD"
    OXYGEN = "OXYGEN"
    AMBULANCE = "AMBULANCE"
    SHELTER = "SHELTER"
    MEDICAL_CAMP = "MEDICAL_CAMP"
    HOSPITAL = "HOSPITAL"
    MEDICINE = "MEDICINE"
    POLICE = "POLICE"
    FIRE = "FIRE"
    DOCTOR = "DOCTOR"
    SPECIALIST = "SPECIALIST"
    PATHOLOGY = "PATHOLOGY"
    EQUIPMENT = "EQUIPMENT"
    BLOOD_BANK = "BLOOD_BANK"
    CLINIC = "CLINIC"
    PLASMA = "PLASMA"
    NURSE = "NURSE"
    DIALYSIS = "DIALYSIS"
    MEDICAL = "MEDICAL"


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    SCARCE = "SCARCE"
    CRITICAL = "CRITICAL"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    BUSY = "BUSY"
    LIMITED = "LIMITED"
    UNAVAILABLE = "UNAVAILABLE"
    ON_CALL = "ON_CALL"
    ON_LEAVE = "ON_LEAVE"


class VerificationLevel(str, Enum):
    """
    Trust tier attached to a resource.
    FLAGGED is reached automatically after repeated community reports.
    """
    UNVERIFIED = "UNVERIFIED"
    COMMUNITY = "COMMUNITY"
    VERIFIED = "VERIFIED"
    GOVERNMENT = "GOVERNMENT"
    FLAGGED = "FLAGGED"
    NGO = "NGO"
    OFFICIAL_PARTNER = "OFFICIAL_PARTNER"


def enum_token(value: Any) -> str:
    """Client spelling of an enum value ("blood bank", "Blood-Bank") -> member value ("BLOOD_BANK")."""
    return str(value).strip().upper().replace(" ", "_").replace("-", "_")


class ResourceLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None


class Resource(BaseModel):
    """
    Resource as returned by the API.

    distance / duration fields are runtime-only: they are attached when the
    caller supplies a location and are never persisted.
    """
    id: str = Field(..., description="Firestore document ID")
    type: str
    title: str
    description: Optional[str] = None
    location: ResourceLocation
    contact: Dict[str, Any] = Field(default_factory=dict, description="Phone and optional secondary channels")
    status: str = Field(default=AvailabilityStatus.AVAILABLE.value)
    verification_level: str = Field(default=VerificationLevel.UNVERIFIED.value, alias="verificationLevel")
    metadata: Optional[Dict[str, Any]] = Field(None, description="Type-specific data, e.g. metadata.hospital.beds")
    report_count: int = Field(default=0, alias="reportCount")
    upvote_count: int = Field(default=0, alias="upvoteCount")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")

    distance: Optional[float] = Field(None, description="Distance from caller in km")
    duration: Optional[int] = Field(None, description="Travel time in minutes, traffic-aware when available")
    duration_without_traffic: Optional[int] = Field(None, alias="durationWithoutTraffic")
    has_traffic_data: Optional[bool] = Field(None, alias="hasTrafficData")

    class Config:
        populate_by_name = True


class ResourceCreate(BaseModel):
    """Canonical record produced by payload normalization, ready to persist."""
    type: ResourceType
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    location: ResourceLocation
    contact: Dict[str, Any]
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    metadata: Optional[Dict[str, Any]] = None


class ResourceUpdate(BaseModel):
    """Partial update for a resource (hospital admins refreshing bed counts, etc.)."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[AvailabilityStatus] = None
    contact: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    address: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None

    class Config:
        extra = "ignore"


class ResourceFilters(BaseModel):
    type: Optional[str] = None
    status: Optional[str] = None
    query: Optional[str] = None
    metadata_filter: Dict[str, Any] = Field(default_factory=dict, description="Dotted key-path -> value or 'check_positive'")
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_km: Optional[float] = None


class ReportOutcome(BaseModel):
    success: bool
    verification_level: Optional[str] = None
    report_count: Optional[int] = None


class ReportResetRequest(BaseModel):
    verification_level: VerificationLevel = Field(default=VerificationLevel.UNVERIFIED, alias="verificationLevel")

    class Config:
        populate_by_name = True
