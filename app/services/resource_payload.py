"""
Normalization of resource write payloads.

Several generations of clients post resources with different field names
(type/resourceType, title/name, lat/latitude/location.lat,
contact/phone/contactNumber, ...). ResourcePayload declares every accepted
alias in one place; normalize_resource_payload() maps it onto the single
canonical ResourceCreate record or raises PayloadError naming the first
field that is missing or invalid.
"""

import math
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from app.models.resource import AvailabilityStatus, ResourceCreate, ResourceLocation, ResourceType, enum_token


class PayloadError(ValueError):
    """Client input error on a resource payload; maps to HTTP 400."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class LocationPayload(BaseModel):
    lat: Any = Field(None, validation_alias=AliasChoices("lat", "latitude"))
    lng: Any = Field(None, validation_alias=AliasChoices("lng", "longitude", "lon"))
    address: Any = None
    city: Any = None
    district: Any = None

    class Config:
        extra = "ignore"


class ResourcePayload(BaseModel):
    """Every accepted input shape for POST /resources."""
    type: Any = Field(None, validation_alias=AliasChoices("type", "resourceType"))
    title: Any = Field(None, validation_alias=AliasChoices("title", "name"))
    description: Any = None
    lat: Any = Field(None, validation_alias=AliasChoices("lat", "latitude"))
    lng: Any = Field(None, validation_alias=AliasChoices("lng", "longitude", "lon"))
    location: Optional[LocationPayload] = None
    address: Any = None
    city: Any = None
    district: Any = None
    contact: Any = Field(None, validation_alias=AliasChoices("contact", "phone", "contactNumber"))
    status: Any = None
    metadata: Any = None

    class Config:
        extra = "ignore"

    @field_validator("location", mode="before")
    @classmethod
    def _location_must_be_object(cls, value: Any) -> Any:
        # Free-text locations ("Sector 4, Dwarka") carry no coordinates
        return value if isinstance(value, dict) else None


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coordinate(value: Any, lower: float, upper: float) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or not lower <= number <= upper:
        return None
    return number


def _contact(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, dict):
        return value or None
    if isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        phone = str(value).strip()
        return {"phone": phone} if phone else None
    return None


def normalize_resource_payload(body: Any) -> ResourceCreate:
    """
    Map a loosely-shaped JSON body onto a canonical ResourceCreate.

    Required, checked in this order: type, title, lat, lng, contact.
    Type and status are upper-cased; a bare contact string becomes {"phone": ...}.
    """
    if not isinstance(body, dict):
        raise PayloadError("body", "Request body must be a JSON object")

    try:
        payload = ResourcePayload.model_validate(body)
    except ValidationError as e:
        raise PayloadError("body", f"Invalid resource payload: {e.errors()[0].get('msg')}")

    location = payload.location or LocationPayload()

    raw_type = _text(payload.type)
    if raw_type is None:
        raise PayloadError("type", "Missing required field: type")
    try:
        resource_type = ResourceType(enum_token(raw_type))
    except ValueError:
        raise PayloadError("type", f"Invalid value for field: type ({raw_type})")

    title = _text(payload.title)
    if title is None:
        raise PayloadError("title", "Missing required field: title")

    lat = _coordinate(_first_present(payload.lat, location.lat), -90, 90)
    if lat is None:
        raise PayloadError("lat", "Invalid or missing required field: lat")

    lng = _coordinate(_first_present(payload.lng, location.lng), -180, 180)
    if lng is None:
        raise PayloadError("lng", "Invalid or missing required field: lng")

    contact = _contact(payload.contact)
    if contact is None:
        raise PayloadError("contact", "Missing required field: contact")

    status = AvailabilityStatus.AVAILABLE
    raw_status = _text(payload.status)
    if raw_status is not None:
        try:
            status = AvailabilityStatus(enum_token(raw_status))
        except ValueError:
            raise PayloadError("status", f"Invalid value for field: status ({raw_status})")

    if payload.metadata is not None and not isinstance(payload.metadata, dict):
        raise PayloadError("metadata", "Invalid value for field: metadata (expected an object)")

    try:
        return ResourceCreate(
            type=resource_type,
            title=title,
            description=_text(payload.description),
            location=ResourceLocation(
                lat=lat,
                lng=lng,
                address=_text(_first_present(payload.address, location.address)),
                city=_text(_first_present(payload.city, location.city)),
                district=_text(_first_present(payload.district, location.district)),
            ),
            contact=contact,
            status=status,
            metadata=payload.metadata,
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        raise PayloadError(field, f"Invalid value for field: {field} ({error.get('msg')})")
