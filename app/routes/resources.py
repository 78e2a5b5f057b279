"""
Resource endpoints - directory search, distance enrichment and community moderation.
"""

import logging
import traceback
from typing import List, Optional

from fastapi import APIRouter, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.core.errors import APIError
from app.core.settings import settings
from app.models.resource import Resource, ResourceFilters, ResourceType, ResourceUpdate, enum_token
from app.services.distance_matrix import LatLng
from app.services.proximity_service import enrich_with_travel_times
from app.services.resource_payload import PayloadError, normalize_resource_payload
from app.services.resource_service import CHECK_POSITIVE, ResourceNotFoundError, get_resource_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resources", tags=["Resources"])

# component query value -> metadata flag that must be true
COMPONENT_FLAGS = {
    "PLASMA": "bloodStock.plasmaAvailable",
    "PLATELETS": "bloodStock.apheresisAvailable",
}


def build_metadata_filter(blood_group: Optional[str], component: Optional[str], oxygen_type: Optional[str]) -> dict:
    metadata_filter = {}
    if blood_group:
        # An unencoded '+' arrives as a space ("A " for "A+")
        group = blood_group.replace(" ", "+").strip().upper()
        metadata_filter[f"bloodStock.groups.{group}"] = CHECK_POSITIVE
    if component and component.upper() in COMPONENT_FLAGS:
        metadata_filter[COMPONENT_FLAGS[component.upper()]] = True
    if oxygen_type:
        metadata_filter["oxygenType"] = oxygen_type
    return metadata_filter


@router.get("", response_model=List[Resource], response_model_exclude_none=True)
def list_resources(
    type: Optional[str] = Query(None, description="Resource type, e.g. HOSPITAL or BLOOD_BANK"),
    q: Optional[str] = Query(None, description="Free-text search (ignores other filters by default)"),
    status_filter: Optional[str] = Query(None, alias="status", description="Availability status"),
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Caller latitude"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="Caller longitude"),
    radius: Optional[float] = Query(None, gt=0, description="Search radius in km (requires lat/lng)"),
    blood_group: Optional[str] = Query(None, alias="bloodGroup", description="e.g. A+, O-"),
    component: Optional[str] = Query(None, description="PLASMA or PLATELETS"),
    oxygen_type: Optional[str] = Query(None, alias="oxygenType", description="CYLINDER, CONCENTRATOR or REFILL"),
):
    """
    Search the resource directory.

    When lat/lng are given every result carries distance, duration
    (traffic-aware when available), durationWithoutTraffic and hasTrafficData,
    and the list is sorted by duration.
    """
    query_wins = bool(q and q.strip()) and settings.QUERY_OVERRIDES_FILTERS
    if type and not query_wins:
        try:
            ResourceType(enum_token(type))
        except ValueError:
            raise APIError(status.HTTP_400_BAD_REQUEST, f"Invalid resource type: {type}")

    filters = ResourceFilters(
        type=type,
        status=status_filter,
        query=q,
        metadata_filter=build_metadata_filter(blood_group, component, oxygen_type),
        lat=lat,
        lng=lng,
        radius_km=radius,
    )

    try:
        resources = get_resource_service().list_resources(filters)
    except Exception as e:
        logger.error(f"GET /resources - Failed to fetch resources: {e}", exc_info=True)
        content = {"error": "Failed to fetch resources", "details": str(e)}
        if not settings.is_production:
            content["stack"] = traceback.format_exc()
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)

    if lat is not None and lng is not None:
        try:
            resources = enrich_with_travel_times(resources, LatLng(lat=lat, lng=lng))
        except Exception as e:
            # Travel times are a nicety; the listing itself must still be served
            logger.error(f"GET /resources - Distance enrichment failed: {e}", exc_info=True)

    return resources


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Resource, response_model_exclude_none=True)
async def create_resource(request: Request):
    """
    Add a resource to the directory.

    Accepts the historical payload shapes (type/resourceType, title/name,
    lat/latitude/location.lat, contact/phone/contactNumber, ...).
    """
    try:
        body = await request.json()
    except ValueError:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Invalid JSON body")

    try:
        resource = normalize_resource_payload(body)
    except PayloadError as e:
        logger.info(f"POST /resources - Rejected payload: {e.message}")
        raise APIError(status.HTTP_400_BAD_REQUEST, e.message)

    try:
        return await run_in_threadpool(get_resource_service().create_resource, resource)
    except Exception as e:
        logger.error(f"POST /resources - Resource creation failed: {e}", exc_info=True)
        raise APIError(status.HTTP_400_BAD_REQUEST, "Failed to create resource", details=str(e))


@router.get("/{resource_id}", response_model=Resource, response_model_exclude_none=True)
def get_resource(resource_id: str):
    try:
        return get_resource_service().get_resource(resource_id)
    except ResourceNotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Resource not found")


@router.patch("/{resource_id}", response_model=Resource, response_model_exclude_none=True)
def update_resource(resource_id: str, updates: ResourceUpdate):
    try:
        return get_resource_service().update_resource(resource_id, updates)
    except ResourceNotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Resource not found")


@router.delete("/{resource_id}")
def delete_resource(resource_id: str):
    if not get_resource_service().delete_resource(resource_id):
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete resource")
    return {"success": True}


@router.post("/{resource_id}/report")
def report_resource(resource_id: str):
    """Flag a resource as inaccurate. Enough reports mark it FLAGGED."""
    outcome = get_resource_service().report_resource(resource_id)
    if not outcome.success:
        raise APIError(status.HTTP_404_NOT_FOUND, "Resource not found")

    return {
        "message": "Report submitted successfully",
        "status": outcome.verification_level,
        "reportCount": outcome.report_count,
    }


@router.post("/{resource_id}/upvote", response_model=Resource, response_model_exclude_none=True)
def upvote_resource(resource_id: str):
    try:
        return get_resource_service().upvote_resource(resource_id)
    except ResourceNotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Resource not found")
