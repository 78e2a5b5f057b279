"""
Dashboard statistics derived from the resource directory and help requests.
"""

from typing import Dict

from app.models.help_request import RequestStatus
from app.models.resource import AvailabilityStatus, ResourceType
from app.services.request_service import get_request_service
from app.services.resource_service import get_resource_service

RECENT_INCIDENT_LIMIT = 10

# Resources counted as deployed / engaged units on the dashboard
ACTIVE_UNIT_STATUSES = {AvailabilityStatus.ON_CALL.value, AvailabilityStatus.LIMITED.value}


def _hospital_beds(metadata) -> int:
    hospital = metadata.get("hospital") if isinstance(metadata, dict) else None
    beds = hospital.get("beds") if isinstance(hospital, dict) else None
    if not isinstance(beds, dict):
        return 0

    total = 0
    for key in ("general", "icu"):
        value = beds.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            total += int(value)
    return total


def get_dashboard_stats() -> Dict:
    resources = get_resource_service().list_resources()
    requests = get_request_service().list_requests()

    return {
        "activeIncidents": sum(1 for r in requests if r.status == RequestStatus.OPEN.value),
        "activeUnits": sum(1 for r in resources if r.status in ACTIVE_UNIT_STATUSES),
        "totalResources": len(resources),
        "availableBeds": sum(_hospital_beds(r.metadata) for r in resources if r.type == ResourceType.HOSPITAL.value),
        "recentIncidents": [
            {
                "id": r.id,
                "type": r.type,
                "status": r.status,
                "timestamp": r.created_at.isoformat(),
                "location": r.location or "Unknown",
            }
            for r in requests[:RECENT_INCIDENT_LIMIT]
        ],
    }
