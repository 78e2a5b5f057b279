"""
Help request service - community requests for blood, oxygen, beds, transport.

Each request carries an append-only timeline (CREATED, MATCH_FOUND,
STATUS_CHANGE, NOTE_ADDED). Entries are only ever appended; updates never
rewrite earlier history.

Match suggestions are computed from a separate read before the request is
written; the two steps are not transactional.
"""

from app.config.firebase import get_db
from app.models.help_request import (
    ActivityLogItem,
    ActivityType,
    Actor,
    HelpRequest,
    HelpRequestCreate,
    HelpRequestUpdate,
    MatchSuggestion,
    RequestStatus,
)
from app.models.resource import ResourceType, VerificationLevel
from app.services.resource_service import get_resource_service
from app.utils.geo import haversine_km
from datetime import datetime, timezone
from firebase_admin import firestore
from typing import Dict, List, Optional
import logging
import uuid

logger = logging.getLogger(__name__)

REQUESTS_COLLECTION = "requests"

MATCH_CANDIDATE_LIMIT = 10
MAX_MATCHES = 3
VERIFIED_MATCH_SCORE = 95
DEFAULT_MATCH_SCORE = 80


class RequestNotFoundError(LookupError):
    def __init__(self, request_id: str):
        super().__init__(f"Request not found: {request_id}")
        self.request_id = request_id


def create_activity(activity_type: ActivityType, message: str, actor: Actor) -> Dict:
    return ActivityLogItem(
        id=uuid.uuid4().hex[:9],
        type=activity_type,
        timestamp=datetime.now(timezone.utc).isoformat(),
        message=message,
        actor=actor,
    ).model_dump(mode="json")


def document_to_request(doc_id: str, data: Dict) -> HelpRequest:
    return HelpRequest(
        id=doc_id,
        title=data["title"],
        description=data["description"],
        type=data["type"],
        contact=data["contact"],
        location=data["location"],
        lat=data.get("lat"),
        lng=data.get("lng"),
        urgency=data["urgency"],
        status=data["status"],
        created_at=data["created_at"],
        response_count=data.get("response_count", 0),
        timeline=data.get("timeline", []),
        matches=data.get("matches", []),
        admin_notes=data.get("admin_notes"),
    )


class RequestService:
    """Service for community help requests (Firestore `requests` collection)."""

    def __init__(self):
        self.db = get_db()

    def _collection(self):
        return self.db.collection(REQUESTS_COLLECTION)

    def generate_matches(self, request: HelpRequestCreate) -> List[MatchSuggestion]:
        """
        Suggest up to three resources for a request.

        Candidates are resources of the requested type plus hospitals (the
        catch-all for medical needs). Verified resources rank first.
        """
        candidates = get_resource_service().list_by_types(
            [request.type.value, ResourceType.HOSPITAL.value],
            limit=MATCH_CANDIDATE_LIMIT,
        )

        matches = []
        for resource in candidates:
            distance = None
            if request.lat is not None and request.lng is not None:
                distance = round(haversine_km(request.lat, request.lng, resource.location.lat, resource.location.lng), 2)

            matches.append(MatchSuggestion(
                resource_id=resource.id,
                resource_name=resource.title,
                type=resource.type,
                distance=distance,
                match_score=VERIFIED_MATCH_SCORE if resource.verification_level == VerificationLevel.VERIFIED.value else DEFAULT_MATCH_SCORE,
                verification_level=resource.verification_level,
                contact=resource.contact.get("phone"),
            ))

        matches.sort(key=lambda m: m.match_score, reverse=True)
        return matches[:MAX_MATCHES]

    def create_request(self, request: HelpRequestCreate) -> HelpRequest:
        matches = self.generate_matches(request)

        timeline = [create_activity(ActivityType.CREATED, "Request created", Actor.USER)]
        if matches:
            timeline.append(create_activity(
                ActivityType.MATCH_FOUND,
                f"Found {len(matches)} potential matches",
                Actor.SYSTEM,
            ))

        doc_ref = self._collection().document()
        document = {
            "title": request.title,
            "description": request.description,
            "type": request.type.value,
            "contact": request.contact,
            "location": request.location,
            "lat": request.lat,
            "lng": request.lng,
            "urgency": request.urgency.value,
            "status": RequestStatus.OPEN.value,
            "created_at": datetime.now(timezone.utc),
            "response_count": 0,
            "timeline": timeline,
            "matches": [m.model_dump(mode="json") for m in matches],
            "admin_notes": None,
        }

        try:
            doc_ref.set(document)
        except Exception as e:
            logger.error(f"Failed to save request to Firestore: {e}", exc_info=True)
            raise

        logger.info(f"Help request created: {doc_ref.id} ({request.type.value}, {request.urgency.value}, {len(matches)} matches)")
        return document_to_request(doc_ref.id, document)

    def list_requests(self) -> List[HelpRequest]:
        """All requests, newest first."""
        query = self._collection().order_by("created_at", direction=firestore.Query.DESCENDING)
        return [document_to_request(doc.id, doc.to_dict()) for doc in query.stream()]

    def get_request(self, request_id: str) -> HelpRequest:
        snapshot = self._collection().document(request_id).get()
        if not snapshot.exists:
            raise RequestNotFoundError(request_id)
        return document_to_request(snapshot.id, snapshot.to_dict())

    def update_request(self, request_id: str, updates: HelpRequestUpdate) -> HelpRequest:
        """
        Apply an admin/volunteer update and record it on the timeline.

        A status change appends STATUS_CHANGE; a new admin note appends NOTE_ADDED.
        """
        doc_ref = self._collection().document(request_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            raise RequestNotFoundError(request_id)

        current = snapshot.to_dict()
        timeline = list(current.get("timeline", []))
        update_data: Dict = {}

        if updates.status is not None and updates.status.value != current.get("status"):
            timeline.append(create_activity(
                ActivityType.STATUS_CHANGE,
                f"Status changed from {current.get('status')} to {updates.status.value}",
                Actor.ADMIN,
            ))
            update_data["status"] = updates.status.value

        if updates.admin_notes and updates.admin_notes != current.get("admin_notes"):
            timeline.append(create_activity(
                ActivityType.NOTE_ADDED,
                f"Admin Note: {updates.admin_notes}",
                Actor.ADMIN,
            ))
            update_data["admin_notes"] = updates.admin_notes

        if updates.urgency is not None:
            update_data["urgency"] = updates.urgency.value
        if updates.response_count is not None:
            update_data["response_count"] = updates.response_count

        update_data["timeline"] = timeline
        doc_ref.update(update_data)

        logger.info(f"Help request {request_id} updated: {sorted(k for k in update_data if k != 'timeline')}")
        return self.get_request(request_id)

    def delete_request(self, request_id: str) -> bool:
        try:
            doc_ref = self._collection().document(request_id)
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
            logger.info(f"Help request deleted: {request_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to delete request {request_id}: {e}", exc_info=True)
            return False


# Global service instance
_request_service: Optional[RequestService] = None


def get_request_service() -> RequestService:
    """Get or create RequestService singleton."""
    global _request_service
    if _request_service is None:
        _request_service = RequestService()
    return _request_service


def reset_request_service() -> None:
    global _request_service
    _request_service = None
