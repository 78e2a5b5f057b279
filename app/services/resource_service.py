"""
Resource service - Firestore CRUD and filtering for the resource directory.

Firestore can only express equality / membership on top-level fields, so
list_resources() pushes type and status into the query and applies the rest
in process over the fetched documents:
- free-text search over title, type, address and metadata
- BLOOD_BANK widening to hospitals that publish blood stock
- dotted key-path metadata predicates
- radius filtering and distance sort

Contact and metadata are stored as JSON strings (see firestore_helpers).
"""

from app.config.firebase import get_db
from app.core.settings import settings
from app.models.resource import (
    AvailabilityStatus,
    ReportOutcome,
    Resource,
    ResourceCreate,
    ResourceFilters,
    ResourceLocation,
    ResourceType,
    ResourceUpdate,
    VerificationLevel,
    enum_token,
)
from app.utils.firestore_helpers import dump_blob, load_blob, where_filter
from app.utils.geo import haversine_km
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

RESOURCES_COLLECTION = "resources"

# Metadata filter sentinel: resolved value must be a number greater than zero
CHECK_POSITIVE = "check_positive"

BLOOD_STOCK_KEY = "bloodStock"

_MISSING = object()


class ResourceNotFoundError(LookupError):
    def __init__(self, resource_id: str):
        super().__init__(f"Resource not found: {resource_id}")
        self.resource_id = resource_id


def resolve_key_path(metadata: Optional[Dict[str, Any]], key_path: str) -> Any:
    """
    Walk a dotted key path ("bloodStock.groups.A+") through nested dicts.

    Returns _MISSING when any segment is absent or an intermediate is not an
    object. Group names contain '+'/'-' but never '.', so splitting on '.' is safe.
    """
    current: Any = metadata
    for key in key_path.split("."):
        if not isinstance(current, dict) or current.get(key) is None:
            return _MISSING
        current = current[key]
    return current


def _strict_equal(value: Any, expected: Any) -> bool:
    # 1 == True in Python; metadata flags must match booleans exactly
    if isinstance(value, bool) or isinstance(expected, bool):
        return isinstance(value, bool) and isinstance(expected, bool) and value == expected
    return value == expected


def matches_metadata_filter(metadata: Optional[Dict[str, Any]], criteria: Dict[str, Any]) -> bool:
    if not metadata:
        return False

    for key_path, expected in criteria.items():
        value = resolve_key_path(metadata, key_path)
        if value is _MISSING:
            return False
        if expected == CHECK_POSITIVE:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                return False
        elif not _strict_equal(value, expected):
            return False
    return True


def _has_blood_stock(resource: Resource) -> bool:
    return bool(resource.metadata and resource.metadata.get(BLOOD_STOCK_KEY))


def _matches_text(resource: Resource, needle: str) -> bool:
    haystacks = [
        resource.title,
        resource.type,
        resource.location.address or "",
        dump_blob(resource.metadata) if resource.metadata else "",
    ]
    return any(needle in text.lower() for text in haystacks)


def document_to_resource(doc_id: str, data: Dict[str, Any]) -> Resource:
    """Map a Firestore resource document onto the API model."""
    return Resource(
        id=doc_id,
        type=data.get("type", ""),
        title=data.get("title", ""),
        description=data.get("description") or None,
        location=ResourceLocation(
            lat=data["lat"],
            lng=data["lng"],
            address=data.get("address") or None,
            city=data.get("city") or None,
            district=data.get("district") or None,
        ),
        contact=load_blob(data.get("contact"), "contact", doc_id) or {},
        status=data.get("status") or AvailabilityStatus.AVAILABLE.value,
        verification_level=data.get("verification_level") or VerificationLevel.UNVERIFIED.value,
        metadata=load_blob(data.get("metadata"), "metadata", doc_id),
        report_count=data.get("report_count") or 0,
        upvote_count=data.get("upvote_count") or 0,
        created_at=data.get("created_at"),
        last_updated=data.get("last_updated"),
    )


class ResourceService:
    """Service for the resource directory (Firestore `resources` collection)."""

    def __init__(self):
        self.db = get_db()

    def _collection(self):
        return self.db.collection(RESOURCES_COLLECTION)

    def _get_snapshot(self, resource_id: str):
        doc_ref = self._collection().document(resource_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            raise ResourceNotFoundError(resource_id)
        return doc_ref, snapshot.to_dict()

    def list_resources(self, filters: Optional[ResourceFilters] = None) -> List[Resource]:
        """
        List resources matching the filters.

        With QUERY_OVERRIDES_FILTERS (the default) a free-text query ignores
        every other filter, matching the behaviour existing clients rely on.
        """
        filters = filters or ResourceFilters()
        needle = (filters.query or "").strip().lower()
        structured = not (needle and settings.QUERY_OVERRIDES_FILTERS)

        type_token = enum_token(filters.type) if (structured and filters.type) else None
        status_token = enum_token(filters.status) if (structured and filters.status) else None

        query = self._collection()
        if type_token == ResourceType.BLOOD_BANK.value:
            query = where_filter(query, "type", "in", [ResourceType.BLOOD_BANK.value, ResourceType.HOSPITAL.value])
        elif type_token:
            query = where_filter(query, "type", "==", type_token)
        if status_token:
            query = where_filter(query, "status", "==", status_token)

        results = [document_to_resource(doc.id, doc.to_dict()) for doc in query.stream()]

        if type_token == ResourceType.BLOOD_BANK.value:
            results = [
                r for r in results
                if r.type == ResourceType.BLOOD_BANK.value or _has_blood_stock(r)
            ]

        if needle:
            results = [r for r in results if _matches_text(r, needle)]

        if not structured:
            return results

        if filters.metadata_filter:
            results = [r for r in results if matches_metadata_filter(r.metadata, filters.metadata_filter)]

        if filters.lat is not None and filters.lng is not None and filters.radius_km is not None:
            for r in results:
                r.distance = haversine_km(filters.lat, filters.lng, r.location.lat, r.location.lng)
            results = [r for r in results if r.distance <= filters.radius_km]
            results.sort(key=lambda r: r.distance)

        return results

    def list_by_types(self, resource_types: Sequence[str], limit: int = 10) -> List[Resource]:
        """Up to `limit` resources whose type is one of `resource_types` (match candidates)."""
        query = where_filter(self._collection(), "type", "in", list(dict.fromkeys(resource_types))).limit(limit)
        return [document_to_resource(doc.id, doc.to_dict()) for doc in query.stream()]

    def get_resource(self, resource_id: str) -> Resource:
        _, data = self._get_snapshot(resource_id)
        return document_to_resource(resource_id, data)

    def create_resource(self, resource: ResourceCreate) -> Resource:
        """
        Persist a normalized resource.

        Trust tier always starts UNVERIFIED with zero report/upvote counts,
        whatever the payload claims.
        """
        location = resource.location
        if settings.RESOLVE_ADDRESS_ON_CREATE and not (location.address and location.city):
            location = self._resolve_address(location)

        now = datetime.now(timezone.utc)
        doc_ref = self._collection().document()
        document = {
            "type": resource.type.value,
            "title": resource.title,
            "description": resource.description,
            "lat": location.lat,
            "lng": location.lng,
            "address": location.address,
            "city": location.city,
            "district": location.district,
            "contact": dump_blob(resource.contact),
            "status": resource.status.value,
            "verification_level": VerificationLevel.UNVERIFIED.value,
            "metadata": dump_blob(resource.metadata),
            "report_count": 0,
            "upvote_count": 0,
            "created_at": now,
            "last_updated": now,
        }

        try:
            doc_ref.set(document)
        except Exception as e:
            logger.error(f"Failed to save resource to Firestore: {e}", exc_info=True)
            raise

        logger.info(f"Resource created: {doc_ref.id} ({resource.type.value} '{resource.title}')")
        return document_to_resource(doc_ref.id, document)

    def _resolve_address(self, location: ResourceLocation) -> ResourceLocation:
        from app.services.geocoding import get_geocoding_provider

        resolved = get_geocoding_provider().reverse_geocode(location.lat, location.lng)
        return location.model_copy(update={
            "address": location.address or resolved.get("address"),
            "city": location.city or resolved.get("city"),
            "district": location.district or resolved.get("district"),
        })

    def update_resource(self, resource_id: str, updates: ResourceUpdate) -> Resource:
        doc_ref, _ = self._get_snapshot(resource_id)

        changes = updates.model_dump(exclude_unset=True)
        update_data: Dict[str, Any] = {}
        for field, value in changes.items():
            if field in ("contact", "metadata"):
                update_data[field] = dump_blob(value)
            elif field == "status" and value is not None:
                update_data[field] = AvailabilityStatus(value).value
            else:
                update_data[field] = value
        update_data["last_updated"] = datetime.now(timezone.utc)

        doc_ref.update(update_data)
        logger.info(f"Resource {resource_id} updated: {sorted(changes.keys())}")
        return self.get_resource(resource_id)

    def report_resource(self, resource_id: str) -> ReportOutcome:
        """
        Record a community report against a resource.

        Once report_count reaches REPORT_FLAG_THRESHOLD the resource is forced
        to FLAGGED. This never reverses on its own; see reset_reports().
        """
        doc_ref = self._collection().document(resource_id)
        snapshot = doc_ref.get()
        if not snapshot.exists:
            return ReportOutcome(success=False)

        data = snapshot.to_dict()
        report_count = int(data.get("report_count") or 0) + 1
        verification_level = data.get("verification_level") or VerificationLevel.UNVERIFIED.value

        if report_count >= settings.REPORT_FLAG_THRESHOLD:
            if verification_level != VerificationLevel.FLAGGED.value:
                logger.warning(f"Resource {resource_id} flagged after {report_count} reports")
            verification_level = VerificationLevel.FLAGGED.value

        doc_ref.update({
            "report_count": report_count,
            "verification_level": verification_level,
        })

        return ReportOutcome(success=True, verification_level=verification_level, report_count=report_count)

    def reset_reports(self, resource_id: str, verification_level: VerificationLevel = VerificationLevel.UNVERIFIED) -> Resource:
        """Administrative reset of the report ratchet: zero reports, explicit trust tier."""
        doc_ref, data = self._get_snapshot(resource_id)

        doc_ref.update({
            "report_count": 0,
            "verification_level": verification_level.value,
            "last_updated": datetime.now(timezone.utc),
        })
        logger.info(
            f"Resource {resource_id} reports reset by admin "
            f"({data.get('verification_level')} -> {verification_level.value})"
        )
        return self.get_resource(resource_id)

    def upvote_resource(self, resource_id: str) -> Resource:
        doc_ref, data = self._get_snapshot(resource_id)
        doc_ref.update({"upvote_count": int(data.get("upvote_count") or 0) + 1})
        return self.get_resource(resource_id)

    def delete_resource(self, resource_id: str) -> bool:
        try:
            doc_ref = self._collection().document(resource_id)
            if not doc_ref.get().exists:
                logger.warning(f"Delete requested for missing resource {resource_id}")
                return False
            doc_ref.delete()
            logger.info(f"Resource deleted: {resource_id}")
            return True
        except Exception as e:
            logger.error(f"Failed to delete resource {resource_id}: {e}", exc_info=True)
            return False


# Global service instance
_resource_service: Optional[ResourceService] = None


def get_resource_service() -> ResourceService:
    """Get or create ResourceService singleton."""
    global _resource_service
    if _resource_service is None:
        _resource_service = ResourceService()
    return _resource_service


def reset_resource_service() -> None:
    global _resource_service
    _resource_service = None
