"""
Volunteer task service (Firestore `volunteer_tasks` collection).

Coordinators post tasks; the volunteer board only shows tasks that are
still OPEN, newest first.
"""

from app.config.firebase import get_db
from app.models.volunteer_task import DEFAULT_TASK_POINTS, TaskStatus, VolunteerTask, VolunteerTaskCreate
from app.utils.firestore_helpers import where_filter
from datetime import datetime, timezone
from firebase_admin import firestore
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

VOLUNTEER_TASKS_COLLECTION = "volunteer_tasks"


def document_to_task(doc_id: str, data: Dict) -> VolunteerTask:
    return VolunteerTask(
        id=doc_id,
        title=data["title"],
        location=data["location"],
        urgent=data.get("urgent", False),
        points=data.get("points") or DEFAULT_TASK_POINTS,
        status=data.get("status") or TaskStatus.OPEN.value,
        created_at=data["created_at"],
    )


class VolunteerTaskService:
    def __init__(self):
        self.db = get_db()

    def _collection(self):
        return self.db.collection(VOLUNTEER_TASKS_COLLECTION)

    def create_task(self, task: VolunteerTaskCreate) -> VolunteerTask:
        doc_ref = self._collection().document()
        document = {
            "title": task.title,
            "location": task.location,
            "urgent": task.urgent,
            "points": task.points,
            "status": TaskStatus.OPEN.value,
            "created_at": datetime.now(timezone.utc),
        }

        try:
            doc_ref.set(document)
        except Exception as e:
            logger.error(f"Failed to save volunteer task to Firestore: {e}", exc_info=True)
            raise

        logger.info(f"Volunteer task created: {doc_ref.id} ({'urgent, ' if task.urgent else ''}{task.points} pts)")
        return document_to_task(doc_ref.id, document)

    def list_open_tasks(self) -> List[VolunteerTask]:
        query = where_filter(self._collection(), "status", "==", TaskStatus.OPEN.value)
        query = query.order_by("created_at", direction=firestore.Query.DESCENDING)
        return [document_to_task(doc.id, doc.to_dict()) for doc in query.stream()]


# Global service instance
_volunteer_task_service: Optional[VolunteerTaskService] = None


def get_volunteer_task_service() -> VolunteerTaskService:
    """Get or create VolunteerTaskService singleton."""
    global _volunteer_task_service
    if _volunteer_task_service is None:
        _volunteer_task_service = VolunteerTaskService()
    return _volunteer_task_service


def reset_volunteer_task_service() -> None:
    global _volunteer_task_service
    _volunteer_task_service = None
