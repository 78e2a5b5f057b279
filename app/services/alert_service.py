"""
Alert service - district-level community alerts (Firestore `alerts` collection).

Every alert gets an expiry ALERT_TTL_HOURS after creation. Listing returns
all alerts newest first; clients decide whether to hide expired ones.
"""

from app.config.firebase import get_db
from app.core.settings import settings
from app.models.alert import Alert, AlertCreate
from datetime import datetime, timedelta, timezone
from firebase_admin import firestore
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

ALERTS_COLLECTION = "alerts"


def document_to_alert(doc_id: str, data: Dict) -> Alert:
    return Alert(
        id=doc_id,
        title=data["title"],
        message=data["message"],
        district=data["district"],
        severity=data["severity"],
        type=data["type"],
        created_at=data["created_at"],
        expires_at=data.get("expires_at"),
    )


class AlertService:
    def __init__(self):
        self.db = get_db()

    def _collection(self):
        return self.db.collection(ALERTS_COLLECTION)

    def create_alert(self, alert: AlertCreate) -> Alert:
        now = datetime.now(timezone.utc)
        doc_ref = self._collection().document()
        document = {
            "title": alert.title,
            "message": alert.message,
            "district": alert.district,
            "severity": alert.severity.value,
            "type": alert.type.value,
            "created_at": now,
            "expires_at": now + timedelta(hours=settings.ALERT_TTL_HOURS),
        }

        try:
            doc_ref.set(document)
        except Exception as e:
            logger.error(f"Failed to save alert to Firestore: {e}", exc_info=True)
            raise

        logger.info(f"Alert created: {doc_ref.id} ({alert.severity.value} {alert.type.value}, {alert.district})")
        return document_to_alert(doc_ref.id, document)

    def list_alerts(self) -> List[Alert]:
        """All alerts, newest first."""
        query = self._collection().order_by("created_at", direction=firestore.Query.DESCENDING)
        return [document_to_alert(doc.id, doc.to_dict()) for doc in query.stream()]


# Global service instance
_alert_service: Optional[AlertService] = None


def get_alert_service() -> AlertService:
    """Get or create AlertService singleton."""
    global _alert_service
    if _alert_service is None:
        _alert_service = AlertService()
    return _alert_service


def reset_alert_service() -> None:
    global _alert_service
    _alert_service = None
