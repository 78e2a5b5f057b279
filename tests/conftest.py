"""
Shared fixtures: every test runs against a fresh in-memory Firestore with no
Google Maps key, so distance lookups take the Haversine fallback unless a
test installs a provider.
"""

import os

os.environ["USE_MOCK_DB"] = "true"
os.environ.pop("GOOGLE_MAPS_API_KEY", None)
os.environ.pop("MOCK_DB_PATH", None)

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.config.firebase import get_db
from app.core.settings import settings
from app.main import app
from app.services.alert_service import reset_alert_service
from app.services.distance_matrix import reset_distance_matrix_service
from app.services.geocoding import reset_geocoding_provider
from app.services.request_service import reset_request_service
from app.services.resource_service import reset_resource_service
from app.services.volunteer_task_service import reset_volunteer_task_service
from app.utils.firestore_helpers import dump_blob

DELHI = (28.6139, 77.2090)


def _reset_singletons():
    reset_alert_service()
    reset_distance_matrix_service()
    reset_geocoding_provider()
    reset_request_service()
    reset_resource_service()
    reset_volunteer_task_service()


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    monkeypatch.setattr(settings, "USE_MOCK_DB", True)
    monkeypatch.setattr(settings, "GOOGLE_MAPS_API_KEY", None)
    monkeypatch.setattr(settings, "RESOLVE_ADDRESS_ON_CREATE", False)
    get_db().clear()
    _reset_singletons()
    yield
    _reset_singletons()


@pytest.fixture
def db():
    return get_db()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_resource(db):
    """Write a resource document straight into the store and return its id."""

    def _make(doc_id=None, **overrides):
        now = datetime.now(timezone.utc)
        document = {
            "type": "HOSPITAL",
            "title": "Test Hospital",
            "description": None,
            "lat": DELHI[0],
            "lng": DELHI[1],
            "address": "Connaught Place",
            "city": "Delhi",
            "district": "Central Delhi",
            "contact": {"phone": "011-0000000"},
            "status": "AVAILABLE",
            "verification_level": "UNVERIFIED",
            "metadata": {},
            "report_count": 0,
            "upvote_count": 0,
            "created_at": now,
            "last_updated": now,
        }
        document.update(overrides)
        document["contact"] = dump_blob(document["contact"])
        document["metadata"] = dump_blob(document["metadata"])

        doc_ref = db.collection("resources").document(doc_id)
        doc_ref.set(document)
        return doc_ref.id

    return _make
