from datetime import timedelta

import pytest

from app.core.settings import settings
from app.services.alert_service import AlertService
from app.services.volunteer_task_service import VolunteerTaskService

ALERT = {
    "title": "Waterlogging on Ring Road",
    "message": "Avoid the Dhaula Kuan underpass; ambulances are being diverted.",
    "district": "South West Delhi",
    "severity": "WARNING",
    "type": "TRAFFIC",
}


# --- alerts -------------------------------------------------------------------

def test_create_alert_expires_after_a_day(client, db):
    response = client.post("/alerts", json=ALERT)

    assert response.status_code == 201
    body = response.json()
    assert body["severity"] == "WARNING"
    assert "createdAt" in body and "expiresAt" in body

    stored = db.collection("alerts").document(body["id"]).get().to_dict()
    assert stored["expires_at"] - stored["created_at"] == timedelta(hours=24)


def test_alert_expiry_follows_settings(client, db, monkeypatch):
    monkeypatch.setattr(settings, "ALERT_TTL_HOURS", 6)

    body = client.post("/alerts", json=ALERT).json()

    stored = db.collection("alerts").document(body["id"]).get().to_dict()
    assert stored["expires_at"] - stored["created_at"] == timedelta(hours=6)


def test_list_alerts_newest_first(client):
    first = client.post("/alerts", json={**ALERT, "title": "first"}).json()
    second = client.post("/alerts", json={**ALERT, "title": "second"}).json()

    assert [a["id"] for a in client.get("/alerts").json()] == [second["id"], first["id"]]


@pytest.mark.parametrize("payload", [
    {k: v for k, v in ALERT.items() if k != "district"},
    {**ALERT, "type": "ALIENS"},
])
def test_create_alert_validation(client, db, payload):
    response = client.post("/alerts", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid Request"
    assert list(db.collection("alerts").stream()) == []


def test_alert_store_failure(client, monkeypatch):
    def boom(self):
        raise RuntimeError("firestore unavailable")

    monkeypatch.setattr(AlertService, "list_alerts", boom)

    response = client.get("/alerts")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch alerts"}


# --- volunteer tasks ----------------------------------------------------------

def test_create_task_defaults(client):
    response = client.post("/volunteer/tasks", json={"title": "Deliver oxygen cylinder", "location": "Dwarka Sec 6"})

    assert response.status_code == 200
    body = response.json()
    assert body["urgent"] is False
    assert body["points"] == 10
    assert body["status"] == "OPEN"


def test_create_task_zero_points_uses_default(client):
    body = client.post("/volunteer/tasks", json={"title": "Drive", "location": "Saket", "urgent": True, "points": 0}).json()

    assert body["urgent"] is True
    assert body["points"] == 10


def test_create_task_keeps_given_points(client):
    body = client.post("/volunteer/tasks", json={"title": "Blood donor run", "location": "AIIMS", "points": 25}).json()

    assert body["points"] == 25


def test_list_only_open_tasks_newest_first(client, db):
    first = client.post("/volunteer/tasks", json={"title": "first", "location": "Saket"}).json()
    done = client.post("/volunteer/tasks", json={"title": "done", "location": "Saket"}).json()
    second = client.post("/volunteer/tasks", json={"title": "second", "location": "Saket"}).json()
    db.collection("volunteer_tasks").document(done["id"]).update({"status": "COMPLETED"})

    listed = client.get("/volunteer/tasks").json()

    assert [t["id"] for t in listed] == [second["id"], first["id"]]


def test_create_task_validation(client):
    response = client.post("/volunteer/tasks", json={"title": "No location"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid Request"


def test_task_store_failure(client, monkeypatch):
    def boom(self, task):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(VolunteerTaskService, "create_task", boom)

    response = client.post("/volunteer/tasks", json={"title": "Drive", "location": "Saket"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create task"}
