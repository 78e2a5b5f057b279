import math

import pytest

from app.services.distance_matrix import DistanceMatrixError, DistanceMatrixProvider, DistanceMatrixService, DistanceResult
from app.services.resource_service import ResourceService
from app.utils.geo import haversine_km

ORIGIN = (28.6139, 77.2090)


class ScriptedProvider(DistanceMatrixProvider):
    name = "scripted"

    def __init__(self, results=None, error=None):
        self.results = results
        self.error = error

    def fetch(self, origin, destinations):
        if self.error:
            raise self.error
        return self.results[:len(destinations)]


@pytest.fixture
def install_provider(monkeypatch):
    def _install(provider):
        service = DistanceMatrixService(provider=provider)
        monkeypatch.setattr("app.services.proximity_service.get_distance_matrix_service", lambda: service)
        return service

    return _install


def fallback_minutes(lat, lng):
    return math.ceil(haversine_km(ORIGIN[0], ORIGIN[1], lat, lng) / 30 * 60)


# --- create -------------------------------------------------------------------

def test_create_resource_end_to_end(client, db):
    response = client.post("/resources", json={
        "type": "HOSPITAL",
        "title": "X",
        "lat": 12.9,
        "lng": 77.6,
        "contact": "999",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["type"] == "HOSPITAL"
    assert body["verificationLevel"] == "UNVERIFIED"
    assert body["reportCount"] == 0
    assert body["contact"] == {"phone": "999"}

    stored = db.collection("resources").document(body["id"]).get().to_dict()
    assert stored["contact"] == '{"phone":"999"}'


def test_create_with_legacy_field_names(client):
    response = client.post("/resources", json={
        "resourceType": "oxygen",
        "name": "O2 Refill Point",
        "location": {"latitude": 28.7, "longitude": 77.1},
        "phone": "98100 00000",
    })

    assert response.status_code == 201
    assert response.json()["type"] == "OXYGEN"
    assert response.json()["location"]["lat"] == 28.7


@pytest.mark.parametrize("field, message", [
    ("type", "Missing required field: type"),
    ("title", "Missing required field: title"),
    ("lat", "Invalid or missing required field: lat"),
    ("lng", "Invalid or missing required field: lng"),
    ("contact", "Missing required field: contact"),
])
def test_create_rejects_missing_field(client, db, field, message):
    payload = {"type": "HOSPITAL", "title": "X", "lat": 12.9, "lng": 77.6, "contact": "999"}
    del payload[field]

    response = client.post("/resources", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": message}
    assert list(db.collection("resources").stream()) == []


def test_create_ignores_client_trust_fields(client):
    response = client.post("/resources", json={
        "type": "HOSPITAL", "title": "X", "lat": 12.9, "lng": 77.6, "contact": "999",
        "verificationLevel": "GOVERNMENT", "reportCount": 7,
    })

    assert response.json()["verificationLevel"] == "UNVERIFIED"
    assert response.json()["reportCount"] == 0


def test_create_rejects_non_json(client):
    response = client.post("/resources", content=b"not json", headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid JSON body"


def test_create_store_failure(client, monkeypatch):
    def boom(self, resource):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(ResourceService, "create_resource", boom)

    response = client.post("/resources", json={"type": "HOSPITAL", "title": "X", "lat": 1, "lng": 2, "contact": "9"})

    assert response.status_code == 400
    assert response.json() == {"error": "Failed to create resource", "details": "quota exceeded"}


# --- list ---------------------------------------------------------------------

def test_list_without_location_has_no_travel_fields(client, make_resource):
    make_resource()

    body = client.get("/resources").json()

    assert len(body) == 1
    assert "distance" not in body[0]
    assert "duration" not in body[0]


def test_list_with_location_uses_fallback_and_sorts(client, make_resource):
    far = make_resource(title="Far", lat=28.4595, lng=77.0266)
    near = make_resource(title="Near", lat=28.6304, lng=77.2177)

    body = client.get("/resources", params={"lat": ORIGIN[0], "lng": ORIGIN[1]}).json()

    assert [r["id"] for r in body] == [near, far]
    assert body[0]["duration"] == fallback_minutes(28.6304, 77.2177)
    assert body[0]["durationWithoutTraffic"] == body[0]["duration"]
    assert body[0]["hasTrafficData"] is False
    assert body[0]["distance"] == round(haversine_km(ORIGIN[0], ORIGIN[1], 28.6304, 77.2177), 2)


def test_list_prefers_traffic_duration(client, make_resource, install_provider):
    make_resource(title="First")
    make_resource(title="Second")
    install_provider(ScriptedProvider(results=[
        DistanceResult(distance_km=3.0, duration_min=10, duration_in_traffic_min=40),
        DistanceResult(distance_km=5.0, duration_min=15),
    ]))

    body = client.get("/resources", params={"lat": ORIGIN[0], "lng": ORIGIN[1]}).json()

    assert [r["duration"] for r in body] == [15, 40]
    assert body[0]["hasTrafficData"] is False
    assert body[1]["hasTrafficData"] is True
    assert body[1]["durationWithoutTraffic"] == 10
    assert body[1]["distance"] == 3.0


def test_list_survives_provider_failure(client, make_resource, install_provider):
    resource_id = make_resource(lat=28.6304, lng=77.2177)
    install_provider(ScriptedProvider(error=DistanceMatrixError("HTTP 500")))

    body = client.get("/resources", params={"lat": ORIGIN[0], "lng": ORIGIN[1]}).json()

    assert body[0]["id"] == resource_id
    assert body[0]["duration"] == fallback_minutes(28.6304, 77.2177)


def test_list_returns_base_results_when_enrichment_breaks(client, make_resource, monkeypatch):
    resource_id = make_resource()

    def broken(resources, origin):
        raise RuntimeError("enrichment bug")

    monkeypatch.setattr("app.routes.resources.enrich_with_travel_times", broken)

    response = client.get("/resources", params={"lat": ORIGIN[0], "lng": ORIGIN[1]})

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [resource_id]
    assert "duration" not in response.json()[0]


def test_list_store_failure_returns_500_with_stack(client, monkeypatch):
    def boom(self, filters=None):
        raise RuntimeError("firestore unavailable")

    monkeypatch.setattr(ResourceService, "list_resources", boom)

    response = client.get("/resources")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to fetch resources"
    assert body["details"] == "firestore unavailable"
    assert "RuntimeError" in body["stack"]


def test_list_rejects_unknown_type(client):
    response = client.get("/resources", params={"type": "SPACESHIP"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid resource type: SPACESHIP"}


def test_blood_group_query_param(client, make_resource):
    stocked = make_resource(type="HOSPITAL", metadata={"bloodStock": {"groups": {"A+": 2}}})
    make_resource(type="BLOOD_BANK", metadata={"bloodStock": {"groups": {"A+": 0}}})

    # '+' unencoded in a query string arrives as a space
    response = client.get("/resources?type=BLOOD_BANK&bloodGroup=A+")

    assert [r["id"] for r in response.json()] == [stocked]


def test_component_and_oxygen_filters(client, make_resource):
    plasma = make_resource(type="BLOOD_BANK", metadata={"bloodStock": {"plasmaAvailable": True}})
    make_resource(type="BLOOD_BANK", metadata={"bloodStock": {"plasmaAvailable": False}})
    cylinder = make_resource(type="OXYGEN", metadata={"oxygenType": "CYLINDER"})
    make_resource(type="OXYGEN", metadata={"oxygenType": "REFILL"})

    assert [r["id"] for r in client.get("/resources", params={"type": "BLOOD_BANK", "component": "plasma"}).json()] == [plasma]
    assert [r["id"] for r in client.get("/resources", params={"type": "OXYGEN", "oxygenType": "CYLINDER"}).json()] == [cylinder]


# --- single resource ----------------------------------------------------------

def test_get_update_delete(client, make_resource):
    resource_id = make_resource()

    assert client.get(f"/resources/{resource_id}").json()["title"] == "Test Hospital"

    patched = client.patch(f"/resources/{resource_id}", json={"status": "BUSY"})
    assert patched.status_code == 200
    assert patched.json()["status"] == "BUSY"

    assert client.delete(f"/resources/{resource_id}").json() == {"success": True}
    assert client.get(f"/resources/{resource_id}").status_code == 404


def test_missing_resource_is_404(client):
    assert client.get("/resources/nope").json() == {"error": "Resource not found"}
    assert client.patch("/resources/nope", json={"status": "BUSY"}).status_code == 404
    assert client.post("/resources/nope/upvote").status_code == 404


def test_delete_missing_resource_is_500(client):
    response = client.delete("/resources/nope")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to delete resource"}


# --- moderation ---------------------------------------------------------------

def test_report_flow(client, make_resource):
    resource_id = make_resource()

    responses = [client.post(f"/resources/{resource_id}/report").json() for _ in range(3)]

    assert responses[0] == {"message": "Report submitted successfully", "status": "UNVERIFIED", "reportCount": 1}
    assert responses[2]["status"] == "FLAGGED"
    assert responses[2]["reportCount"] == 3


def test_report_missing_resource(client):
    response = client.post("/resources/nope/report")

    assert response.status_code == 404
    assert response.json() == {"error": "Resource not found"}


def test_admin_reset_reports(client, make_resource):
    resource_id = make_resource(verification_level="FLAGGED", report_count=4)

    response = client.post(f"/admin/resources/{resource_id}/reset-reports", json={"verificationLevel": "VERIFIED"})

    assert response.status_code == 200
    assert response.json()["verificationLevel"] == "VERIFIED"
    assert response.json()["reportCount"] == 0


def test_admin_reset_defaults_to_unverified(client, make_resource):
    resource_id = make_resource(verification_level="FLAGGED", report_count=4)

    response = client.post(f"/admin/resources/{resource_id}/reset-reports")

    assert response.json()["verificationLevel"] == "UNVERIFIED"
    assert client.post("/admin/resources/nope/reset-reports").status_code == 404


def test_upvote(client, make_resource):
    resource_id = make_resource()

    assert client.post(f"/resources/{resource_id}/upvote").json()["upvoteCount"] == 1


def test_query_ignores_invalid_type(client, make_resource):
    resource_id = make_resource(title="City Hospital")

    response = client.get("/resources", params={"q": "city", "type": "bogus"})

    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [resource_id]


def test_invalid_type_rejected_when_query_does_not_override(client, make_resource, monkeypatch):
    from app.core.settings import settings

    monkeypatch.setattr(settings, "QUERY_OVERRIDES_FILTERS", False)
    make_resource(title="City Hospital")

    response = client.get("/resources", params={"q": "city", "type": "bogus"})

    assert response.status_code == 400


def test_type_param_accepts_client_spellings(client, make_resource):
    bank = make_resource(type="BLOOD_BANK")
    make_resource(type="AMBULANCE")

    for spelling in ("blood-bank", "Blood Bank", "blood_bank"):
        response = client.get("/resources", params={"type": spelling})
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [bank]


def test_list_survives_non_object_metadata_blob(client, make_resource, db):
    bad = make_resource(title="Legacy")
    good = make_resource(title="Current")
    db.collection("resources").document(bad).update({"metadata": "[1, 2]"})

    response = client.get("/resources")

    assert response.status_code == 200
    assert sorted(r["id"] for r in response.json()) == sorted([bad, good])
