import pytest

from app.models.resource import AvailabilityStatus, ResourceType
from app.services.resource_payload import PayloadError, normalize_resource_payload

VALID = {
    "type": "HOSPITAL",
    "title": "AIIMS",
    "lat": 28.5672,
    "lng": 77.2100,
    "contact": "011-26588500",
}


def without(field):
    return {k: v for k, v in VALID.items() if k != field}


def test_canonical_payload():
    resource = normalize_resource_payload(VALID)

    assert resource.type == ResourceType.HOSPITAL
    assert resource.title == "AIIMS"
    assert resource.location.lat == 28.5672
    assert resource.location.lng == 77.2100
    assert resource.contact == {"phone": "011-26588500"}
    assert resource.status == AvailabilityStatus.AVAILABLE
    assert resource.metadata is None


def test_alias_fields_are_accepted():
    resource = normalize_resource_payload({
        "resourceType": "blood bank",
        "name": "Red Cross Blood Bank",
        "location": {"latitude": "28.62", "longitude": "77.21", "address": "Red Cross Road"},
        "contactNumber": "011-23711551",
        "status": "limited",
    })

    assert resource.type == ResourceType.BLOOD_BANK
    assert resource.title == "Red Cross Blood Bank"
    assert resource.location.lat == 28.62
    assert resource.location.lng == 77.21
    assert resource.location.address == "Red Cross Road"
    assert resource.contact == {"phone": "011-23711551"}
    assert resource.status == AvailabilityStatus.LIMITED


def test_top_level_coordinates_win_over_nested_location():
    resource = normalize_resource_payload({**VALID, "location": {"lat": 10.0, "lng": 10.0}})

    assert (resource.location.lat, resource.location.lng) == (28.5672, 77.2100)


def test_contact_object_is_kept():
    contact = {"phone": "999", "whatsapp": "999"}
    resource = normalize_resource_payload({**VALID, "contact": contact})

    assert resource.contact == contact


def test_phone_alias_and_numeric_contact():
    payload = without("contact")
    payload["phone"] = 9998887776

    assert normalize_resource_payload(payload).contact == {"phone": "9998887776"}


def test_free_text_location_is_ignored():
    payload = without("lat")
    payload["location"] = "Sector 4, Dwarka"

    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload(payload)
    assert exc.value.field == "lat"


@pytest.mark.parametrize("field, message", [
    ("type", "Missing required field: type"),
    ("title", "Missing required field: title"),
    ("lat", "Invalid or missing required field: lat"),
    ("lng", "Invalid or missing required field: lng"),
    ("contact", "Missing required field: contact"),
])
def test_missing_required_field(field, message):
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload(without(field))

    assert exc.value.field == field
    assert exc.value.message == message


def test_fields_are_checked_in_order():
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload({"lat": 1, "lng": 2})

    assert exc.value.field == "type"


@pytest.mark.parametrize("lat", ["abc", "", 91, -90.5, float("nan"), True])
def test_invalid_latitude(lat):
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload({**VALID, "lat": lat})

    assert exc.value.field == "lat"


def test_invalid_longitude():
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload({**VALID, "lng": 181})

    assert exc.value.field == "lng"


def test_blank_title_is_missing():
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload({**VALID, "title": "   "})

    assert exc.value.message == "Missing required field: title"


def test_unknown_type_is_rejected():
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload({**VALID, "type": "SPACESHIP"})

    assert exc.value.field == "type"
    assert "SPACESHIP" in exc.value.message


def test_unknown_status_is_rejected():
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload({**VALID, "status": "sometimes"})

    assert exc.value.field == "status"


def test_metadata_must_be_an_object():
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload({**VALID, "metadata": ["oxygen"]})

    assert exc.value.field == "metadata"


def test_metadata_is_passed_through():
    metadata = {"bloodStock": {"groups": {"A+": 4}, "plasmaAvailable": True}}

    assert normalize_resource_payload({**VALID, "metadata": metadata}).metadata == metadata


@pytest.mark.parametrize("body", [None, [], "HOSPITAL"])
def test_body_must_be_an_object(body):
    with pytest.raises(PayloadError) as exc:
        normalize_resource_payload(body)

    assert exc.value.field == "body"
