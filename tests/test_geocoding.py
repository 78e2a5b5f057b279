import pytest
import requests

from app.core.settings import settings
from app.services.geocoding import get_geocoding_provider
from app.services.geocoding import google_provider, nominatim_provider
from app.services.geocoding.google_provider import GoogleGeocodingProvider
from app.services.geocoding.nominatim_provider import NominatimProvider


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload


def test_nominatim_parses_address(monkeypatch):
    captured = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        captured.update(headers=headers, timeout=timeout)
        return FakeResponse({
            "display_name": "Janpath, New Delhi, Delhi, India",
            "address": {"city": "New Delhi", "state_district": "Central Delhi"},
        })

    monkeypatch.setattr(nominatim_provider.requests, "get", fake_get)

    result = NominatimProvider().reverse_geocode(28.62, 77.21)

    assert result == {
        "address": "Janpath, New Delhi, Delhi, India",
        "city": "New Delhi",
        "district": "Central Delhi",
        "provider": "nominatim",
    }
    assert captured["headers"]["User-Agent"].startswith("VitaApp/1.0")
    assert captured["timeout"] == 3.0


def test_nominatim_never_raises(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(nominatim_provider.requests, "get", boom)

    assert NominatimProvider().reverse_geocode(0, 0)["address"] is None


def test_google_parses_components(monkeypatch):
    monkeypatch.setattr(google_provider.requests, "get", lambda *a, **kw: FakeResponse({
        "results": [{
            "formatted_address": "Ansari Nagar East, New Delhi",
            "address_components": [
                {"long_name": "New Delhi", "types": ["locality"]},
                {"long_name": "South Delhi", "types": ["administrative_area_level_2"]},
            ],
        }],
    }))

    result = GoogleGeocodingProvider(api_key="k").reverse_geocode(28.56, 77.21)

    assert result["city"] == "New Delhi"
    assert result["district"] == "South Delhi"
    assert result["provider"] == "google"


def test_google_http_error_returns_empty(monkeypatch):
    monkeypatch.setattr(google_provider.requests, "get", lambda *a, **kw: FakeResponse({}, status_code=500))

    assert GoogleGeocodingProvider(api_key="k").reverse_geocode(1, 2)["city"] is None


@pytest.mark.parametrize("provider_name, api_key, expected", [
    ("nominatim", None, "nominatim"),
    ("google", "k", "google"),
    ("google", None, "nominatim"),
])
def test_provider_resolution(monkeypatch, provider_name, api_key, expected):
    monkeypatch.setattr(settings, "GEOCODING_PROVIDER", provider_name)
    monkeypatch.setattr(settings, "GOOGLE_MAPS_API_KEY", api_key)

    assert get_geocoding_provider().name == expected
