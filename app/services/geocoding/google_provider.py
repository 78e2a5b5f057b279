import logging
from typing import Any, Dict, List, Optional

import requests

from .base import GeocodingProvider, empty_address

logger = logging.getLogger(__name__)


class GoogleGeocodingProvider(GeocodingProvider):
    """
    Google Maps reverse geocoding.

    Used only when GEOCODING_PROVIDER=google and GOOGLE_MAPS_API_KEY is set
    (the same key the distance matrix uses).
    """

    name = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key: Optional[str], timeout: float = 3.0):
        self.api_key = api_key
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, Optional[str]]:
        if not self.api_key:
            logger.info("GoogleGeocodingProvider called without API key; returning empty result.")
            return empty_address(self.name)

        try:
            params = {"latlng": f"{latitude},{longitude}", "key": self.api_key}
            resp = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
            if resp.status_code != 200:
                logger.warning(f"Google reverse-geocode failed with status {resp.status_code}")
                return empty_address(self.name)

            data: Dict[str, Any] = resp.json()
            results = data.get("results") or []
            if not results:
                return empty_address(self.name)

            first = results[0]
            components: List[Dict[str, Any]] = first.get("address_components") or []

            def component(*types: str) -> Optional[str]:
                for c in components:
                    if any(t in c.get("types", []) for t in types):
                        return c.get("long_name")
                return None

            return {
                "address": first.get("formatted_address"),
                "city": component("locality", "postal_town"),
                "district": component("administrative_area_level_2", "sublocality"),
                "provider": self.name,
            }
        except Exception as e:
            logger.warning(f"Google reverse-geocode error: {e}")
            return empty_address(self.name)
