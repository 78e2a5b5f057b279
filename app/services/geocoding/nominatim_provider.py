import logging
from typing import Any, Dict, Optional

import requests

from .base import GeocodingProvider, empty_address

logger = logging.getLogger(__name__)


class NominatimProvider(GeocodingProvider):
    """
    OpenStreetMap Nominatim reverse geocoding.

    No API key; Nominatim's usage policy requires an identifying User-Agent
    and at most one request per second, so this is only called on resource
    creation, never on reads.
    """

    name = "nominatim"
    BASE_URL = "https://nominatim.openstreetmap.org/reverse"

    def __init__(self, user_agent: str = "VitaApp/1.0 (vita-app-project)", timeout: float = 3.0):
        self.user_agent = user_agent
        self.timeout = timeout

    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, Optional[str]]:
        try:
            params = {
                "lat": latitude,
                "lon": longitude,
                "format": "json",
                "zoom": 18,
                "addressdetails": 1,
            }
            resp = requests.get(self.BASE_URL, params=params, headers={"User-Agent": self.user_agent}, timeout=self.timeout)
            if resp.status_code != 200:
                logger.warning(f"Nominatim reverse-geocode failed with status {resp.status_code}")
                return empty_address(self.name)

            data: Dict[str, Any] = resp.json()
            if data.get("error"):
                logger.warning(f"Nominatim reverse-geocode error: {data['error']}")
                return empty_address(self.name)

            parts = data.get("address") or {}
            return {
                "address": data.get("display_name"),
                "city": parts.get("city") or parts.get("town") or parts.get("village"),
                "district": parts.get("state_district") or parts.get("county") or parts.get("suburb"),
                "provider": self.name,
            }
        except Exception as e:
            logger.warning(f"Nominatim reverse-geocode error: {e}")
            return empty_address(self.name)
