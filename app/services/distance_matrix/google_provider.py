import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import requests

from .base import DistanceMatrixError, DistanceMatrixProvider, DistanceResult, LatLng

logger = logging.getLogger(__name__)


class GoogleDistanceMatrixProvider(DistanceMatrixProvider):
    """
    Google Maps Distance Matrix provider.

    - Driving mode with departure_time=now so duration_in_traffic is returned.
    - One HTTP round-trip per call, destinations pipe-joined.
    - Element-level failures (NOT_FOUND, ZERO_RESULTS) come back as None.
    """

    name = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"

    def __init__(self, api_key: str, timeout: float = 5.0):
        self.api_key = api_key
        self.timeout = timeout

    def fetch(self, origin: LatLng, destinations: Sequence[LatLng]) -> List[Optional[DistanceResult]]:
        params = {
            "origins": origin.as_param(),
            "destinations": "|".join(dest.as_param() for dest in destinations),
            "mode": "driving",
            "departure_time": "now",
            "traffic_model": "best_guess",
            "key": self.api_key,
        }

        try:
            resp = requests.get(self.BASE_URL, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise DistanceMatrixError(f"Distance matrix request failed: {e}") from e

        if resp.status_code != 200:
            raise DistanceMatrixError(f"Distance matrix API error: HTTP {resp.status_code}")

        try:
            data: Dict[str, Any] = resp.json()
        except ValueError as e:
            raise DistanceMatrixError(f"Distance matrix returned invalid JSON: {e}") from e

        if data.get("status") != "OK":
            raise DistanceMatrixError(f"Distance matrix API status: {data.get('status')}")

        rows = data.get("rows") or []
        elements = rows[0].get("elements") if rows and isinstance(rows[0], dict) else None
        if not isinstance(elements, list):
            raise DistanceMatrixError("Distance matrix response has no rows[0].elements")

        results: List[Optional[DistanceResult]] = []
        for index in range(len(destinations)):
            element = elements[index] if index < len(elements) else None
            results.append(self._parse_element(element))
        return results

    @staticmethod
    def _parse_element(element: Optional[Dict[str, Any]]) -> Optional[DistanceResult]:
        if not element or element.get("status") != "OK":
            return None
        try:
            in_traffic = element.get("duration_in_traffic")
            return DistanceResult(
                distance_km=element["distance"]["value"] / 1000,
                duration_min=math.ceil(element["duration"]["value"] / 60),
                duration_in_traffic_min=math.ceil(in_traffic["value"] / 60) if in_traffic else None,
                status="OK",
            )
        except (KeyError, TypeError) as e:
            logger.warning(f"Malformed distance matrix element {element!r}: {e}")
            return None
