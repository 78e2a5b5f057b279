"""
Distance Matrix Service - driving distance/ETA with graceful degradation.

Resolution order for every destination:
1. Cached provider result (within the TTL window)
2. Live provider result (cached on success)
3. Haversine distance at an assumed average speed

Step 3 covers a missing API key, HTTP/status failures, malformed responses
and "no route" elements. This service never raises to its callers and
never retries a failed provider call.
"""

import logging
import math
from typing import List, Optional, Sequence

from app.core.settings import settings
from app.utils.geo import haversine_km
from .base import DistanceMatrixProvider, DistanceResult, LatLng
from .cache import TravelTimeCache
from .google_provider import GoogleDistanceMatrixProvider

logger = logging.getLogger(__name__)


class DistanceMatrixService:

    def __init__(
        self,
        provider: Optional[DistanceMatrixProvider] = None,
        cache: Optional[TravelTimeCache] = None,
        batch_limit: int = 25,
        average_speed_kmh: float = 30.0,
    ):
        self.provider = provider
        self.cache = cache or TravelTimeCache()
        self.batch_limit = batch_limit
        self.average_speed_kmh = average_speed_kmh

    def fallback(self, origin: LatLng, destination: LatLng) -> DistanceResult:
        """Straight-line estimate; always succeeds."""
        distance = haversine_km(origin.lat, origin.lng, destination.lat, destination.lng)
        duration = math.ceil((distance / self.average_speed_kmh) * 60)
        return DistanceResult(distance_km=distance, duration_min=duration, status="OK")

    def get_distance(self, origin: LatLng, destination: LatLng) -> DistanceResult:
        if self.provider is None:
            logger.debug("No distance matrix provider configured, using fallback")
            return self.fallback(origin, destination)

        cached = self.cache.get(origin, destination)
        if cached is not None:
            logger.debug("Distance matrix cache hit")
            return cached

        try:
            result = self.provider.fetch(origin, [destination])[0]
        except Exception as e:
            logger.warning(f"Distance matrix lookup failed ({self.provider.name}): {e}. Using fallback.")
            return self.fallback(origin, destination)

        if result is None:
            logger.warning("Distance matrix found no route, using fallback")
            return self.fallback(origin, destination)

        self.cache.set(origin, destination, result)
        return result

    def get_batch(self, origin: LatLng, destinations: Sequence[LatLng]) -> List[DistanceResult]:
        """
        Travel estimates for many destinations; output order matches input order.

        Within the provider limit, cached pairs are served locally and the rest
        go out in a single provider call.
        """
        if not destinations:
            return []

        if self.provider is None or len(destinations) > self.batch_limit:
            return [self.get_distance(origin, dest) for dest in destinations]

        results: List[Optional[DistanceResult]] = [self.cache.get(origin, dest) for dest in destinations]
        pending = [index for index, result in enumerate(results) if result is None]
        if not pending:
            return results

        try:
            fetched = self.provider.fetch(origin, [destinations[index] for index in pending])
        except Exception as e:
            logger.error(f"Distance matrix batch lookup failed ({self.provider.name}): {e}. Using fallback for {len(pending)} destinations.")
            fetched = [None] * len(pending)

        for position, index in enumerate(pending):
            result = fetched[position] if position < len(fetched) else None
            if result is None:
                results[index] = self.fallback(origin, destinations[index])
            else:
                self.cache.set(origin, destinations[index], result)
                results[index] = result

        return results


# Global service instance
_distance_matrix_service: Optional[DistanceMatrixService] = None


def get_distance_matrix_service() -> DistanceMatrixService:
    """
    Get or create the DistanceMatrixService singleton.

    Google is used only when GOOGLE_MAPS_API_KEY is set; otherwise every
    lookup takes the Haversine fallback.
    """
    global _distance_matrix_service
    if _distance_matrix_service is not None:
        return _distance_matrix_service

    provider: Optional[DistanceMatrixProvider] = None
    if settings.GOOGLE_MAPS_API_KEY:
        provider = GoogleDistanceMatrixProvider(
            api_key=settings.GOOGLE_MAPS_API_KEY,
            timeout=settings.DISTANCE_MATRIX_TIMEOUT_SECONDS,
        )
        logger.info("Distance matrix provider initialized: google")
    else:
        logger.warning("GOOGLE_MAPS_API_KEY not set; distance matrix will use Haversine fallback")

    _distance_matrix_service = DistanceMatrixService(
        provider=provider,
        cache=TravelTimeCache(
            ttl_seconds=settings.DISTANCE_CACHE_TTL_SECONDS,
            max_entries=settings.DISTANCE_CACHE_MAX_ENTRIES,
        ),
        batch_limit=settings.DISTANCE_MATRIX_BATCH_LIMIT,
        average_speed_kmh=settings.FALLBACK_AVERAGE_SPEED_KMH,
    )
    return _distance_matrix_service


def reset_distance_matrix_service() -> None:
    global _distance_matrix_service
    _distance_matrix_service = None
