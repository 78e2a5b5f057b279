"""
Attach live travel estimates to resource listings.

One batched distance-matrix call covers every resource in the listing;
results are sorted nearest-by-time first, with anything that has no
duration pushed to the end.
"""

from typing import List

from app.models.resource import Resource
from app.services.distance_matrix import LatLng, get_distance_matrix_service

# Sorts after any real travel time
NO_DURATION_SENTINEL = 999999


def enrich_with_travel_times(resources: List[Resource], origin: LatLng) -> List[Resource]:
    """
    Return the resources annotated with distance / duration and sorted by duration.

    duration prefers the traffic-aware estimate; durationWithoutTraffic always
    holds the free-flow estimate. The input list is not modified.
    """
    if not resources:
        return []

    destinations = [LatLng(lat=r.location.lat, lng=r.location.lng) for r in resources]
    estimates = get_distance_matrix_service().get_batch(origin, destinations)

    enriched = []
    for resource, estimate in zip(resources, estimates):
        has_traffic = estimate.duration_in_traffic_min is not None
        enriched.append(resource.model_copy(update={
            "distance": round(estimate.distance_km, 2),
            "duration": estimate.duration_in_traffic_min if has_traffic else estimate.duration_min,
            "duration_without_traffic": estimate.duration_min,
            "has_traffic_data": has_traffic,
        }))

    enriched.sort(key=lambda r: r.duration if r.duration is not None else NO_DURATION_SENTINEL)
    return enriched
