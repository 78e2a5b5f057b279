"""
Driving distance / ETA lookups with a Haversine fallback.
"""

from app.services.distance_matrix.base import DistanceMatrixError, DistanceMatrixProvider, DistanceResult, LatLng
from app.services.distance_matrix.cache import TravelTimeCache
from app.services.distance_matrix.google_provider import GoogleDistanceMatrixProvider
from app.services.distance_matrix.service import (
    DistanceMatrixService,
    get_distance_matrix_service,
    reset_distance_matrix_service,
)

__all__ = [
    "DistanceMatrixError",
    "DistanceMatrixProvider",
    "DistanceResult",
    "LatLng",
    "TravelTimeCache",
    "GoogleDistanceMatrixProvider",
    "DistanceMatrixService",
    "get_distance_matrix_service",
    "reset_distance_matrix_service",
]
