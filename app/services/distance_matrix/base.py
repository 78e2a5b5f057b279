"""
Distance Matrix Provider Base Interface.

Defines the value types and the contract every driving-distance provider
implements. Providers report failure by raising DistanceMatrixError; the
service layer turns that into a Haversine estimate so callers never see it.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence
from pydantic import BaseModel, Field
import logging

logger = logging.getLogger(__name__)


class LatLng(BaseModel):
    lat: float
    lng: float

    def as_param(self) -> str:
        return f"{self.lat},{self.lng}"


class DistanceResult(BaseModel):
    """
    Travel estimate for one origin-destination pair.

    duration_in_traffic_min is only set when the provider returned a
    traffic-aware estimate; the Haversine fallback never sets it.
    """
    distance_km: float = Field(..., ge=0)
    duration_min: int = Field(..., ge=0)
    duration_in_traffic_min: Optional[int] = None
    status: str = Field(default="OK", description="OK | ZERO_RESULTS | ERROR")


class DistanceMatrixError(Exception):
    """Provider unreachable, non-OK status, or malformed response."""


class DistanceMatrixProvider(ABC):
    """
    Abstract driving-distance provider.

    Contract:
    - Input: one origin, one or more destinations
    - Output: one entry per destination, in the same order;
      None for an element the provider could not route
    - Raises DistanceMatrixError for whole-call failures
    """

    name: str = "base"

    @abstractmethod
    def fetch(self, origin: LatLng, destinations: Sequence[LatLng]) -> List[Optional[DistanceResult]]:
        raise NotImplementedError
