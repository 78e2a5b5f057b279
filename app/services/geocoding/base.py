from abc import ABC, abstractmethod
from typing import Dict, Optional


class GeocodingProvider(ABC):
    """
    Abstract reverse-geocoding provider used to fill in a resource's address.

    Contract:
    - Input: latitude, longitude (floats)
    - Output: {"address", "city", "district", "provider"}; unknown parts are None
    - MUST NEVER raise upstream exceptions.
    - Implementations should enforce a network timeout <= 3 seconds.
    """

    name: str = "base"

    @abstractmethod
    def reverse_geocode(self, latitude: float, longitude: float) -> Dict[str, Optional[str]]:
        raise NotImplementedError


def empty_address(provider: str) -> Dict[str, Optional[str]]:
    return {
        "address": None,
        "city": None,
        "district": None,
        "provider": provider,
    }
