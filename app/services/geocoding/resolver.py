import logging
from typing import Optional

from app.core.settings import settings
from .base import GeocodingProvider
from .google_provider import GoogleGeocodingProvider
from .nominatim_provider import NominatimProvider

logger = logging.getLogger(__name__)

_provider_instance: Optional[GeocodingProvider] = None


def get_geocoding_provider() -> GeocodingProvider:
    """
    Resolve the active reverse-geocoding provider.

    - Default: Nominatim (no API key required).
    - Google when GEOCODING_PROVIDER='google' and GOOGLE_MAPS_API_KEY is set.
    """
    global _provider_instance
    if _provider_instance is not None:
        return _provider_instance

    provider_name = (settings.GEOCODING_PROVIDER or "nominatim").lower()

    if provider_name == "google" and settings.GOOGLE_MAPS_API_KEY:
        _provider_instance = GoogleGeocodingProvider(api_key=settings.GOOGLE_MAPS_API_KEY)
    else:
        if provider_name == "google":
            logger.warning("GEOCODING_PROVIDER=google but GOOGLE_MAPS_API_KEY is missing. Falling back to Nominatim.")
        _provider_instance = NominatimProvider()

    logger.info(f"Geocoding provider initialized: {_provider_instance.name}")
    return _provider_instance


def reset_geocoding_provider() -> None:
    global _provider_instance
    _provider_instance = None
