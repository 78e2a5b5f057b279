from app.services.geocoding.base import GeocodingProvider, empty_address
from app.services.geocoding.resolver import get_geocoding_provider, reset_geocoding_provider

__all__ = ["GeocodingProvider", "empty_address", "get_geocoding_provider", "reset_geocoding_provider"]
