"""
Core settings and environment variables for Vita.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Vita"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # "production" hides stack traces in error bodies
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # Mock DB mode for local development and tests
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: Optional[str] = None  # Optional JSON file backing the mock DB

    # Distance matrix (driving distance / ETA)
    # - GOOGLE_MAPS_API_KEY missing is a supported state: Haversine fallback is used
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    DISTANCE_MATRIX_TIMEOUT_SECONDS: float = 5.0
    DISTANCE_MATRIX_BATCH_LIMIT: int = 25
    DISTANCE_CACHE_TTL_SECONDS: float = 300.0
    DISTANCE_CACHE_MAX_ENTRIES: int = 5000
    FALLBACK_AVERAGE_SPEED_KMH: float = 30.0

    # Resource directory behaviour
    REPORT_FLAG_THRESHOLD: int = 3

    # Community alerts expire this long after they are posted
    ALERT_TTL_HOURS: float = 24.0
    # Legacy precedence: a free-text query ignores type/status/metadata filters.
    # Set to False to AND the query with the structured filters instead.
    QUERY_OVERRIDES_FILTERS: bool = True

    # Reverse geocoding of new resources without an address
    # - GEOCODING_PROVIDER: "nominatim" (default, no API key) or "google"
    GEOCODING_PROVIDER: str = "nominatim"
    RESOLVE_ADDRESS_ON_CREATE: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()
