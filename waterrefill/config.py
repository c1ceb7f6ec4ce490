"""Application configuration management."""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from project-level .env if available
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=PROJECT_ROOT / ".env")


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = os.getenv("APP_NAME", "WaterRefill")
    app_version: str = os.getenv("APP_VERSION", "2.0.0")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "False") == "True"

    # Server
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))
    reload: bool = os.getenv("RELOAD", "True") == "True"

    # Document store
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./waterrefill.db")

    # Object storage
    object_storage_backend: str = os.getenv("OBJECT_STORAGE_BACKEND", "filesystem")
    object_storage_url: str = os.getenv("OBJECT_STORAGE_URL", "http://localhost:9000/waterrefill")
    object_storage_token: str = os.getenv("OBJECT_STORAGE_TOKEN", "")
    object_storage_dir: str = os.getenv("OBJECT_STORAGE_DIR", str(PROJECT_ROOT / "storage"))
    object_storage_timeout: float = float(os.getenv("OBJECT_STORAGE_TIMEOUT", "30"))

    # Local on-device state (drafts, preferences)
    local_store_path: str = os.getenv("LOCAL_STORE_PATH", str(PROJECT_ROOT / "local_state.json"))

    # Search
    default_search_radius_miles: float = float(os.getenv("DEFAULT_SEARCH_RADIUS_MILES", "1.0"))
    max_search_radius_miles: float = float(os.getenv("MAX_SEARCH_RADIUS_MILES", "50.0"))
    region_debounce_seconds: float = float(os.getenv("REGION_DEBOUNCE_SECONDS", "1.0"))

    # Photos
    photo_max_dimension: int = int(os.getenv("PHOTO_MAX_DIMENSION", "1600"))
    photo_max_bytes: int = int(os.getenv("PHOTO_MAX_BYTES", str(1024 * 1024)))
    photo_jpeg_quality: int = int(os.getenv("PHOTO_JPEG_QUALITY", "70"))

    # CORS
    cors_origins: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ALLOW_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000",
        ).split(",")
        if origin.strip()
    ]
    cors_allow_credentials: bool = True

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "json")
    centralized_logging_enabled: bool = os.getenv("CENTRALIZED_LOGGING_ENABLED", "False") == "True"
    centralized_log_level: str = os.getenv("CENTRALIZED_LOG_LEVEL", "WARNING")
    centralized_log_queue_size: int = int(os.getenv("CENTRALIZED_LOG_QUEUE_SIZE", "1000"))

    # Operations endpoints (empty token disables the check)
    system_api_token: str = os.getenv("SYSTEM_API_TOKEN", "")

    # Identity (authentication itself is handled upstream)
    user_id_header: str = os.getenv("USER_ID_HEADER", "X-User-Id")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


# Global settings instance
settings = Settings()
