"""
Configuration module for the ad wall backend.

Manages environment variables for the storage backend, the optional
Upstash Redis connection and video uploads. Every value has a default
suitable for local development, so the service starts with no
environment at all (in-memory storage).
"""

import os
from dataclasses import dataclass
from typing import Optional


STORE_BACKENDS = ("memory", "file", "async-file", "upstash")

DEFAULT_FORM_CONFIG = {
    "title": "Ad Form",
    "fields": ["title", "description", "link", "videos"],
}


@dataclass(frozen=True)
class UpstashConfig:
    """
    Immutable configuration for the Upstash Redis REST connection.

    Attributes:
        rest_url: The Upstash Redis REST API endpoint
        rest_token: Authentication token for Upstash Redis
        ads_key: Redis key holding the JSON-encoded ads array
    """
    rest_url: str = ""
    rest_token: str = ""
    ads_key: str = "adwall:ads"

    @property
    def headers(self) -> dict[str, str]:
        """Returns the authorization headers for Upstash REST API."""
        return {
            "Authorization": f"Bearer {self.rest_token}",
            "Content-Type": "application/json"
        }

    @property
    def configured(self) -> bool:
        return bool(self.rest_url and self.rest_token)


@dataclass(frozen=True)
class StorageConfig:
    """
    Configuration for ad persistence.

    Attributes:
        backend: One of "memory", "file", "async-file", "upstash"
        data_file: Path of the JSON document for the file backends
    """
    backend: str = "memory"
    data_file: str = "data/ads.json"


@dataclass(frozen=True)
class UploadConfig:
    """
    Configuration for video uploads.

    Attributes:
        directory: Where uploaded files are written
        max_files: Maximum number of files per request
        max_bytes: Maximum size of a single file
        allowed_prefix: Content-type prefix a file must carry
    """
    directory: str = "uploads"
    max_files: int = 5
    max_bytes: int = 50 * 1024 * 1024
    allowed_prefix: str = "video/"


class Settings:
    """
    Central settings manager that aggregates all configuration.

    Loads configuration from environment variables with fallbacks
    to default values. Tests build their own instance after patching
    the environment.
    """

    def __init__(self):
        backend = os.getenv("ADWALL_STORE", "memory").strip().lower()
        if backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown ADWALL_STORE '{backend}', expected one of {', '.join(STORE_BACKENDS)}"
            )

        self.storage = StorageConfig(
            backend=backend,
            data_file=os.getenv("ADWALL_DATA_FILE", "data/ads.json")
        )

        self.upstash = UpstashConfig(
            rest_url=os.getenv("UPSTASH_REDIS_REST_URL", "").rstrip("/"),
            rest_token=os.getenv("UPSTASH_REDIS_REST_TOKEN", ""),
            ads_key=os.getenv("ADWALL_UPSTASH_KEY", "adwall:ads")
        )

        self.upload = UploadConfig(
            directory=os.getenv("ADWALL_UPLOAD_DIR", "uploads"),
            max_files=int(os.getenv("ADWALL_UPLOAD_MAX_FILES", "5")),
            max_bytes=int(os.getenv("ADWALL_UPLOAD_MAX_BYTES", str(50 * 1024 * 1024)))
        )

        self.json_limit_bytes = int(
            os.getenv("ADWALL_JSON_LIMIT_BYTES", str(10 * 1024 * 1024))
        )
        self.form_config_file: Optional[str] = os.getenv("ADWALL_FORM_CONFIG_FILE") or None

    @property
    def server_port(self) -> int:
        """Server port from environment variable."""
        return int(os.getenv("PORT", "8000"))

    @property
    def log_level(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins, comma separated in the environment."""
        raw = os.getenv("ADWALL_CORS_ORIGINS", "*")
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @property
    def api_title(self) -> str:
        """API title for OpenAPI documentation."""
        return "Ad Wall API"

    @property
    def api_version(self) -> str:
        """API version string."""
        return "1.0.0"

    @property
    def api_description(self) -> str:
        """API description for OpenAPI documentation."""
        return (
            "Backend for a classified-ads wall: list, create, update and delete "
            "ads, count clicks, serve the ad form configuration and accept video uploads."
        )


# Global settings instance - imported throughout the application
settings = Settings()
