"""Application configuration."""

import os
import tempfile
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


def _default_photo_cache_dir() -> Path:
    return Path(tempfile.gettempdir()) / "petspot" / "report"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str = "http://localhost:3000"
    photo_cache_dir: Path = _default_photo_cache_dir()
    http_timeout_seconds: float = 15.0
    upload_timeout_seconds: float = 30.0
    location_timeout_seconds: float = 10.0
    flow_kind: str = "MISSING"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_prefix="PETSPOT_",
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_base_url(raw: str) -> str:
    """Strip whitespace and trailing slashes from a base URL."""
    cleaned = raw.strip()
    while cleaned.endswith("/"):
        cleaned = cleaned[:-1]
    return cleaned
