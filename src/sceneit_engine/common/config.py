"""SceneIt engine configuration via pydantic-settings."""

import warnings
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_SECRET_KEY = "insecure-dev-key-change-me"

# Hard ceiling on one page of transformation reads, enforced by every backend.
MAX_PAGE_SIZE = 50


class SceneItSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SCENEIT_")

    environment: str = "development"
    secret_key: str = _INSECURE_SECRET_KEY

    # Shared admin secret. Empty keeps the admin surface closed.
    admin_password: str = ""

    # Record store: "sql" (row-level, preferred), "blob_json" (whole-file
    # JSON arrays in blob storage, lossy under concurrent writers) or "none".
    storage_backend: Literal["sql", "blob_json", "none"] = "sql"
    db_url: str = "sqlite+aiosqlite:///./data/sceneit.db"
    blob_json_prefix: str = "analytics"

    # Image blob storage
    blob_backend: Literal["none", "local", "s3"] = "none"
    blob_local_dir: str = "./data/blobs"
    blob_public_base_url: str = "http://localhost:8080/blobs"
    s3_bucket: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint_url: str = ""
    s3_public_base_url: str = ""

    # Generative enhancement API
    google_api_key: str = ""
    enhance_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    enhance_model: str = "nano-banana-pro-preview"
    enhance_timeout: float = 60.0  # seconds
    max_image_bytes: int = 10 * 1024 * 1024

    # Ingestion and reads
    event_batch_limit: int = 50
    gallery_default_page_size: int = Field(20, ge=1, le=MAX_PAGE_SIZE)
    gallery_max_page_size: int = Field(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    recent_limit: int = 20

    # API
    api_title: str = "SceneIt Engine"
    api_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8080
    api_prefix: str = "/api"
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    @property
    def admin_enabled(self) -> bool:
        return bool(self.admin_password)

    def validate_for_production(self) -> None:
        """Raise on insecure defaults outside development, warn otherwise."""
        insecure = self.secret_key == _INSECURE_SECRET_KEY

        if self.environment != "development" and insecure:
            raise RuntimeError(
                f"Insecure default secret key in '{self.environment}' environment. "
                "Set SCENEIT_SECRET_KEY to a secure value. "
                "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if insecure:
            warnings.warn(
                "Using insecure default secret key — set SCENEIT_SECRET_KEY for production",
                UserWarning,
                stacklevel=2,
            )

        if self.storage_backend == "blob_json":
            warnings.warn(
                "blob_json storage rewrites whole collections on every append; "
                "concurrent writers can lose records. Prefer storage_backend='sql'.",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> SceneItSettings:
    settings = SceneItSettings()
    settings.validate_for_production()
    return settings
