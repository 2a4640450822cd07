"""
Configuration management for the Review API.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    app_name: str = "Review API"
    api_prefix: str = "/api/v1"
    cors_origins: str = Field(
        default="*",
        description="Comma-separated allowed origins"
    )
    log_level: str = "INFO"

    upload_dir: Path = Path("./uploads")
    upload_url_prefix: str = "/uploads"
    max_image_size: int = Field(default=5 * 1024 * 1024, ge=1)
    max_images_per_review: int = Field(default=5, ge=0)

    summary_cache_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    summary_cache_ttl: int = Field(
        default=0,
        ge=0,
        description="Summary expiry in seconds, 0 keeps entries until invalidated"
    )

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
