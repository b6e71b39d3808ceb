"""Configuration helpers for the feed server."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _Settings(BaseSettings):
    api_key: Optional[str] = Field(default=None, alias="API_KEY")
    require_api_key: bool = Field(default=False, alias="REQUIRE_API_KEY")

    baas_base_url: str = Field(default="http://localhost:8000/api", alias="BAAS_BASE_URL")
    baas_app_id: str = Field(default="looped", alias="BAAS_APP_ID")
    baas_api_key: Optional[str] = Field(default=None, alias="BAAS_API_KEY")

    watermark_path: Optional[str] = Field(default=None, alias="WATERMARK_PATH")
    export_prefix: str = Field(default="looped", alias="EXPORT_PREFIX")
    asset_load_timeout_s: float = Field(default=30.0, alias="ASSET_LOAD_TIMEOUT_S")
    max_upload_bytes: int = Field(default=20_000_000, alias="MAX_UPLOAD_BYTES")
    cors_allow_origins: str = Field(
        default="http://localhost,http://127.0.0.1", alias="CORS_ALLOW_ORIGINS"
    )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def load_timeout(self) -> Optional[float]:
        """Asset load timeout in seconds; ``None`` when disabled with 0."""

        return self.asset_load_timeout_s if self.asset_load_timeout_s > 0 else None

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> _Settings:
    """Return cached application settings."""

    return _Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings (primarily for tests)."""

    get_settings.cache_clear()


__all__ = ["get_settings", "reset_settings_cache"]
