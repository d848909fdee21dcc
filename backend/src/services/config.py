"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
PLACEHOLDER_PUBLISHABLE_KEY = "YOUR_PUBLISHABLE_KEY"
DEFAULT_CORS_ORIGINS = ("http://localhost:3000", "http://localhost:5173")


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    identity_publishable_key: Optional[str] = Field(
        default=None,
        description="Publishable key of the identity provider (exposed to clients)",
    )
    identity_secret_key: Optional[str] = Field(
        default=None,
        description="HMAC secret used to verify identity-provider bearer tokens",
    )
    enable_local_mode: bool = Field(
        default=True,
        description="Allow local-dev token bypass when running locally",
    )
    local_dev_token: Optional[str] = Field(
        default="local-dev-token",
        description="Static token accepted in local mode for development",
    )
    data_dir: Path = Field(..., description="Directory for the document DB and object storage")
    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Externally reachable base URL used to build durable file URLs",
    )
    openai_api_key: Optional[str] = Field(
        default=None, description="API key for image, vision and transcription calls"
    )
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    youtube_api_key: Optional[str] = Field(default=None, description="YouTube Data API key")
    provider_timeout_seconds: float = Field(default=120.0, gt=0)
    cors_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = Field(default="INFO")

    @field_validator("data_dir", mode="before")
    @classmethod
    def _normalize_data_dir(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("DATA_DIR is required")
        path = value if isinstance(value, Path) else Path(value)
        return path.expanduser().resolve()

    @field_validator("identity_secret_key", mode="before")
    @classmethod
    def _ensure_secret(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError(
                "IDENTITY_SECRET_KEY cannot be empty; unset the variable to rely on local mode"
            )
        if len(cleaned) < 16:
            raise ValueError("IDENTITY_SECRET_KEY must be at least 16 characters")
        return cleaned

    @field_validator("public_base_url", "openai_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def identity_configured(self) -> bool:
        key = (self.identity_publishable_key or "").strip()
        return bool(key) and key != PLACEHOLDER_PUBLISHABLE_KEY

    @property
    def database_path(self) -> Path:
        return self.data_dir / "documents.db"

    @property
    def storage_path(self) -> Path:
        return self.data_dir / "storage"


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    enable_local_mode = _read_env("ENABLE_LOCAL_MODE", "true").lower() not in {
        "0",
        "false",
        "no",
    }

    config = AppConfig(
        identity_publishable_key=_read_env("IDENTITY_PUBLISHABLE_KEY"),
        identity_secret_key=_read_env("IDENTITY_SECRET_KEY"),
        enable_local_mode=enable_local_mode,
        local_dev_token=_read_env("LOCAL_DEV_TOKEN", "local-dev-token"),
        data_dir=_read_env("DATA_DIR", str(DEFAULT_DATA_DIR)),
        public_base_url=_read_env("PUBLIC_BASE_URL", "http://localhost:8000"),
        openai_api_key=_read_env("OPENAI_API_KEY"),
        openai_base_url=_read_env("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        youtube_api_key=_read_env("YOUTUBE_API_KEY"),
        provider_timeout_seconds=float(_read_env("PROVIDER_TIMEOUT_SECONDS", "120")),
        cors_origins=_split_origins(_read_env("CORS_ORIGINS")),
        log_level=_read_env("LOG_LEVEL", "INFO").upper(),
    )
    # Storage services expect the data directory to exist.
    config.data_dir.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "PROJECT_ROOT",
    "DEFAULT_DATA_DIR",
    "PLACEHOLDER_PUBLISHABLE_KEY",
]
