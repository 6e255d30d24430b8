"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DISPATCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Driver Assignment API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level applied by create_app().")

    default_algorithm: Literal["simple", "geographic", "workload-balancing", "weighted-scoring"] = Field(
        default="weighted-scoring",
        description="Strategy used when a request does not name one.",
    )
    max_assignments_per_driver: int = Field(default=3, ge=1)
    workload_balancing_enabled: bool = True
    geographic_priority_enabled: bool = Field(
        default=True,
        description="Restrict candidates to drivers serving the restaurant's city/state before selection.",
    )
    lookback_days: int = Field(default=7, ge=1, description="Trailing window for historical workload.")

    location_weight: float = Field(default=0.40, ge=0.0)
    proximity_weight: float = Field(default=0.30, ge=0.0)
    performance_weight: float = Field(default=0.15, ge=0.0)
    workload_weight: float = Field(default=0.15, ge=0.0)

    compare_max_workers: int = Field(default=4, ge=1, description="Threads used when comparing strategies.")
    enrichment_max_workers: int = Field(
        default=8,
        ge=1,
        description="Threads used for candidate metric lookups within one restaurant.",
    )

    repository_backend: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Collaborator used for driver lookup and assignment creation.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return str(value).strip().upper() or "INFO"


settings = Settings()
