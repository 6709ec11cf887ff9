"""Application configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    PROJECT_NAME: str = "Oliver Review Client"
    API_V1_STR: str = "/api/v1"

    BACKEND_API_URL: AnyUrl = Field(
        "http://localhost:8080/api/v1",
        description="Base URL of the Oliver FSRS backend REST API",
    )
    REQUEST_TIMEOUT_SECONDS: float = Field(15.0, description="Timeout for backend HTTP calls")

    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    REVIEW_PAGE_SIZE: int = Field(10, ge=1, description="Rows per review queue page")
    REVIEW_FETCH_LIMIT: int = Field(
        100, ge=1, description="Upper bound of cards requested when building the review queue"
    )
    RECOMMENDATION_PAGE_SIZE: int = Field(10, ge=1, description="Items per recommendation page")
    FEEDBACK_TOAST_SECONDS: float = Field(3.0, description="Lifetime of feedback toasts")
    QUERY_CACHE_TTL_SECONDS: int = Field(60, ge=0, description="TTL for cached backend queries")
    QUERY_CACHE_MAX_ENTRIES: int = Field(1024, ge=1, description="Upper bound of cached backend queries")
    SESSION_REGISTRY_MAX_SESSIONS: int = Field(
        1024, ge=1, description="Sessions whose recommended problems are remembered at once"
    )
    SESSION_REGISTRY_IDLE_SECONDS: int = Field(
        3600, ge=1, description="Idle time after which a session's recommended problems are forgotten"
    )

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


settings = get_settings()
