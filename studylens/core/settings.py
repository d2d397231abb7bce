import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).resolve().parents[2]
ROOT_ENV = PROJECT_ROOT / ".env"
ROOT_ENV_LOCAL = PROJECT_ROOT / ".env.local"


class Settings(BaseSettings):
    """
    StudyLens - Global Configuration Registry
    Centralizes all environment variables using Pydantic Settings.
    """

    model_config = SettingsConfigDict(
        env_file=(str(ROOT_ENV), str(ROOT_ENV_LOCAL)),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Infrastructure
    SUPABASE_URL: Optional[str] = Field(
        None, validation_alias=AliasChoices("SUPABASE_URL", "VITE_SUPABASE_URL")
    )
    SUPABASE_SERVICE_KEY: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("SUPABASE_SERVICE_KEY", "SUPABASE_SERVICE_ROLE_KEY"),
    )

    # Security
    SERVICE_SECRET: str = "development-secret"

    # AI gateway (OpenAI-compatible chat completions)
    AI_API_KEY: Optional[str] = Field(
        None, validation_alias=AliasChoices("AI_API_KEY", "LOVABLE_API_KEY")
    )
    AI_BASE_URL: str = "https://ai.gateway.lovable.dev/v1"
    AI_MODEL: str = "google/gemini-2.5-flash"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_FALLBACK_MODEL: str = "gpt-4o-mini"
    AI_MAX_TOKENS: Optional[int] = 8192
    AI_RETRY_MAX_ATTEMPTS: int = 3
    AI_RETRY_BASE_DELAY_SECONDS: float = 1.0
    AI_RETRY_MAX_DELAY_SECONDS: float = 10.0

    # API Config
    API_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    APP_ENV: str = "local"
    RUNNING_IN_DOCKER: bool = False

    # Storage
    STUDY_STORAGE_BUCKET: str = "study-materials"
    SIGNED_URL_TTL_SECONDS: int = 3600
    SIGNED_URL_CACHE_SAFETY_SECONDS: int = 60
    STORAGE_MAX_RETRIES: int = 3
    STORAGE_BASE_DELAY_SECONDS: float = 1.0

    # Study viewer
    STUDY_VIEW_CACHE_MAX_ENTRIES: int = 64
    STUDY_VIEW_DEFAULT_MODE: Literal["topics", "pages"] = "topics"

    # Quiz generation
    QUIZ_PAGE_TEXT_CHAR_LIMIT: int = 800
    QUIZ_EXISTING_QUESTIONS_PREVIEW: int = 15
    QUIZ_TEMPERATURE: float = 0.4
    ANALYSIS_TEMPERATURE: float = 0.1

    # Analytics
    TOPIC_STATS_LIMIT: int = 5
    RECENT_ATTEMPTS_LIMIT: int = 20

    @field_validator("APP_ENV", "ENVIRONMENT", mode="before")
    @classmethod
    def _normalize_environment_labels(cls, value: str | None) -> str:
        return str(value or "").strip().lower()

    @property
    def is_deployed_environment(self) -> bool:
        app_env = self.APP_ENV or self.ENVIRONMENT
        if app_env in {"staging", "production", "prod"}:
            return True
        return bool(self.RUNNING_IN_DOCKER and app_env not in {"", "local", "development", "dev"})

    @model_validator(mode="after")
    def _enforce_cache_window(self) -> "Settings":
        if self.SIGNED_URL_CACHE_SAFETY_SECONDS >= self.SIGNED_URL_TTL_SECONDS:
            logger.warning(
                "SIGNED_URL_CACHE_SAFETY_SECONDS must be below SIGNED_URL_TTL_SECONDS; resetting to 0",
                extra={
                    "ttl_seconds": self.SIGNED_URL_TTL_SECONDS,
                    "safety_seconds": self.SIGNED_URL_CACHE_SAFETY_SECONDS,
                },
            )
            self.SIGNED_URL_CACHE_SAFETY_SECONDS = 0
        self.AI_BASE_URL = str(self.AI_BASE_URL or "").strip().rstrip("/")
        return self

    @property
    def signed_url_cache_seconds(self) -> int:
        return self.SIGNED_URL_TTL_SECONDS - self.SIGNED_URL_CACHE_SAFETY_SECONDS


settings = Settings()  # type: ignore[call-arg]
