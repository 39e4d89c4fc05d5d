"""
Configuration management for Local Gov Watch.

Supports multiple environments (local, development, production) with
different database, fetch, and AI gateway configurations.

Responsibility: Centralized configuration and environment management
"""

from datetime import date
from enum import Enum
from typing import Optional, List
import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment"""
    LOCAL = "local"
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class DatabaseConfig(BaseSettings):
    """Database configuration"""

    # Connection settings - prioritize DATABASE_URL env var
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    driver: str = Field(default="postgresql+asyncpg")
    host: Optional[str] = Field(default="localhost")
    port: Optional[int] = Field(default=5432)
    database: str = Field(default="localgov_watch")
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)

    # Connection pool settings
    pool_size: int = Field(default=5)
    max_overflow: int = Field(default=10)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=3600)

    # Query settings
    echo: bool = Field(default=False)
    echo_pool: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True  # Allow alias matching
    )

    @property
    def connection_string(self) -> str:
        """
        Build database connection string.

        Returns:
            SQLAlchemy connection string
        """
        # Use DATABASE_URL env var if provided
        if self.database_url:
            url = self.database_url
            # Ensure async driver for async connections
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif url.startswith("sqlite:///"):
                url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
            return url

        if self.driver.startswith("sqlite"):
            # Local file database, e.g. DB_DATABASE=localgov.db
            return f"{self.driver}:///{self.database}"

        auth = ""
        if self.username:
            auth = self.username
            if self.password:
                auth = f"{auth}:{self.password}"
            auth = f"{auth}@"

        host_port = self.host or "localhost"
        if self.port:
            host_port = f"{host_port}:{self.port}"

        return f"{self.driver}://{auth}{host_port}/{self.database}"


class FetchConfig(BaseSettings):
    """Outbound HTTP settings for scraping municipal websites"""

    user_agent: str = Field(
        default="LocalGovWatch/1.0 (+https://localgov.watch/about)"
    )
    timeout_seconds: float = Field(default=10.0)
    max_retries: int = Field(default=3)
    retry_delays: List[float] = Field(default=[1.0, 2.0, 4.0])
    max_requests_per_minute: int = Field(default=10)
    respect_robots_txt: bool = Field(default=True)
    pdf_max_mb: int = Field(default=15, alias="PDF_MAX_MB")

    model_config = SettingsConfigDict(
        env_prefix="FETCH_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    @property
    def pdf_max_bytes(self) -> int:
        return self.pdf_max_mb * 1024 * 1024


class IngestConfig(BaseSettings):
    """Ingestion run limits and pacing"""

    meetings_page_limit: int = Field(default=3)
    ordinance_page_limit: int = Field(default=5)
    legislation_page_limit: int = Field(default=10)
    bills_page_limit: int = Field(default=3)
    legistar_meetings_limit: int = Field(default=50)
    legistar_start_date: date = Field(default=date(2025, 1, 1))
    legistar_months_ahead: int = Field(default=3)
    legistar_month_pause_seconds: float = Field(default=2.0)
    source_pause_seconds: float = Field(default=1.0)
    max_recorded_errors: int = Field(default=10)
    allow_fixtures: bool = Field(
        default=True,
        description="Substitute sample records when a listing yields nothing"
    )

    model_config = SettingsConfigDict(
        env_prefix="INGEST_",
        case_sensitive=False,
        extra="ignore"
    )


class AIConfig(BaseSettings):
    """LLM gateway configuration for summaries and topic tags"""

    enable: bool = Field(default=False, alias="AI_ENABLE")
    api_key: Optional[str] = Field(default=None)
    gateway_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1/chat/completions"
    )
    model: str = Field(default="google/gemini-2.5-flash")
    summary_max_tokens: int = Field(default=300)
    tags_max_tokens: int = Field(default=100)
    summary_input_chars: int = Field(default=10000)
    tags_input_chars: int = Field(default=5000)
    timeout_seconds: float = Field(default=30.0)

    model_config = SettingsConfigDict(
        env_prefix="AI_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    @property
    def is_active(self) -> bool:
        """AI calls are made only with the feature flag on and a key present"""
        return self.enable and bool(self.api_key)


class AlertConfig(BaseSettings):
    """Email delivery for tracked-term alerts and digests"""

    resend_api_key: Optional[str] = Field(default=None)
    api_url: str = Field(default="https://api.resend.com/emails")
    from_address: str = Field(default="Local Gov Watch <onboarding@resend.dev>")
    frontend_url: str = Field(default="http://localhost:8080")

    model_config = SettingsConfigDict(
        env_prefix="ALERT_",
        case_sensitive=False,
        extra="ignore"
    )


class AppConfig(BaseSettings):
    """Application configuration"""

    # Environment
    environment: Environment = Field(default=Environment.LOCAL)
    debug: bool = Field(default=True)

    # Application metadata
    app_name: str = Field(default="Local Gov Watch")

    # Logging
    log_level: str = Field(default="INFO")

    # API settings
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    guest_requests_per_minute: int = Field(default=20)
    redis_url: Optional[str] = Field(default=None, description="Shared guest rate limit store")

    # CORS settings
    cors_origins: List[str] = Field(
        default=["http://localhost:8080", "http://localhost:5173"],
        description="Allowed CORS origins (JSON list or comma-separated in env)"
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from JSON string or comma-separated list"""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class Settings(BaseSettings):
    """
    Global settings container.

    Loads configuration from:
    1. Environment variables
    2. .env file
    3. Default values

    Example:
        settings = Settings()
        settings.fetch.max_requests_per_minute  # 10
    """

    app: AppConfig = Field(default_factory=AppConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    ingest: IngestConfig = Field(default_factory=IngestConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    alerts: AlertConfig = Field(default_factory=AlertConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
