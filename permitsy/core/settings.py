"""Application settings with Pydantic validation."""

from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from permitsy.constants import Intervals, Timeouts


class PermitsySettings(BaseSettings):
    """Application settings with validation and environment variable support."""

    # Backend connection
    backend_url: str = Field(..., description="Base URL of the hosted backend")
    backend_anon_key: SecretStr = Field(..., description="Public (anon) API key of the backend")
    backend_schema: str = Field(default="public", description="Exposed database schema")
    request_timeout: float = Field(
        default=float(Timeouts.HTTP_REQUEST_SECONDS),
        gt=0,
        description="Total timeout for a single backend request in seconds",
    )

    # Direct Postgres URL, only used by Alembic migrations
    database_url: Optional[str] = Field(
        default=None, description="PostgreSQL connection URL for migrations"
    )

    # Environment
    env: str = Field(
        default="production", description="Environment (production, development, testing)"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(default=False, description="Write JSON lines to the log file")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")

    # Schema handling
    schema_auto_repair: bool = Field(
        default=False,
        description="Run the visa_packages repair cascade when a save hits a schema error",
    )
    validate_schema_on_startup: bool = Field(
        default=False, description="Fail web startup when the backend schema does not match"
    )

    # Maintenance scripts
    script_statement_pause: float = Field(
        default=Intervals.SCRIPT_STATEMENT_PAUSE,
        ge=0,
        description="Pause between statements in maintenance scripts, in seconds",
    )

    # SPA hosting
    dist_dir: Path = Field(default=Path("dist"), description="Directory of the built SPA")
    host: str = Field(default="0.0.0.0", description="Bind address for the web server")
    port: int = Field(default=3000, ge=1, le=65535, description="Port for the web server")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("backend_url")
    @classmethod
    def validate_backend_url(cls, v: str) -> str:
        """Validate backend URL scheme and strip the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("BACKEND_URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("backend_anon_key")
    @classmethod
    def validate_anon_key(cls, v: SecretStr) -> SecretStr:
        """Reject blank API keys."""
        if not v.get_secret_value().strip():
            raise ValueError("BACKEND_ANON_KEY must not be empty")
        return v

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "development", "testing", "staging", "local"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    def masked_key(self) -> str:
        """API key with everything but the last four characters hidden."""
        key = self.backend_anon_key.get_secret_value()
        return f"***{key[-4:]}" if len(key) > 4 else "***"

    def is_development(self) -> bool:
        """Check if running in a development environment."""
        return self.env in ("development", "local")

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"


# Singleton instance
_settings: Optional[PermitsySettings] = None


def get_settings() -> PermitsySettings:
    """
    Get application settings singleton.

    Returns:
        PermitsySettings instance

    Raises:
        ValidationError: If required settings are missing or invalid
    """
    global _settings
    if _settings is None:
        _settings = PermitsySettings()  # type: ignore[call-arg]
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
