"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Runtime-editable dashboard settings (site name, session timeout, rate limit
numbers) are not configuration; they live in the settings store.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field(
        "json",
        description="Log format: 'json' for machine-readable lines or 'plain'",
    )
    output: str = Field("stdout", description="Log destination: 'stdout' or 'file'")
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file' (default logs/app.log)",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to accept and propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    demo_password: str = Field(
        "password",
        description="The single password accepted for every seeded account",
    )
    rate_limit_enabled: bool = Field(
        True,
        description="Enable sliding-window rate limiting per session, API key or IP",
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers",
    )
    login_attempt_window_seconds: int = Field(
        900,
        description="Window over which failed logins per email are counted",
        ge=1,
    )
    activity_log_size: int = Field(
        200,
        description="Maximum number of activity items kept in memory",
        ge=1,
    )
    report_history_size: int = Field(
        50,
        description="Maximum number of generated reports kept in memory",
        ge=1,
    )
    generated_user_count: int = Field(
        40,
        description="Number of random users generated on top of the fixed seed users",
        ge=0,
    )
    seed: int | None = Field(
        None,
        description="Random seed for generated data and simulated jitter (None = random)",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class MockSettings(BaseSettings):
    """Network simulation for the in-memory service layer."""

    latency_enabled: bool = Field(
        True,
        description="Sleep for each operation's nominal delay before answering",
    )
    latency_scale: float = Field(
        1.0,
        description="Multiplier applied to every nominal delay",
        ge=0.0,
    )
    failure_rate: float = Field(
        0.0,
        description="Probability that any operation fails with a simulated error",
        ge=0.0,
        le=1.0,
    )
    login_failure_rate: float = Field(
        0.1,
        description="Probability that a login attempt fails with a simulated error",
        ge=0.0,
        le=1.0,
    )

    model_config = SettingsConfigDict(
        env_prefix="MOCK_",
        case_sensitive=False,
    )


def _build_log_settings() -> LogSettings:
    return LogSettings()  # type: ignore[call-arg]


def _build_app_settings() -> AppSettings:
    """Build app settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_mock_settings() -> MockSettings:
    return MockSettings()  # type: ignore[call-arg]


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting is malformed.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=_build_log_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    mock: MockSettings = Field(default_factory=_build_mock_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
