"""
Configuration management for VitalScribe Interchange.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="MONGO_")

    uri: str = Field(default="", description="MongoDB connection URI")
    db_name: str = Field(default="vitalscribe", description="MongoDB database name")
    server_selection_timeout_ms: int = Field(
        default=15000, description="Server selection timeout in milliseconds"
    )

    @field_validator("uri")
    @classmethod
    def validate_mongo_uri(cls, v: str) -> str:
        """Validate MongoDB URI format (empty is checked at startup)."""
        if v and not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(
                "MongoDB URI must start with 'mongodb://' or 'mongodb+srv://'"
            )
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class InterchangeSettings(BaseSettings):
    """Patient import/export configuration settings."""

    model_config = SettingsConfigDict(env_prefix="INTERCHANGE_")

    max_upload_mb: int = Field(default=10, description="Maximum import file size in MB")
    allowed_extensions: List[str] = Field(
        default=["csv", "tsv", "txt"], description="Accepted import file extensions"
    )
    day_first: bool = Field(
        default=True,
        description="Read ambiguous numeric dates as day/month/year (03/04/2020 is 3 April)",
    )
    export_filename_prefix: str = Field(
        default="Respaldo_Clinico", description="Prefix of the backup export filename"
    )
    export_include_last_summary: bool = Field(
        default=False,
        description="Append the latest consultation summary as a ninth export column",
    )

    @field_validator("max_upload_mb")
    @classmethod
    def validate_max_upload(cls, v: int) -> int:
        """Validate max file size."""
        if v <= 0 or v > 100:
            raise ValueError("Max upload size must be between 1 and 100 MB")
        return v

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            if v.startswith("[") and v.endswith("]"):
                import json

                try:
                    v = json.loads(v)
                except json.JSONDecodeError:
                    v = v.strip("[]").split(",")
            else:
                v = v.split(",")
        return [ext.strip().lstrip(".").lower() for ext in v if ext and ext.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="VitalScribe Interchange", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    interchange: InterchangeSettings = Field(default_factory=InterchangeSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Nested groups read their own prefixed variables
        self.database = DatabaseSettings()
        self.logging = LoggingSettings()
        self.interchange = InterchangeSettings()

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories."""
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            logging.getLogger("vitalscribe").debug(f"Loaded environment from {candidate}")
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
