"""
HR System Configuration Module

Environment-based configuration with fail-fast validation.
All settings are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_prefix="HRSYSTEM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory for runtime data (db, session key)",
    )

    # Storage
    storage_backend: Literal["memory", "sqlite"] = Field(
        default="sqlite",
        description="Storage Port implementation backing the engine",
    )

    # Sessions and credentials
    session_ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="Lifetime of a bearer token after login",
    )
    recruiter_api_key: Optional[SecretStr] = Field(
        default=None,
        description="Key required to create postings and advance candidacies",
    )
    scrypt_n: int = Field(
        default=2**14,
        ge=2,
        description="Scrypt CPU/memory cost used for credential digests",
    )

    @field_validator("data_dir", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Convert string to Path."""
        return Path(v)

    @field_validator("scrypt_n")
    @classmethod
    def power_of_two(cls, v: int) -> int:
        """Scrypt requires the cost parameter to be a power of two."""
        if v & (v - 1):
            raise ValueError("scrypt_n must be a power of two")
        return v

    def ensure_data_dir(self) -> None:
        """Create data directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        """Path to SQLite database."""
        return self.data_dir / "hr_store.db"

    @property
    def session_key_path(self) -> Path:
        """Path to the key used to mint session tokens."""
        return self.data_dir / ".session_key"


@lru_cache
def get_settings() -> Settings:
    """
    Get validated settings instance.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    settings = Settings()
    settings.ensure_data_dir()
    return settings
