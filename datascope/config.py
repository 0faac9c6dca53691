"""Configuration management for Datascope.

Uses pydantic-settings for type-safe environment variable loading.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DATASCOPE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API",
    )

    # Upload Settings
    max_records: int = Field(
        default=100_000,
        gt=0,
        description="Maximum number of records accepted per upload",
    )
    preview_rows: int = Field(
        default=10,
        gt=0,
        description="Rows returned and sampled by data previews",
    )

    # Analysis Settings
    analysis_parallel: bool = Field(
        default=False,
        description="Run the calculators on a thread pool",
    )
    analysis_max_workers: int = Field(
        default=4,
        gt=0,
        description="Worker threads for parallel analysis",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
