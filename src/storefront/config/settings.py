"""
Application settings with Pydantic v2 validation.

Loads configuration from ``STOREFRONT_*`` environment variables (or a
``.env`` file) with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Storage
    data_dir: Path = Path("data")
    db_file: str = "store.json"

    # Inventory
    low_stock_threshold: int = Field(default=10, ge=0)

    # Transactions
    lock_timeout: float = Field(default=5.0, gt=0)  # seconds
    transaction_attempts: int = Field(default=3, ge=1)
    retry_backoff: float = Field(default=0.05, ge=0)

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_file


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
