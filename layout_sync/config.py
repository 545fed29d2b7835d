"""
Configuration management using pydantic-settings.
Loads from environment variables and .env file.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class LayoutConfig(BaseSettings):
    """
    Layout grouping and transfer settings.

    These settings can be overridden with environment variables.
    """
    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Batch Layout Sync API"
    VERSION: str = "0.1.0"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None  # None -> console only
    LOG_MAX_BYTES: int = 50 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 10
    LOG_BACKUP_DAYS: int = 30

    # CORS settings (comma-separated string)
    BACKEND_CORS_ORIGINS: str = "*"

    # Clustering
    LAYOUT_GROUP_THRESHOLD: float = 0.8

    # Safety limits
    MAX_BATCH_IMAGES: int = 500

    @field_validator("LAYOUT_GROUP_THRESHOLD", mode="before")
    @classmethod
    def validate_threshold(cls, v: object) -> float:
        """
        Clamp the grouping threshold into [0, 1].
        """
        value = float(v)
        if value < 0.0 or value > 1.0:
            logger.warning(f"LAYOUT_GROUP_THRESHOLD={value} is outside [0, 1], clamping.")
        return max(0.0, min(1.0, value))

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> str:
        return (v or "INFO").upper()

    class Config:
        case_sensitive = True
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Allow extra fields in .env


class Settings(LayoutConfig):
    """
    Combined application settings.
    """
    pass


# Create settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings
