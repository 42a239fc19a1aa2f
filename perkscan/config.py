# perkscan/config.py

"""
Settings for the offer extraction service, read from the environment or a
local .env file. Field names are the environment variable names.
"""

import logging
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # -----------------------------------------------------------------------------
    # Core Service Configuration
    # -----------------------------------------------------------------------------
    PROJECT_NAME: str = "Card Offer Extractor"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # -----------------------------------------------------------------------------
    # Input bounds
    # -----------------------------------------------------------------------------
    # Screens rarely exceed a hundred lines; anything far above is not a capture.
    MAX_OCR_LINES: int = Field(400, description="Maximum OCR lines accepted per parse")
    MAX_LINE_LENGTH: int = Field(500, description="Longer OCR lines are truncated")

    # -----------------------------------------------------------------------------
    # Confidence
    # -----------------------------------------------------------------------------
    MIN_CONFIDENCE_OVERRIDE: Optional[float] = Field(
        None,
        description="Global floor applied after each issuer's own post-filter"
    )

    # -----------------------------------------------------------------------------
    # Sentry Monitoring
    # -----------------------------------------------------------------------------
    SENTRY_DSN: Optional[str] = None

    # -----------------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"

    # -----------------------------------------------------------------------------
    # CORS / Routes
    # -----------------------------------------------------------------------------
    ALLOWED_ORIGINS: List[str] = ["*"]
    API_V1_STR: str = "/api/v1"

    # -----------------------------------------------------------------------------
    # Validators (Pydantic v2 syntax)
    # -----------------------------------------------------------------------------
    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level

    @field_validator("MAX_OCR_LINES", "MAX_LINE_LENGTH")
    @classmethod
    def validate_positive_bound(cls, v: int) -> int:
        if v <= 0 or v > 10_000:
            raise ValueError("Input bounds must be between 1 and 10000")
        return v

    @field_validator("MIN_CONFIDENCE_OVERRIDE")
    @classmethod
    def validate_confidence_override(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 1.0:
            raise ValueError("MIN_CONFIDENCE_OVERRIDE must be between 0 and 1")
        return v


# -----------------------------------------------------------------------------
# Cached instance (singleton)
# -----------------------------------------------------------------------------
@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
)
