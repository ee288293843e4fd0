"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Dict, List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Tripsplit"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Currency
    DEFAULT_CURRENCY: str = "USD"  # Used when an expense arrives without a currency code
    DEFAULT_DECIMAL_PLACES: int = 2  # Precision for codes missing from the ISO 4217 table
    CURRENCY_PRECISION_OVERRIDES: Union[Dict[str, int], str] = {}  # e.g. "KRW:2,XYZ:1"

    @field_validator("CURRENCY_PRECISION_OVERRIDES", mode="before")
    @classmethod
    def parse_precision_overrides(cls, v):
        """Parse CURRENCY_PRECISION_OVERRIDES from "CODE:places" pairs or a mapping."""
        if isinstance(v, str):
            overrides = {}
            for pair in v.split(","):
                if not pair.strip():
                    continue
                code, _, places = pair.partition(":")
                overrides[code.strip().upper()] = int(places)
            return overrides
        return {code.upper(): int(places) for code, places in (v or {}).items()}

    # Splitting
    EQUAL_SPLIT_REMAINDER: str = "none"  # Options: "none" (keep rounding residue), "first" (hand it out by id order)

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


settings = Settings()
