"""
Application configuration

SECURITY: Defaults are fail-safe for production.
- DEBUG defaults to False
- DATABASE_URL must be set explicitly in production
- Runtime validation catches insecure configurations
"""
import json
import os
import logging
from datetime import date, time, timezone, tzinfo
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_PINCODE_FORMAT = r"^[0-9A-Za-z][0-9A-Za-z -]{4,11}$"


def parse_holidays(value: str) -> List[date]:
    """
    Parse a holiday list from a JSON array or a comma-separated string of ISO dates.

    Raises ValueError on any entry that is not an ISO date.
    """
    if not value or not value.strip():
        return []
    value = value.strip()
    if value.startswith("["):
        raw = json.loads(value)
    else:
        raw = [item.strip() for item in value.split(",") if item.strip()]
    return sorted({date.fromisoformat(str(item)) for item in raw})


def parse_cutoff(value: Optional[str]) -> Optional[time]:
    """Parse an HH:MM dispatch cutoff; empty means no cutoff."""
    if not value or not value.strip():
        return None
    hours, _, minutes = value.strip().partition(":")
    return time(int(hours), int(minutes or 0))


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App - defaults are PRODUCTION safe
    APP_NAME: str = "Shipzone"
    DEBUG: bool = False  # SECURE DEFAULT: off in production
    ENVIRONMENT: str = "production"  # Explicit env marker
    LOG_LEVEL: str = "INFO"

    # Database (only needed by the SQL repository)
    DATABASE_URL: str = ""

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def convert_database_url(cls, v):
        """Convert postgres:// URLs to the asyncpg dialect."""
        if not v:
            return v
        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+asyncpg://", 1)
        elif v.startswith("postgresql://") and "+asyncpg" not in v:
            v = v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Database Pool Configuration
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600  # 1 hour

    # Shipping resolution
    SHIPPING_TIMEZONE: str = "UTC"
    SHIPPING_REPOSITORY_TIMEOUT_SECONDS: float = 5.0  # 0 disables the bound
    # Stored as plain strings so pydantic-settings does not try to JSON-decode them
    SHIPPING_HOLIDAYS: str = ""
    SHIPPING_DISPATCH_CUTOFF: str = ""
    SHIPPING_PINCODE_FORMAT: str = DEFAULT_PINCODE_FORMAT

    @field_validator("SHIPPING_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v):
        resolve_timezone(v)
        return v

    @field_validator("SHIPPING_HOLIDAYS")
    @classmethod
    def validate_holidays(cls, v):
        parse_holidays(v)
        return v

    @field_validator("SHIPPING_DISPATCH_CUTOFF")
    @classmethod
    def validate_cutoff(cls, v):
        parse_cutoff(v)
        return v

    @field_validator("SHIPPING_REPOSITORY_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v):
        if v < 0:
            raise ValueError("SHIPPING_REPOSITORY_TIMEOUT_SECONDS must be >= 0")
        return v

    @property
    def shipping_tz(self) -> tzinfo:
        return resolve_timezone(self.SHIPPING_TIMEZONE)

    @property
    def shipping_holidays(self) -> List[date]:
        return parse_holidays(self.SHIPPING_HOLIDAYS)

    @property
    def dispatch_cutoff(self) -> Optional[time]:
        return parse_cutoff(self.SHIPPING_DISPATCH_CUTOFF)

    @property
    def repository_timeout(self) -> Optional[float]:
        return self.SHIPPING_REPOSITORY_TIMEOUT_SECONDS or None

    @model_validator(mode="after")
    def validate_production_config(self):
        """Runtime validation to catch insecure production configurations."""
        if self.ENVIRONMENT == "production":
            errors = []

            if self.DEBUG:
                errors.append(
                    "DEBUG=True is forbidden in production. "
                    "Set DEBUG=false or ENVIRONMENT=development"
                )

            if not self.DATABASE_URL:
                errors.append("DATABASE_URL must be set in production.")
            elif "localhost" in self.DATABASE_URL or "127.0.0.1" in self.DATABASE_URL:
                errors.append(
                    "Localhost DATABASE_URL detected in production. "
                    "Configure proper database connection."
                )

            if errors:
                raise ValueError(
                    "PRODUCTION CONFIGURATION VIOLATIONS:\n" + "\n".join(f"  - {e}" for e in errors)
                )

        return self


# Try to load settings, provide helpful error on failure
try:
    settings = Settings()
except Exception as e:
    # In development, allow fallback defaults
    if os.getenv("ENVIRONMENT", "development") == "development":
        logger.warning(
            f"Settings validation failed ({e}), using development defaults. "
            "Set DATABASE_URL in the .env file."
        )
        os.environ["ENVIRONMENT"] = "development"
        settings = Settings(ENVIRONMENT="development")
    else:
        raise
