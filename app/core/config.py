"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables (and .env)
- Centralizes config values (entry token, port, limits)
- Builds the ordered list of WATI destinations
- Validates configuration on startup
"""

import os
from typing import Dict, List, Literal, Mapping, Optional

from dotenv import dotenv_values
from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings

from app.core.exceptions import ConfigurationError
from app.core.logging import get_logger
from app.models.destination import Destination
from utils.constants import (
    DEFAULT_ENTRY_TOKEN,
    DEFAULT_FORWARD_TIMEOUT_SECONDS,
    DEFAULT_PORT,
    DEFAULT_RATE_LIMIT_MAX,
    DEFAULT_RATE_LIMIT_WINDOW_MS,
    DEFAULT_TEMPLATE_NAME,
)

logger = get_logger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Destinations are not fields here: their count is open-ended
    (DEST_2_*, DEST_3_*, ...), so they are scanned by load_destinations().
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Server
    HOST: str = Field(
        default="0.0.0.0",
        description="Address uvicorn binds to"
    )
    PORT: int = Field(
        default=DEFAULT_PORT,
        description="Port uvicorn listens on"
    )

    # Security
    ENTRY_TOKEN: str = Field(
        default=DEFAULT_ENTRY_TOKEN,
        validate_default=True,
        description="Bearer token every inbound request must present"
    )

    # WhatsApp template
    TEMPLATE_NAME: str = Field(
        default=DEFAULT_TEMPLATE_NAME,
        description="WATI template and broadcast name for verification codes"
    )

    # Outbound
    FORWARD_TIMEOUT_SECONDS: float = Field(
        default=DEFAULT_FORWARD_TIMEOUT_SECONDS,
        description="Timeout for the call to a destination, in seconds"
    )

    # Rate Limiting (global, not per client)
    RATE_LIMIT_MAX: int = Field(
        default=DEFAULT_RATE_LIMIT_MAX,
        description="Maximum requests per window"
    )
    RATE_LIMIT_WINDOW_MS: int = Field(
        default=DEFAULT_RATE_LIMIT_WINDOW_MS,
        description="Rate limit window length in milliseconds"
    )

    # Application
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @field_validator("ENTRY_TOKEN")
    @classmethod
    def validate_entry_token(cls, v: str, info: ValidationInfo) -> str:
        """Ensure the entry token is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == DEFAULT_ENTRY_TOKEN:
            raise ValueError("ENTRY_TOKEN must be changed in production environment")
        return v

    @field_validator("RATE_LIMIT_MAX", "RATE_LIMIT_WINDOW_MS", "FORWARD_TIMEOUT_SECONDS")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    def get_destinations(self) -> List[Destination]:
        """Destinations from the process environment, falling back to .env."""
        return load_destinations(read_environment())

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


def read_environment(env_file: Optional[str] = ".env") -> Dict[str, str]:
    """
    Merges .env values with the process environment.
    Real environment variables win over the file.
    """
    merged: Dict[str, str] = {}
    if env_file and os.path.exists(env_file):
        merged.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    merged.update(os.environ)
    return merged


def load_destinations(environ: Mapping[str, str]) -> List[Destination]:
    """
    Builds the ordered destination list.

    - The primary destination (WATI_URL, WATI_TOKEN, CHANNEL_NUMBER) comes
      first, and only when all three are set.
    - DEST_2_*, DEST_3_*, ... follow in numeric order. Scanning stops at the
      first n without DEST_{n}_URL.

    Args:
        environ: Environment mapping (usually read_environment())

    Returns:
        Destinations in rotation order (may be empty)
    """
    destinations: List[Destination] = []

    primary = (environ.get("WATI_URL"), environ.get("WATI_TOKEN"), environ.get("CHANNEL_NUMBER"))
    if all(primary):
        destinations.append(Destination(url=primary[0], token=primary[1], channel=primary[2]))

    n = 2
    while environ.get(f"DEST_{n}_URL"):
        destinations.append(
            Destination(
                url=environ[f"DEST_{n}_URL"],
                token=environ.get(f"DEST_{n}_TOKEN", ""),
                channel=environ.get(f"DEST_{n}_CHANNEL", "")
            )
        )
        n += 1

    return destinations


def validate_destinations(destinations: List[Destination]) -> List[Destination]:
    """
    Validates the destination list before the relay accepts traffic.
    Raises ConfigurationError if it cannot forward anything; incomplete
    entries are kept (they still take their rotation turn) but logged.
    """
    if not destinations:
        raise ConfigurationError(
            "No destinations configured: set WATI_URL, WATI_TOKEN and CHANNEL_NUMBER "
            "(and optionally DEST_2_URL, DEST_2_TOKEN, DEST_2_CHANNEL, ...)"
        )

    for index, dest in enumerate(destinations, start=1):
        if not dest.token:
            logger.warning(f"Destination {index} ({dest.url}) has no token")
        if not dest.channel:
            logger.warning(f"Destination {index} ({dest.url}) has no channel number")

    return destinations


def describe_config(settings: "Settings", environ: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """
    Summary of the loaded configuration with secrets masked, for startup logs.
    """
    summary: Dict[str, Optional[str]] = {
        "ENVIRONMENT": settings.ENVIRONMENT,
        "PORT": str(settings.PORT),
        "ENTRY_TOKEN": "[OK]" if settings.ENTRY_TOKEN != DEFAULT_ENTRY_TOKEN else "[DEFAULT]",
        "WATI_URL": environ.get("WATI_URL"),
        "WATI_TOKEN": "[OK]" if environ.get("WATI_TOKEN") else "[MISSING]",
        "CHANNEL_NUMBER": environ.get("CHANNEL_NUMBER"),
    }

    n = 2
    while environ.get(f"DEST_{n}_URL"):
        summary[f"DEST_{n}_URL"] = environ.get(f"DEST_{n}_URL")
        summary[f"DEST_{n}_TOKEN"] = "[OK]" if environ.get(f"DEST_{n}_TOKEN") else "[MISSING]"
        summary[f"DEST_{n}_CHANNEL"] = environ.get(f"DEST_{n}_CHANNEL")
        n += 1

    return summary


# Global settings instance
settings = Settings()
