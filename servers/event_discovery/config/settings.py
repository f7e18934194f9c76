"""
Provider credentials and service settings.

Credentials are read once, at construction time. A provider whose credential
is missing is disabled, never an error.
"""

import os
from typing import Mapping, Optional

import structlog
from pydantic import BaseModel, Field, field_validator

log = structlog.get_logger(__name__)

DEFAULT_PROVIDER_TIMEOUT = 5.0
DEFAULT_CACHE_TTL_MINUTES = 30
DEFAULT_PAGE_SIZE = 50


class ProviderCredentials(BaseModel):
    """One credential set per provider; None means not configured."""

    ticketmaster_api_key: Optional[str] = None
    seatgeek_client_id: Optional[str] = None
    seatgeek_client_secret: Optional[str] = None
    predicthq_access_token: Optional[str] = None
    serpapi_key: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value


class DiscoverySettings(BaseModel):
    """Settings for the event discovery service."""

    credentials: ProviderCredentials = Field(default_factory=ProviderCredentials)
    provider_timeout: float = Field(default=DEFAULT_PROVIDER_TIMEOUT, gt=0)
    cache_ttl_minutes: float = Field(default=DEFAULT_CACHE_TTL_MINUTES, gt=0)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DiscoverySettings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            ValueError: If a numeric setting is not a valid number
        """
        env = os.environ if environ is None else environ

        credentials = ProviderCredentials(
            ticketmaster_api_key=env.get("TICKETMASTER_API_KEY"),
            seatgeek_client_id=env.get("SEATGEEK_CLIENT_ID"),
            seatgeek_client_secret=env.get("SEATGEEK_CLIENT_SECRET"),
            predicthq_access_token=env.get("PREDICTHQ_ACCESS_TOKEN"),
            serpapi_key=env.get("SERPAPI_KEY"),
        )

        settings = cls(
            credentials=credentials,
            provider_timeout=env.get("EVENTS_PROVIDER_TIMEOUT") or DEFAULT_PROVIDER_TIMEOUT,
            cache_ttl_minutes=env.get("EVENTS_CACHE_TTL_MINUTES") or DEFAULT_CACHE_TTL_MINUTES,
        )

        configured = [
            name for name, value in credentials.model_dump().items()
            if value and not name.endswith("_secret")
        ]
        log.info("settings_loaded", configured_credentials=configured)

        return settings
