"""Runtime configuration for the relay API."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..relay.options import (
    DEFAULT_ORIGIN,
    DEFAULT_REFERER,
    DEFAULT_WATCH_URL_TEMPLATE,
    RelayOptions,
)


class RelaySettings(BaseSettings):
    """Environment-aware settings for the relay service."""

    max_attempts: int = Field(
        default=3, ge=1, description="Upstream attempts per fetch before giving up."
    )
    base_delay: float = Field(
        default=1.0, ge=0, description="Seconds multiplied by the attempt index between retries."
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for each upstream request."
    )
    watch_url_template: str = Field(
        default=DEFAULT_WATCH_URL_TEMPLATE,
        description="Watch page URL; '{identifier}' is replaced by the requested ID.",
    )
    referer: str = Field(
        default=DEFAULT_REFERER, description="Referer sent on playlist and segment fetches."
    )
    origin: str = Field(
        default=DEFAULT_ORIGIN, description="Origin sent on segment fetches."
    )
    log_level: str = Field(default="INFO", description="Root logging level.")

    model_config = SettingsConfigDict(
        env_prefix="HLSRELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def to_options(self) -> RelayOptions:
        """Freeze the settings into the options structure the core consumes."""

        return RelayOptions(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            timeout=self.request_timeout,
            watch_url_template=self.watch_url_template,
            referer=self.referer,
            origin=self.origin,
        )
