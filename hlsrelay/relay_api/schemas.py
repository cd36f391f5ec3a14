"""Pydantic models exposed by the relay API."""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .. import __version__


class HealthStatus(BaseModel):
    """Service health payload."""

    status: Literal["ok"] = Field(default="ok")
    version: str = Field(default=__version__, description="Semantic version of the relay service.")
    max_attempts: int = Field(description="Configured upstream attempts per fetch.")
