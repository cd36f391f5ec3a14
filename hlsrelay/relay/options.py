"""Static configuration passed from the adapters into the relay core."""
from __future__ import annotations

from dataclasses import dataclass

from .headers import USER_AGENTS

DEFAULT_WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={identifier}"
DEFAULT_REFERER = "https://www.youtube.com/"
DEFAULT_ORIGIN = "https://www.youtube.com"


@dataclass(frozen=True, slots=True)
class RelayOptions:
    """Read-only knobs for fetching, retrying and header spoofing."""

    max_attempts: int = 3
    base_delay: float = 1.0
    timeout: float = 30.0
    watch_url_template: str = DEFAULT_WATCH_URL_TEMPLATE
    referer: str = DEFAULT_REFERER
    origin: str = DEFAULT_ORIGIN
    user_agents: tuple[str, ...] = USER_AGENTS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")
        if not self.user_agents:
            raise ValueError("user_agents must contain at least one entry")

    def watch_url(self, identifier: str) -> str:
        return self.watch_url_template.format(identifier=identifier)
