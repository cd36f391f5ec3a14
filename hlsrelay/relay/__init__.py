"""
Relay core for hlsrelay.

This package holds the pieces shared by every hosting surface: the retrying
fetcher, the manifest locator, the playlist rewriter and the request-scoped
service that strings them together.
"""

from .errors import (
    BadRequestError,
    LiveStreamPendingError,
    RelayError,
    RetriesExhaustedError,
    StreamNotFoundError,
    UpstreamError,
    UpstreamStatusError,
)
from .options import RelayOptions
from .service import RelayPath, RelayService, create_upstream_client, parse_relay_path

__all__ = [
    "BadRequestError",
    "LiveStreamPendingError",
    "RelayError",
    "RelayOptions",
    "RelayPath",
    "RelayService",
    "RetriesExhaustedError",
    "StreamNotFoundError",
    "UpstreamError",
    "UpstreamStatusError",
    "create_upstream_client",
    "parse_relay_path",
]
