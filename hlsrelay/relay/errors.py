"""Error taxonomy shared by the relay core and its adapters."""
from __future__ import annotations


class RelayError(Exception):
    """Base class for failures the relay reports to its callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(RelayError):
    """Raised when the inbound path cannot be routed."""

    status_code = 400


class StreamNotFoundError(RelayError):
    """Raised when no manifest could be extracted for an identifier."""

    status_code = 404


class LiveStreamPendingError(StreamNotFoundError):
    """Raised when a live broadcast exists but has no manifest yet."""


class UpstreamError(RelayError):
    """Raised when an upstream fetch fails terminally."""

    status_code = 500


class UpstreamStatusError(UpstreamError):
    """Raised for an upstream response with an unusable status code."""

    def __init__(self, message: str, *, status: int) -> None:
        super().__init__(message)
        self.status = status


class RetriesExhaustedError(UpstreamError):
    """Raised when every attempt failed without obtaining a response."""
