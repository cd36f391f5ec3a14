"""Outbound GET with bounded retries and linear backoff."""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import urlsplit

import httpx

from .errors import RetriesExhaustedError, UpstreamStatusError

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class RetryOutcome(enum.Enum):
    """How a single attempt's status code is treated."""

    SUCCESS = "success"
    RETRYABLE = "retryable"
    FATAL = "fatal"


def classify_status(status: int) -> RetryOutcome:
    if status == 429 or 500 <= status < 600:
        return RetryOutcome.RETRYABLE
    if status < 400:
        return RetryOutcome.SUCCESS
    return RetryOutcome.FATAL


def _require_absolute(url: str) -> None:
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError(f"Expected an absolute http(s) URL, got {url!r}")


class RetryingFetcher:
    """Wraps an ``httpx.AsyncClient`` with retry and backoff handling.

    Responses are returned unread (``stream=True``) so callers decide
    whether to buffer them as text or relay the body chunk by chunk.
    Whoever receives a response is responsible for closing it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._client = client
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep

    async def fetch(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        *,
        max_attempts: Optional[int] = None,
    ) -> httpx.Response:
        """GET ``url``, retrying transport failures, 429 and 5xx responses."""

        _require_absolute(url)
        attempts = self._max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        last_error: Optional[Exception] = None
        got_response = False

        for attempt in range(attempts):
            if attempt > 0:
                await self._sleep(attempt * self._base_delay)

            request = self._client.build_request("GET", url, headers=headers)
            try:
                response = await self._client.send(request, stream=True)
            except httpx.TransportError as exc:
                logger.warning(
                    "Attempt %d/%d for %s failed: %s", attempt + 1, attempts, url, exc
                )
                last_error = exc
                continue

            got_response = True
            if classify_status(response.status_code) is RetryOutcome.RETRYABLE:
                await response.aclose()
                logger.warning(
                    "Attempt %d/%d for %s got HTTP %d",
                    attempt + 1,
                    attempts,
                    url,
                    response.status_code,
                )
                last_error = UpstreamStatusError(
                    f"Server responded with {response.status_code}",
                    status=response.status_code,
                )
                continue

            return response

        logger.error("Giving up on %s after %d attempts", url, attempts)
        if got_response:
            raise last_error
        raise RetriesExhaustedError(f"Max retries exceeded: {last_error}") from last_error


async def ensure_success(response: httpx.Response, what: str) -> httpx.Response:
    """Close ``response`` and raise unless it carries a 2xx status."""

    if response.is_success:
        return response
    await response.aclose()
    raise UpstreamStatusError(f"{what} failed: {response.status_code}", status=response.status_code)


async def read_text(response: httpx.Response) -> str:
    """Buffer a streamed response and decode it as text."""

    try:
        await response.aread()
        return response.text
    finally:
        await response.aclose()
