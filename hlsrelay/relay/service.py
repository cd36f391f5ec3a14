"""
Request-scoped orchestration shared by the HTTP and CLI adapters.

A ``RelayService`` is built per inbound request around a fresh
``httpx.AsyncClient``; the only thing shared between requests is the frozen
``RelayOptions``.
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Literal, Optional
from urllib.parse import unquote

import httpx

from .errors import BadRequestError, LiveStreamPendingError, StreamNotFoundError
from .fetcher import RetryingFetcher, Sleep, ensure_success, read_text
from .headers import master_headers, page_headers, pick_user_agent, segment_headers
from .locator import LookupStatus, ManifestLookup, locate_manifest
from .options import RelayOptions
from .rewriter import (
    proxy_base_for,
    resolution_base,
    rewrite_master_playlist,
    rewrite_playlist,
)

logger = logging.getLogger(__name__)

USAGE_MESSAGE = "Usage: /VIDEO_ID or /VIDEO_ID/master.m3u8"
NOT_FOUND_MESSAGE = "No stream found. Video might be private, deleted, or not available."
LIVE_PENDING_MESSAGE = "Livestream detected but no HLS manifest available. Try again later."

SEGMENT_MARKER = "seg"


@dataclass(frozen=True, slots=True)
class RelayPath:
    """An inbound path split into identifier, mode and encoded remainder."""

    identifier: str
    mode: Literal["root", "segment"]
    remainder: str = ""

    @property
    def target_url(self) -> str:
        """The percent-decoded upstream URL of a segment request."""

        return unquote(self.remainder)


def parse_relay_path(raw_path: str) -> RelayPath:
    """Split a raw (still percent-encoded) request path.

    ``/{id}`` and ``/{id}/master.m3u8`` are root requests,
    ``/{id}/seg/{encoded-url}`` is a segment request.
    """

    parts = [part for part in raw_path.split("?", 1)[0].split("/") if part]
    if not parts:
        raise BadRequestError(USAGE_MESSAGE)

    identifier = unquote(parts[0])
    if len(parts) > 1 and parts[1] == SEGMENT_MARKER:
        return RelayPath(identifier=identifier, mode="segment", remainder="/".join(parts[2:]))
    return RelayPath(identifier=identifier, mode="root")


def create_upstream_client(
    options: RelayOptions, *, transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """Instantiate the HTTPX client used for every upstream fetch of one request."""

    return httpx.AsyncClient(
        timeout=options.timeout, follow_redirects=True, transport=transport
    )


class RelayService:
    """Manifest resolution and proxying for a single inbound request."""

    def __init__(
        self,
        options: RelayOptions,
        client: httpx.AsyncClient,
        *,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.options = options
        self._rng = rng
        self._fetcher = RetryingFetcher(
            client,
            max_attempts=options.max_attempts,
            base_delay=options.base_delay,
            sleep=sleep,
        )

    def _user_agent(self) -> str:
        return pick_user_agent(self.options.user_agents, self._rng)

    async def locate(self, identifier: str) -> ManifestLookup:
        """Fetch the watch page for ``identifier`` and search it for a manifest."""

        page_url = self.options.watch_url(identifier)
        response = await self._fetcher.fetch(page_url, page_headers(self._user_agent()))
        await ensure_success(response, "Watch page fetch")
        page_text = await read_text(response)
        return locate_manifest(page_text, identifier)

    async def resolve_master(self, identifier: str, relay_origin: str) -> str:
        """Return the master playlist for ``identifier`` rewritten onto the relay."""

        logger.info("Resolving master playlist for %s", identifier)
        lookup = await self.locate(identifier)
        if lookup.status is LookupStatus.LIVE_PENDING:
            raise LiveStreamPendingError(LIVE_PENDING_MESSAGE)
        if not lookup.found or not lookup.url:
            raise StreamNotFoundError(NOT_FOUND_MESSAGE)

        response = await self._fetcher.fetch(
            lookup.url, master_headers(self._user_agent(), self.options.referer)
        )
        await ensure_success(response, "Master playlist fetch")
        master = await read_text(response)
        return rewrite_master_playlist(master, proxy_base_for(relay_origin, identifier))

    async def relay_playlist(self, identifier: str, target_url: str, relay_origin: str) -> str:
        """Fetch a sub-playlist and rewrite its reference lines onto the relay."""

        logger.debug("Relaying playlist %s for %s", target_url, identifier)
        response = await self._fetcher.fetch(target_url, self._segment_headers())
        await ensure_success(response, "Playlist fetch")
        playlist = await read_text(response)
        return rewrite_playlist(
            playlist, resolution_base(target_url), proxy_base_for(relay_origin, identifier)
        )

    async def open_segment(self, target_url: str) -> httpx.Response:
        """Open a streamed response for a media segment; the caller closes it."""

        response = await self._fetcher.fetch(target_url, self._segment_headers())
        return await ensure_success(response, "Segment fetch")

    def _segment_headers(self) -> dict[str, str]:
        return segment_headers(self._user_agent(), self.options.referer, self.options.origin)
