"""
Manifest discovery for watch pages.

The page is never parsed as HTML. Instead an ordered list of extraction
strategies is tried against the raw markup and the first one that yields a
URL wins. Most strategies are regular expressions over the serialized player
configuration; the last one decodes the embedded player response as JSON so
small changes in serialization do not break discovery outright.
"""
from __future__ import annotations

import enum
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class LookupStatus(enum.Enum):
    FOUND = "found"
    LIVE_PENDING = "live_pending"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class ManifestLookup:
    """Result of a manifest search; only ``FOUND`` carries a URL."""

    status: LookupStatus
    url: Optional[str] = None
    strategy: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND


class ExtractionStrategy(Protocol):
    name: str

    def extract(self, page_text: str) -> Optional[str]:
        ...


def unescape_json_url(value: str) -> str:
    """Undo the escapes a URL picks up inside a JSON string literal."""

    return value.replace("\\u0026", "&").replace("\\/", "/")


@dataclass(frozen=True)
class PatternStrategy:
    """Extract the first capture group of ``pattern``."""

    name: str
    pattern: re.Pattern[str]

    def extract(self, page_text: str) -> Optional[str]:
        match = self.pattern.search(page_text)
        if not match:
            return None
        return unescape_json_url(match.group(1))


@dataclass(frozen=True)
class PlayerResponseStrategy:
    """Decode the embedded player response and read its manifest field."""

    name: str = "player-response-json"
    marker: re.Pattern[str] = re.compile(r"var ytInitialPlayerResponse\s*=\s*(?=\{)")

    def extract(self, page_text: str) -> Optional[str]:
        match = self.marker.search(page_text)
        if not match:
            return None
        try:
            payload, _ = json.JSONDecoder().raw_decode(page_text, match.end())
        except json.JSONDecodeError as exc:
            logger.error("Failed to parse player response: %s", exc)
            return None
        return _manifest_from_player_response(payload)


def _manifest_from_player_response(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    streaming_data = payload.get("streamingData")
    if not isinstance(streaming_data, dict):
        return None
    manifest = streaming_data.get("hlsManifestUrl")
    if isinstance(manifest, str) and manifest:
        return manifest
    return None


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    PatternStrategy(
        "hls-manifest-compact",
        re.compile(r'"hlsManifestUrl":"(https:[^"]+\.m3u8[^"]*)"'),
    ),
    PatternStrategy(
        "hls-playlist-path",
        re.compile(r'"url":"(https://[^"]+/manifest/hls_[^"]+/playlist\.m3u8)"'),
    ),
    PatternStrategy(
        "hls-manifest-spaced",
        re.compile(r'"hlsManifestUrl":\s*"([^"]+\.m3u8[^"]*)"'),
    ),
    PatternStrategy(
        "streaming-data",
        re.compile(r'"streamingData":\s*\{.*?"hlsManifestUrl":\s*"(https:[^"]+\.m3u8[^"]*)"'),
    ),
    PlayerResponseStrategy(),
)

_LIVE_PATTERN = re.compile(r'"videoId":"([\w-]+)".+?"isLive":true')


def is_pending_live(page_text: str, identifier: str) -> bool:
    """True when the page marks ``identifier`` as a live broadcast."""

    match = _LIVE_PATTERN.search(page_text)
    return bool(match) and match.group(1) == identifier


def locate_manifest(
    page_text: str,
    identifier: str,
    strategies: Sequence[ExtractionStrategy] = DEFAULT_STRATEGIES,
) -> ManifestLookup:
    """Find the master playlist URL for ``identifier`` in ``page_text``.

    Returns a ``ManifestLookup``; a missing manifest is an ordinary result
    (``NOT_FOUND`` or ``LIVE_PENDING``), not an exception.
    """

    for strategy in strategies:
        url = strategy.extract(page_text)
        if url:
            logger.info("Manifest for %s found via %s", identifier, strategy.name)
            return ManifestLookup(LookupStatus.FOUND, url=url, strategy=strategy.name)

    if is_pending_live(page_text, identifier):
        logger.info("Live stream %s has no manifest yet", identifier)
        return ManifestLookup(LookupStatus.LIVE_PENDING)

    logger.info("No manifest found for %s", identifier)
    return ManifestLookup(LookupStatus.NOT_FOUND)
