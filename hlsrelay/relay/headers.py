"""Header tables for upstream requests and relay responses."""
from __future__ import annotations

import random
from typing import Dict, Optional, Sequence

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:109.0) Gecko/20100101 Firefox/121.0",
)

# httpx only decodes brotli when the optional extra is installed.
ACCEPT_ENCODING = "gzip, deflate"
ACCEPT_LANGUAGE = "en-US,en;q=0.9"

PLAYLIST_CONTENT_TYPE = "application/vnd.apple.mpegurl"

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
    "Access-Control-Allow-Headers": "Origin, X-Requested-With, Content-Type, Accept",
}

PLAYLIST_RESPONSE_HEADERS: Dict[str, str] = {
    "Content-Type": PLAYLIST_CONTENT_TYPE,
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
    **CORS_HEADERS,
}

MASTER_RESPONSE_HEADERS: Dict[str, str] = {
    **PLAYLIST_RESPONSE_HEADERS,
    "X-Content-Type-Options": "nosniff",
}

ERROR_RESPONSE_HEADERS: Dict[str, str] = {"Cache-Control": "no-cache"}

SEGMENT_CACHE_CONTROL = "public, max-age=3600"

# Dropped when relaying a segment; the body is re-encoded by the server.
EXCLUDED_UPSTREAM_HEADERS = frozenset(
    {
        "connection",
        "content-encoding",
        "content-length",
        "keep-alive",
        "transfer-encoding",
    }
)

SEGMENT_CONTENT_TYPES: Dict[str, str] = {
    ".ts": "video/MP2T",
    ".m4s": "video/mp4",
}


def pick_user_agent(pool: Sequence[str] = USER_AGENTS, rng: Optional[random.Random] = None) -> str:
    """Return a User-Agent drawn uniformly from ``pool``."""

    chooser = rng or random
    return chooser.choice(pool)


def page_headers(user_agent: str) -> Dict[str, str]:
    """Headers for the top-level watch page request (a browser navigation)."""

    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
        "Accept-Language": ACCEPT_LANGUAGE,
        "Accept-Encoding": ACCEPT_ENCODING,
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Upgrade-Insecure-Requests": "1",
    }


def master_headers(user_agent: str, referer: str) -> Dict[str, str]:
    """Headers for the master playlist request."""

    return {
        "User-Agent": user_agent,
        "Referer": referer,
        "Accept": "*/*",
        "Accept-Language": ACCEPT_LANGUAGE,
        "Accept-Encoding": ACCEPT_ENCODING,
        "Cache-Control": "no-cache",
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "cross-site",
    }


def segment_headers(user_agent: str, referer: str, origin: str) -> Dict[str, str]:
    """Headers for proxied sub-playlist and media segment requests."""

    headers = master_headers(user_agent, referer)
    headers["Origin"] = origin
    return headers


def relay_segment_headers(upstream: Dict[str, str] | None, target_url: str) -> Dict[str, str]:
    """Build response headers for a relayed media segment.

    Upstream headers are mirrored except for hop-by-hop and encoding
    headers. The content type is inferred from the target's extension
    when the upstream omitted one.
    """

    headers: Dict[str, str] = {}
    for key, value in (upstream or {}).items():
        if key.lower() in EXCLUDED_UPSTREAM_HEADERS:
            continue
        headers[key.lower()] = value

    headers["cache-control"] = SEGMENT_CACHE_CONTROL
    headers["access-control-allow-origin"] = "*"

    if "content-type" not in headers:
        content_type = infer_segment_content_type(target_url)
        if content_type:
            headers["content-type"] = content_type
    return headers


def infer_segment_content_type(target_url: str) -> Optional[str]:
    """Guess a media type from the segment extension, if it is a known one."""

    path = target_url.split("?", 1)[0].lower()
    for extension, content_type in SEGMENT_CONTENT_TYPES.items():
        if path.endswith(extension):
            return content_type
    return None
