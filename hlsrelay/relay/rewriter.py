"""Rewrite playlist URLs so every fetch goes back through the relay."""
from __future__ import annotations

import logging
import re
from urllib.parse import quote, unquote, urljoin, urlsplit

logger = logging.getLogger(__name__)

ABSOLUTE_SCHEMES = ("http", "https")
PLAYLIST_EXTENSIONS = (".m3u8", ".m3u")

_ABSOLUTE_URL_PATTERN = re.compile(r'https?://[^\s"]+')


def build_proxy_url(proxy_base: str, absolute_url: str) -> str:
    """Append ``absolute_url`` to ``proxy_base`` as one encoded path segment."""

    return proxy_base + quote(absolute_url, safe="")


def decode_proxy_target(segment: str) -> str:
    """Recover the upstream URL carried in one encoded path segment."""

    return unquote(segment)


def proxy_base_for(relay_origin: str, identifier: str) -> str:
    """Return the ``/{identifier}/seg/`` namespace under ``relay_origin``."""

    return f"{relay_origin.rstrip('/')}/{identifier}/seg/"


def resolution_base(url: str) -> str:
    """Directory of ``url``: origin plus path up to the last slash, no query."""

    parts = urlsplit(url)
    path = parts.path
    directory = path[: path.rfind("/") + 1] if "/" in path else "/"
    return f"{parts.scheme}://{parts.netloc}{directory}"


def is_playlist_url(url: str) -> bool:
    """True when the URL path names an HLS playlist, ignoring the query."""

    return urlsplit(url).path.lower().endswith(PLAYLIST_EXTENSIONS)


def is_absolute_url(reference: str) -> bool:
    try:
        parts = urlsplit(reference)
    except ValueError:
        return False
    return parts.scheme.lower() in ABSOLUTE_SCHEMES and bool(parts.netloc)


def _resolve_reference(reference: str, base_url: str) -> str | None:
    if is_absolute_url(reference):
        return reference
    try:
        resolved = urljoin(base_url, reference)
    except ValueError:
        return None
    if not is_absolute_url(resolved):
        return None
    return resolved


def rewrite_playlist(playlist_text: str, resolution_base_url: str, proxy_base: str) -> str:
    """Proxy every reference line of an extended M3U playlist.

    Directive lines (``#...``) and blank lines are kept verbatim, including
    URI attributes embedded in directives. Relative references are resolved
    against ``resolution_base_url``; a reference that cannot be resolved is
    left untouched instead of failing the whole playlist.
    """

    lines = playlist_text.split("\n")
    rewritten: list[str] = []
    for line in lines:
        body = line.rstrip("\r")
        ending = line[len(body):]
        reference = body.strip()
        if not reference or reference.startswith("#"):
            rewritten.append(line)
            continue

        absolute = _resolve_reference(reference, resolution_base_url)
        if absolute is None:
            logger.warning("Leaving unresolvable playlist reference as is: %s", reference)
            rewritten.append(line)
            continue
        rewritten.append(build_proxy_url(proxy_base, absolute) + ending)
    return "\n".join(rewritten)


def rewrite_master_playlist(playlist_text: str, proxy_base: str) -> str:
    """Proxy every absolute URL anywhere in a master playlist.

    Unlike ``rewrite_playlist`` this also touches URLs inside directive
    lines, since master playlists interleave variant metadata and URLs.
    """

    return _ABSOLUTE_URL_PATTERN.sub(
        lambda match: build_proxy_url(proxy_base, match.group(0)), playlist_text
    )
