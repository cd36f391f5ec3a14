"""Tests for playlist URL rewriting."""
from __future__ import annotations

import sys
from pathlib import Path
from urllib.parse import urlsplit

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hlsrelay.relay.rewriter import (  # noqa: E402
    build_proxy_url,
    decode_proxy_target,
    is_playlist_url,
    proxy_base_for,
    resolution_base,
    rewrite_master_playlist,
    rewrite_playlist,
)

PROXY_BASE = "https://relay/vid1/seg/"


@pytest.mark.parametrize(
    "url",
    [
        "https://x/y.m3u8",
        "https://manifest.example/api/manifest/hls_variant/expire/1/id/abc/playlist/index.m3u8",
        "https://cdn.example/seg.ts?sig=a%2Fb&x=1&y=caf%C3%A9",
        "http://host:8080/path with space/ünïcode.ts#frag",
    ],
)
def test_proxy_url_round_trip(url: str) -> None:
    """Decoding the last path segment recovers the original URL exactly."""

    proxied = build_proxy_url(PROXY_BASE, url)
    last_segment = urlsplit(proxied).path.rsplit("/", 1)[-1]

    assert proxied.startswith(PROXY_BASE)
    assert "?" not in proxied[len(PROXY_BASE):]
    assert decode_proxy_target(last_segment) == url


def test_rewrite_playlist_scenario() -> None:
    """Relative sub-playlists are resolved, proxied and directives kept."""

    playlist = "#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=100\nchunk1.m3u8\n"

    rewritten = rewrite_playlist(playlist, "https://x/hls/", PROXY_BASE)

    lines = rewritten.split("\n")
    assert lines[0] == "#EXTM3U"
    assert lines[1] == "#EXT-X-STREAM-INF:BANDWIDTH=100"
    assert lines[2] == "https://relay/vid1/seg/https%3A%2F%2Fx%2Fhls%2Fchunk1.m3u8"
    assert lines[3] == ""


def test_rewrite_playlist_keeps_directives_and_blank_lines() -> None:
    """Directive lines, even with URI attributes, pass through untouched."""

    directives = [
        "#EXTM3U",
        '#EXT-X-KEY:METHOD=AES-128,URI="https://keys.example/key.bin"',
        '#EXT-X-MEDIA:TYPE=AUDIO,URI="audio/index.m3u8"',
        "#EXTINF:5.005,",
        "",
        "   ",
    ]
    playlist = "\n".join(directives)

    assert rewrite_playlist(playlist, "https://x/hls/", PROXY_BASE) == playlist


def test_rewrite_playlist_proxies_every_reference_line() -> None:
    """Absolute, relative and root-relative references all end up proxied."""

    playlist = "\n".join(
        [
            "#EXTM3U",
            "#EXTINF:4.0,",
            "https://cdn.example/a/seg1.ts",
            "#EXTINF:4.0,",
            "seg2.ts?token=abc",
            "#EXTINF:4.0,",
            "/root/seg3.ts",
            "#EXTINF:4.0,",
            "../up/seg4.ts",
        ]
    )

    rewritten = rewrite_playlist(playlist, "https://cdn.example/a/b/", PROXY_BASE)
    references = [line for line in rewritten.split("\n") if line and not line.startswith("#")]

    assert all(line.startswith(PROXY_BASE) for line in references)
    targets = [decode_proxy_target(line[len(PROXY_BASE):]) for line in references]
    assert targets == [
        "https://cdn.example/a/seg1.ts",
        "https://cdn.example/a/b/seg2.ts?token=abc",
        "https://cdn.example/root/seg3.ts",
        "https://cdn.example/a/up/seg4.ts",
    ]


def test_rewrite_playlist_preserves_crlf_line_endings() -> None:
    playlist = "#EXTM3U\r\nseg.ts\r\n"

    rewritten = rewrite_playlist(playlist, "https://x/hls/", PROXY_BASE)

    assert rewritten == f"#EXTM3U\r\n{PROXY_BASE}https%3A%2F%2Fx%2Fhls%2Fseg.ts\r\n"


def test_rewrite_playlist_leaves_unresolvable_reference() -> None:
    """A malformed reference stays as it was instead of breaking the playlist."""

    playlist = "#EXTM3U\nhttp://[broken/seg.ts\ngood.ts\n"

    rewritten = rewrite_playlist(playlist, "https://x/hls/", PROXY_BASE)
    lines = rewritten.split("\n")

    assert lines[1] == "http://[broken/seg.ts"
    assert lines[2] == f"{PROXY_BASE}https%3A%2F%2Fx%2Fhls%2Fgood.ts"


def test_rewrite_master_playlist_replaces_urls_everywhere() -> None:
    """Coarse mode also rewrites URLs embedded in directive attributes."""

    master = (
        "#EXTM3U\n"
        '#EXT-X-MEDIA:TYPE=AUDIO,URI="https://m.example/audio.m3u8"\n'
        "#EXT-X-STREAM-INF:BANDWIDTH=1280000\n"
        "https://m.example/hls_variant/index.m3u8\n"
    )

    rewritten = rewrite_master_playlist(master, PROXY_BASE)

    assert "https://m.example" not in rewritten.replace(PROXY_BASE, "")
    assert f'URI="{PROXY_BASE}https%3A%2F%2Fm.example%2Faudio.m3u8"' in rewritten
    assert rewritten.startswith("#EXTM3U\n")
    assert f"{PROXY_BASE}https%3A%2F%2Fm.example%2Fhls_variant%2Findex.m3u8\n" in rewritten


def test_resolution_base_and_helpers() -> None:
    assert resolution_base("https://x/hls/sub/index.m3u8?sig=1") == "https://x/hls/sub/"
    assert resolution_base("https://x") == "https://x/"
    assert proxy_base_for("https://relay/", "vid1") == PROXY_BASE
    assert is_playlist_url("https://x/a/index.m3u8?token=1")
    assert not is_playlist_url("https://x/a/seg.ts")
