"""Tests for the Typer-based relay CLI."""
from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from hlsrelay.relay_api import create_app  # noqa: E402
from hlsrelay.relay_api.settings import RelaySettings  # noqa: E402
from hlsrelay.relay_cli import app as cli_app  # noqa: E402

cli_app_module = importlib.import_module("hlsrelay.relay_cli.app")

WATCH_URL = "https://www.youtube.com/watch?v=vid1"


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def fake_upstream(monkeypatch: pytest.MonkeyPatch) -> Callable[[str], None]:
    """Serve a fixed watch page body to the ``locate`` command."""

    def _install(page_body: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == WATCH_URL:
                return httpx.Response(200, text=page_body)
            return httpx.Response(404)

        def _factory(options: Any, *, transport: Any = None) -> httpx.AsyncClient:
            return httpx.AsyncClient(transport=httpx.MockTransport(handler))

        monkeypatch.setattr(cli_app_module, "create_upstream_client", _factory)

    return _install


@pytest.fixture()
def cli_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """Provide a TestClient and patch the CLI HTTP client factory."""

    test_client = TestClient(create_app(RelaySettings()))

    def _factory(base_url: str, *, timeout: float = 10.0, transport: Any = None) -> TestClient:
        return test_client

    monkeypatch.setattr(cli_app_module, "create_client", _factory)
    return test_client


def test_cli_health_command_outputs_status(runner: CliRunner, cli_client: TestClient) -> None:
    """The health command should display OK status."""

    result = runner.invoke(cli_app, ["health"])

    assert result.exit_code == 0
    assert "\"status\": \"ok\"" in result.output


def test_cli_locate_prints_manifest_url(runner: CliRunner, fake_upstream: Callable[[str], None]) -> None:
    """locate prints the unescaped manifest URL and exits cleanly."""

    fake_upstream('{"hlsManifestUrl":"https://x/y.m3u8\\u0026z=1"}')

    result = runner.invoke(cli_app, ["locate", "vid1"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "https://x/y.m3u8&z=1"


def test_cli_locate_json_output(runner: CliRunner, fake_upstream: Callable[[str], None]) -> None:
    fake_upstream('{"hlsManifestUrl":"https://x/y.m3u8"}')

    result = runner.invoke(cli_app, ["locate", "vid1", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload == {
        "status": "found",
        "url": "https://x/y.m3u8",
        "strategy": "hls-manifest-compact",
    }


def test_cli_locate_reports_missing_stream(runner: CliRunner, fake_upstream: Callable[[str], None]) -> None:
    """A page without a manifest exits with the not-found code."""

    fake_upstream("<html>nothing here</html>")

    result = runner.invoke(cli_app, ["locate", "vid1"])

    assert result.exit_code == cli_app_module.NOT_FOUND_EXIT_CODE
    assert "No stream found" in result.output


def test_cli_locate_reports_pending_live(runner: CliRunner, fake_upstream: Callable[[str], None]) -> None:
    fake_upstream('{"videoId":"vid1","isLive":true}')

    result = runner.invoke(cli_app, ["locate", "vid1"])

    assert result.exit_code == cli_app_module.NOT_FOUND_EXIT_CODE
    assert "Try again later" in result.output


def test_cli_rewrite_line_mode(runner: CliRunner, tmp_path: Path) -> None:
    """rewrite proxies reference lines against the given base."""

    playlist = tmp_path / "index.m3u8"
    playlist.write_text("#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=100\nchunk1.m3u8\n", encoding="utf-8")

    result = runner.invoke(
        cli_app,
        [
            "rewrite",
            str(playlist),
            "--base",
            "https://x/hls/",
            "--proxy-base",
            "https://relay/vid1/seg/",
        ],
    )

    assert result.exit_code == 0
    assert result.stdout.split("\n")[:3] == [
        "#EXTM3U",
        "#EXT-X-STREAM-INF:BANDWIDTH=100",
        "https://relay/vid1/seg/https%3A%2F%2Fx%2Fhls%2Fchunk1.m3u8",
    ]


def test_cli_rewrite_master_mode(runner: CliRunner, tmp_path: Path) -> None:
    playlist = tmp_path / "master.m3u8"
    playlist.write_text(
        '#EXTM3U\n#EXT-X-MEDIA:URI="https://m/a.m3u8"\nhttps://m/v.m3u8\n', encoding="utf-8"
    )

    result = runner.invoke(
        cli_app,
        ["rewrite", str(playlist), "--master", "--proxy-base", "https://relay/vid1/seg/"],
    )

    assert result.exit_code == 0
    assert 'URI="https://relay/vid1/seg/https%3A%2F%2Fm%2Fa.m3u8"' in result.stdout
    assert "https://relay/vid1/seg/https%3A%2F%2Fm%2Fv.m3u8" in result.stdout


def test_cli_rewrite_requires_base_without_master(runner: CliRunner, tmp_path: Path) -> None:
    playlist = tmp_path / "index.m3u8"
    playlist.write_text("#EXTM3U\nseg.ts\n", encoding="utf-8")

    result = runner.invoke(cli_app, ["rewrite", str(playlist), "--proxy-base", "https://relay/v/seg/"])

    assert result.exit_code == 1
    assert "--base is required" in result.output
