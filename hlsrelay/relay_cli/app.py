"""Command line interface for the hlsrelay service."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import httpx
import typer

from ..relay import RelayService, UpstreamError, create_upstream_client
from ..relay.locator import LookupStatus, ManifestLookup
from ..relay.rewriter import rewrite_master_playlist, rewrite_playlist
from ..relay.service import LIVE_PENDING_MESSAGE, NOT_FOUND_MESSAGE
from ..relay_api.settings import RelaySettings
from .client import create_client


DEFAULT_API_BASE = "http://localhost:8000"
NOT_FOUND_EXIT_CODE = 2

app = typer.Typer(help="Resolve and relay HLS manifests.")


def _api_base_option() -> typer.Option:
    return typer.Option(
        DEFAULT_API_BASE,
        "--api-base",
        help="Base URL of a running relay.",
        show_default=True,
        envvar="HLSRELAY_API_BASE",
    )


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind."),
    port: int = typer.Option(8000, help="Port to listen on."),
) -> None:
    """Run the relay API under Uvicorn."""

    import uvicorn

    from ..relay_api.app import create_app

    settings = RelaySettings()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(create_app(settings), host=host, port=port)


async def _locate(settings: RelaySettings, identifier: str) -> ManifestLookup:
    options = settings.to_options()
    async with create_upstream_client(options) as client:
        return await RelayService(options, client).locate(identifier)


@app.command()
def locate(
    identifier: str = typer.Argument(..., help="Video identifier to resolve."),
    as_json: bool = typer.Option(False, "--json", help="Print the lookup as JSON."),
) -> None:
    """Fetch the watch page for IDENTIFIER and print its manifest URL."""

    settings = RelaySettings()
    try:
        lookup = asyncio.run(_locate(settings, identifier))
    except UpstreamError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc
    except httpx.TransportError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    if as_json:
        payload = {"status": lookup.status.value, "url": lookup.url, "strategy": lookup.strategy}
        typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    elif lookup.found:
        typer.echo(lookup.url)

    if lookup.status is LookupStatus.LIVE_PENDING:
        typer.echo(LIVE_PENDING_MESSAGE, err=True)
        raise typer.Exit(code=NOT_FOUND_EXIT_CODE)
    if lookup.status is LookupStatus.NOT_FOUND:
        typer.echo(NOT_FOUND_MESSAGE, err=True)
        raise typer.Exit(code=NOT_FOUND_EXIT_CODE)


@app.command()
def rewrite(
    playlist: Path = typer.Argument(..., exists=True, dir_okay=False, help="Playlist file to rewrite."),
    proxy_base: str = typer.Option(..., help="Prefix for proxied URLs, e.g. https://relay/ID/seg/."),
    base: Optional[str] = typer.Option(None, help="URL relative references resolve against."),
    master: bool = typer.Option(
        False,
        "--master/--no-master",
        help="Rewrite every absolute URL in the text instead of reference lines only.",
    ),
) -> None:
    """Rewrite a local playlist file and print the result."""

    text = playlist.read_text(encoding="utf-8")
    if master:
        typer.echo(rewrite_master_playlist(text, proxy_base), nl=False)
        return

    if base is None:
        typer.echo("--base is required unless --master is given.", err=True)
        raise typer.Exit(code=1)
    typer.echo(rewrite_playlist(text, base, proxy_base), nl=False)


@app.command()
def health(api_base: str = _api_base_option()) -> None:
    """Call the /health endpoint of a running relay and pretty-print the response."""

    with create_client(api_base) as client:
        response = client.get("/health")
        response.raise_for_status()
        typer.echo(json.dumps(response.json(), indent=2, ensure_ascii=False))
