"""Master playlist and segment proxy endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ...relay import BadRequestError, RelayPath, parse_relay_path
from ...relay.headers import (
    MASTER_RESPONSE_HEADERS,
    PLAYLIST_RESPONSE_HEADERS,
    relay_segment_headers,
)
from ...relay.rewriter import is_absolute_url, is_playlist_url
from ..dependencies import get_app_state, get_relay_origin
from ..state import AppState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


def _raw_path(request: Request) -> str:
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.scope["path"]


@router.get("/{full_path:path}", summary="Relay master playlists, sub-playlists and segments")
async def relay_route(
    request: Request,
    full_path: str,
    app_state: AppState = Depends(get_app_state),
    relay_origin: str = Depends(get_relay_origin),
) -> Response:
    """Dispatch on path shape: ``/{id}`` or ``/{id}/seg/{encoded-url}``."""

    relay_path = parse_relay_path(_raw_path(request))
    if relay_path.mode == "segment":
        return await _proxy_segment(relay_path, app_state, relay_origin)

    async with app_state.client() as client:
        playlist = await app_state.service(client).resolve_master(
            relay_path.identifier, relay_origin
        )
    return Response(content=playlist, headers=MASTER_RESPONSE_HEADERS)


async def _proxy_segment(relay_path: RelayPath, app_state: AppState, relay_origin: str) -> Response:
    target_url = relay_path.target_url
    if not target_url:
        raise BadRequestError("Segment URL missing")
    if not is_absolute_url(target_url):
        raise BadRequestError(f"Segment URL must be an absolute http(s) URL: {target_url}")

    if is_playlist_url(target_url):
        async with app_state.client() as client:
            playlist = await app_state.service(client).relay_playlist(
                relay_path.identifier, target_url, relay_origin
            )
        return Response(content=playlist, headers=PLAYLIST_RESPONSE_HEADERS)

    client = app_state.client()
    try:
        upstream = await app_state.service(client).open_segment(target_url)
    except BaseException:
        await client.aclose()
        raise

    async def close_upstream() -> None:
        await upstream.aclose()
        await client.aclose()

    async def body():
        try:
            async for chunk in upstream.aiter_bytes():
                yield chunk
        finally:
            await close_upstream()

    logger.debug("Streaming segment %s (HTTP %d)", target_url, upstream.status_code)
    return StreamingResponse(
        body(),
        status_code=upstream.status_code,
        headers=relay_segment_headers(dict(upstream.headers), target_url),
        background=BackgroundTask(close_upstream),
    )
