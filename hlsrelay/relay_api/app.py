"""Application factory for the hlsrelay API."""
import logging
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from .. import __version__
from ..relay import RelayError
from ..relay.fetcher import Sleep
from ..relay.headers import ERROR_RESPONSE_HEADERS
from .routers import health, relay
from .settings import RelaySettings
from .state import AppState

logger = logging.getLogger(__name__)


async def relay_error_handler(request: Request, exc: RelayError) -> PlainTextResponse:
    """Render relay failures as plain text with the mapped status code."""

    if exc.status_code >= 500:
        logger.error("Relay error for %s: %s", request.url.path, exc.message)
        return PlainTextResponse(
            f"Error: {exc.message}",
            status_code=exc.status_code,
            headers=ERROR_RESPONSE_HEADERS,
        )
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Last-resort handler so failures never surface as dropped connections."""

    logger.exception("Unhandled error for %s", request.url.path, exc_info=exc)
    return PlainTextResponse(
        f"Error: {exc}", status_code=500, headers=ERROR_RESPONSE_HEADERS
    )


def create_app(
    settings: RelaySettings | None = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    sleep: Optional[Sleep] = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""

    resolved_settings = settings or RelaySettings()
    app_state = AppState(resolved_settings, transport=transport, sleep=sleep)

    app = FastAPI(title="hlsrelay", version=__version__)
    app.state.app_state = app_state
    app.state.settings = app_state.settings

    # Players fetch playlists cross-origin; there are no credentials to protect.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # The relay router ends in a catch-all path, so it must come last.
    for router in (
        health.router,
        relay.router,
    ):
        app.include_router(router)

    return app
