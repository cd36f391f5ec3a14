"""FastAPI dependencies for the relay API."""
from fastapi import Depends, Request

from .settings import RelaySettings
from .state import AppState


def get_app_state(request: Request) -> AppState:
    """Resolve the shared application state from the FastAPI request."""
    return request.app.state.app_state


def get_settings(app_state: AppState = Depends(get_app_state)) -> RelaySettings:
    """Return the settings the application was built with."""
    return app_state.settings


def get_relay_origin(request: Request) -> str:
    """Origin (scheme and host) that proxied URLs should point back to."""
    return str(request.base_url).rstrip("/")
