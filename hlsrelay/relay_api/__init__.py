"""FastAPI hosting surface for the relay."""

from .app import create_app

__all__ = ["create_app"]
