"""Typer command line surface for the relay."""

from .app import app

__all__ = ["app"]
