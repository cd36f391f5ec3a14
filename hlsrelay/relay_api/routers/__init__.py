"""Router exports for the relay API."""
from . import health, relay

__all__ = ["health", "relay"]
