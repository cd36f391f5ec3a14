"""CLI entry point for launching the relay API with Uvicorn."""
import logging

import uvicorn

from .app import create_app
from .settings import RelaySettings


def main() -> None:
    """Start a development server for the relay API."""
    settings = RelaySettings()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
