"""Shared state container for the relay API."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from ..relay import RelayOptions, RelayService, create_upstream_client
from ..relay.fetcher import Sleep
from .settings import RelaySettings


@dataclass(slots=True)
class AppState:
    """Read-only configuration shared by every request.

    ``transport`` and ``sleep`` are only overridden by tests to fake the
    upstream and skip backoff delays.
    """

    settings: RelaySettings
    options: RelayOptions
    transport: Optional[httpx.AsyncBaseTransport]
    sleep: Optional[Sleep]

    def __init__(
        self,
        settings: RelaySettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self.settings = settings
        self.options = settings.to_options()
        self.transport = transport
        self.sleep = sleep

    def client(self) -> httpx.AsyncClient:
        """Instantiate a request-scoped upstream client."""

        return create_upstream_client(self.options, transport=self.transport)

    def service(self, client: httpx.AsyncClient) -> RelayService:
        if self.sleep is None:
            return RelayService(self.options, client)
        return RelayService(self.options, client, sleep=self.sleep)
