from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from authserver.models.client import Client


class ClientRepository(Protocol):
    """
    Read-only lookup of registered OAuth clients.

    Clients are owned by the registration service; this port never writes.
    """

    def find_client(self, client_id: str) -> Client | None:
        """Return the client with the canonical hex ``client_id``, if any."""
        ...


class InMemoryClientRepository(ClientRepository):
    """Dictionary-backed client lookup for unit tests."""

    def __init__(self, clients: Iterable[Client] = ()) -> None:
        self._by_id: dict[str, Client] = {c.id: c for c in clients}
        self.lookups = 0

    def add(self, client: Client) -> Client:
        self._by_id[client.id] = client
        return client

    def find_client(self, client_id: str) -> Client | None:
        self.lookups += 1
        return self._by_id.get(client_id)
