"""Client repository: read-only lookup of registered OAuth clients."""

from __future__ import annotations

from authserver.models.client import Client
from authserver.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    """Persistence-only repository for :class:`Client`.

    Clients are administered by the registration service, so this repository
    only exposes lookups.
    """

    model = Client

    def find_client(self, client_id: str) -> Client | None:
        """Return the client with canonical hex id ``client_id``.

        :param client_id: 24-character lower-case hex identifier.
        :type client_id: str
        :returns: Client or ``None`` when not registered.
        :rtype: Client | None
        """
        return self.get(client_id)
