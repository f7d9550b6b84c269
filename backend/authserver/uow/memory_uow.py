"""
In-memory Unit of Work used by the service unit tests.
"""

from __future__ import annotations

from authserver.services._shared.ports import InMemoryClientRepository, InMemoryTokenRepository
from authserver.uow.base import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """
    UoW over in-memory repositories.

    Repositories are shared between instances built from the same stores, so
    a factory such as ``lambda: InMemoryUnitOfWork(clients, tokens)`` sees one
    consistent state across use cases (and threads).
    """

    def __init__(
        self,
        clients: InMemoryClientRepository | None = None,
        tokens: InMemoryTokenRepository | None = None,
    ) -> None:
        self.clients = clients if clients is not None else InMemoryClientRepository()
        self.tokens = tokens if tokens is not None else InMemoryTokenRepository()
        self.committed = False
        self.rolled_back = False

    def __enter__(self) -> InMemoryUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True
