"""Unit of Work abstractions and concrete implementations.

This package re-exports the units of work used by the OAuth services: the
SQLAlchemy-backed one (default), the Redis token-store variant and the
in-memory one used by unit tests.
"""

from .base import UnitOfWork
from .memory_uow import InMemoryUnitOfWork
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
    "InMemoryUnitOfWork",
]
