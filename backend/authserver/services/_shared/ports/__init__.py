"""
authserver.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts
between the grant/verification services and their infrastructure.

Modules
-------
- :mod:`client_repository`:
    Defines :class:`~.ClientRepository`: read-only lookup of registered clients.

- :mod:`token_repository`:
    Defines :class:`~.TokenRepository`: token persistence including the atomic
    consume-and-issue step of the authorization-code exchange.

- :mod:`token_generator`:
    Defines :class:`~.TokenGenerator` and :class:`~.SecureTokenGenerator`, producing
    opaque credential values.

- :mod:`resource_owner`:
    Defines :class:`~.ResourceOwnerSession`: who is logged in, as reported by
    the external login step.

Design Notes
------------
All these ports follow *Dependency Inversion Principle (DIP)* to keep
the service layer independent from implementation details.
Concrete adapters (SQLAlchemy, Redis, JWT cookies) live under
``authserver.repositories`` and ``authserver.infra``; the in-memory doubles
defined next to each port back the unit tests.
"""

from __future__ import annotations

from .client_repository import ClientRepository, InMemoryClientRepository
from .resource_owner import ResourceOwnerSession
from .token_generator import SecureTokenGenerator, SequentialTokenGenerator, TokenGenerator
from .token_repository import InMemoryTokenRepository, TokenRepository

__all__ = [
    "ClientRepository",
    "InMemoryClientRepository",
    "TokenRepository",
    "InMemoryTokenRepository",
    "TokenGenerator",
    "SecureTokenGenerator",
    "SequentialTokenGenerator",
    "ResourceOwnerSession",
]
