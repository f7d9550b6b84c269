"""Repository package exposing persistence-layer access for the OAuth models."""

from __future__ import annotations

from authserver.repositories.base import BaseRepository
from authserver.repositories.client import ClientRepository
from authserver.repositories.token import TokenRepository

__all__ = [
    "BaseRepository",
    "ClientRepository",
    "TokenRepository",
]
