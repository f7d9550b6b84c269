"""Persistence-level exceptions raised by token stores."""

from __future__ import annotations


class RepositoryError(Exception):
    """Base class for errors raised by repositories and store adapters."""


class TokenCollisionError(RepositoryError):
    """Raised by a token repository when a token value is already stored."""

    def __init__(self, token: str) -> None:
        super().__init__("Token value already exists")
        self.token = token
