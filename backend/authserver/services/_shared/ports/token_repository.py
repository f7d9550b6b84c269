from __future__ import annotations

import threading
from datetime import datetime
from typing import Protocol

from authserver.models.token import Token, TokenType
from authserver.repositories.errors import TokenCollisionError


class TokenRepository(Protocol):
    """
    Persistence contract for authorization codes and access tokens.

    Implementations MUST make :meth:`exchange_code` a single atomic
    compare-and-set: the code is consumed only if it is still unconsumed, and
    the access token is stored in the same step. Two concurrent exchanges of
    one code can never both return ``True``.
    """

    def find_tokens(self, *, token: str, type: TokenType, valid: bool = True) -> list[Token]:
        """Return every stored token matching value, type and validity flag."""
        ...

    def token_exists(self, token: str) -> bool:
        """Return ``True`` when ``token`` is already stored (any type/state)."""
        ...

    def add(self, token: Token) -> Token:
        """
        Persist a new token.

        :raises TokenCollisionError: If the value is already stored.
        """
        ...

    def touch(self, token: Token, at: datetime) -> Token:
        """Record usage of an access token (``last_access = at``)."""
        ...

    def exchange_code(
        self,
        *,
        code: str,
        client_id: str,
        consumed_at: datetime,
        access_token: Token,
    ) -> bool:
        """
        Consume ``code`` and persist ``access_token`` atomically.

        :returns: ``False`` when the code is missing, invalid, issued to
                  another client, expired or already consumed (nothing is
                  written in that case).
        :raises TokenCollisionError: If the access-token value already exists.
        """
        ...


class InMemoryTokenRepository(TokenRepository):
    """
    In-memory token store with atomic exchange behavior.

    .. note::
       Uses a threading lock to provide the compare-and-set in unit tests.
    """

    def __init__(self) -> None:
        self._by_value: dict[str, Token] = {}
        self._lock = threading.Lock()

    def find_tokens(self, *, token: str, type: TokenType, valid: bool = True) -> list[Token]:
        with self._lock:
            stored = self._by_value.get(token)
            if stored is None or stored.type is not type or bool(stored.valid) is not valid:
                return []
            return [stored]

    def token_exists(self, token: str) -> bool:
        with self._lock:
            return token in self._by_value

    def add(self, token: Token) -> Token:
        with self._lock:
            if token.token in self._by_value:
                raise TokenCollisionError(token.token)
            self._by_value[token.token] = token
            return token

    def touch(self, token: Token, at: datetime) -> Token:
        with self._lock:
            token.last_access = at
            return token

    def exchange_code(
        self,
        *,
        code: str,
        client_id: str,
        consumed_at: datetime,
        access_token: Token,
    ) -> bool:
        with self._lock:
            stored = self._by_value.get(code)
            if (
                stored is None
                or stored.type is not TokenType.AUTHORIZATION_CODE
                or stored.client_id != client_id
                or not stored.is_usable(consumed_at)
            ):
                return False
            if access_token.token in self._by_value:
                raise TokenCollisionError(access_token.token)
            stored.last_access = consumed_at
            self._by_value[access_token.token] = access_token
            return True
