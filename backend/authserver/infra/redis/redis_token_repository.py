# comments in English; reST docstrings
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from authserver.models.base import as_utc
from authserver.models.token import Token, TokenType
from authserver.repositories.errors import TokenCollisionError
from authserver.services._shared.errors import StorageError
from authserver.services._shared.ports import TokenRepository

#: Optimistic-lock attempts before the store is reported as unavailable
MAX_WATCH_RETRIES = 16


@dataclass(slots=True)
class RedisTokenRepository(TokenRepository):
    """
    Redis-backed token store with an atomic code exchange.

    Each token is a hash under ``oauth:token:<value>``. Keys never expire on
    their own: expired tokens stay readable and are rejected by the expiry
    check, mirroring the SQL store (housekeeping is external).

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"oauth:token:{token}"

    @staticmethod
    def _to_ts(dt: datetime) -> str:
        # Microsecond precision keeps round-trips exact for the expiry check
        return f"{as_utc(dt).timestamp():.6f}"

    @staticmethod
    def _from_ts(raw: str) -> datetime:
        return datetime.fromtimestamp(float(raw), tz=UTC)

    def _mapping(self, token: Token) -> dict[str, str]:
        return {
            "token": token.token,
            "user_id": str(token.user_id),
            "client_id": token.client_id,
            "created": self._to_ts(token.created),
            "expires_in": self._to_ts(token.expires_at),
            "type": TokenType(token.type).value,
            "scope_list": json.dumps(list(token.scope_list or [])),
            "last_access": self._to_ts(token.last_access) if token.last_access else "",
            "valid": "1" if token.valid else "0",
        }

    def _hydrate(self, h: dict[bytes, bytes]) -> Token:
        def _b(name: str, default: str = "") -> str:
            raw = h.get(name.encode())
            return raw.decode() if raw is not None else default

        last_access = _b("last_access")
        return Token(
            token=_b("token"),
            user_id=_b("user_id"),
            client_id=_b("client_id"),
            created=self._from_ts(_b("created", "0")),
            expires_at=self._from_ts(_b("expires_in", "0")),
            type=TokenType(_b("type")),
            scope_list=json.loads(_b("scope_list", "[]")),
            last_access=self._from_ts(last_access) if last_access else None,
            valid=_b("valid", "0") == "1",
        )

    # -------------------- API ------------------------

    def find_tokens(self, *, token: str, type: TokenType, valid: bool = True) -> list[Token]:
        h = cast(dict[bytes, bytes], self.r.hgetall(self._k(token)))
        if not h:
            return []
        found = self._hydrate(h)
        if found.type is not type or found.valid is not valid:
            return []
        return [found]

    def token_exists(self, token: str) -> bool:
        return bool(self.r.exists(self._k(token)))

    def add(self, token: Token) -> Token:
        key = self._k(token.token)
        for _ in range(MAX_WATCH_RETRIES):
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    if p.exists(key):
                        p.unwatch()
                        raise TokenCollisionError(token.token)
                    # The whole hash lands in one EXEC; readers never see a partial record
                    p.multi()
                    p.hset(key, mapping=self._mapping(token))
                    p.execute()
                return token
            except redis.WatchError:
                continue
        raise StorageError("Token store kept changing while inserting a token")

    def touch(self, token: Token, at: datetime) -> Token:
        self.r.hset(self._k(token.token), "last_access", self._to_ts(at))
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
        """
        Atomically consume ``code`` and create ``access_token``.

        Uses Redis WATCH/MULTI/EXEC (optimistic locking):
        - Check the code exists, is a valid unconsumed code of ``client_id``
          and has not expired.
        - Mark it consumed and write the access-token hash in one transaction.
        A concurrent modification aborts EXEC and the check runs again, at
        most ``MAX_WATCH_RETRIES`` times.

        :raises StorageError: When every attempt was aborted by a concurrent write.
        """
        k_code = self._k(code)
        k_new = self._k(access_token.token)

        for _ in range(MAX_WATCH_RETRIES):
            try:
                with self.r.pipeline() as p:
                    p.watch(k_code, k_new)

                    h = cast(dict[bytes, bytes], p.hgetall(k_code))
                    if not h:
                        p.unwatch()
                        return False
                    stored = self._hydrate(h)
                    if (
                        stored.type is not TokenType.AUTHORIZATION_CODE
                        or stored.client_id != client_id
                        or not stored.is_usable(consumed_at)
                    ):
                        p.unwatch()
                        return False
                    if p.exists(k_new):
                        p.unwatch()
                        raise TokenCollisionError(access_token.token)

                    p.multi()
                    p.hset(k_code, "last_access", self._to_ts(consumed_at))
                    p.hset(k_new, mapping=self._mapping(access_token))
                    p.execute()
                return True

            except redis.WatchError:
                # Concurrent modification detected; re-check
                continue
        raise StorageError("Token store kept changing while exchanging a code")
