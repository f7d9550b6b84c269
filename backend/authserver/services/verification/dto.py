# authserver/services/verification/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from authserver.models.base import as_utc
from authserver.models.token import Token, TokenType

BEARER_SCHEME = "Bearer"
QUERY_PARAMETER = "access_token"


@dataclass(frozen=True, slots=True)
class VerifyIn:
    """
    Bearer token presented to the verification endpoint.

    :param token: Opaque access token, ``None`` when none was presented.
    :type token: str | None
    """

    token: str | None

    @classmethod
    def from_request(
        cls, authorization: str | None, query: Mapping[str, str]
    ) -> VerifyIn:
        """
        Extract the token from ``Authorization`` or the ``access_token`` parameter.

        The header wins when it has exactly two space-separated parts and the
        literal ``Bearer`` scheme; any other header is ignored.
        """
        if authorization:
            parts = authorization.split(" ")
            if len(parts) == 2 and parts[0] == BEARER_SCHEME and parts[1]:
                return cls(token=parts[1])
        return cls(token=query.get(QUERY_PARAMETER) or None)


@dataclass(frozen=True, slots=True)
class TokenRecordOut:
    """
    Snapshot of a verified token record.

    Field names follow the model; ``expires_at`` is serialized as ``expires_in``.
    """

    token: str
    user_id: str
    client_id: str
    created: datetime
    expires_at: datetime
    type: TokenType
    scope_list: list[str]
    last_access: datetime | None
    valid: bool

    @classmethod
    def from_model(cls, token: Token) -> TokenRecordOut:
        return cls(
            token=token.token,
            user_id=str(token.user_id),
            client_id=token.client_id,
            created=as_utc(token.created),
            expires_at=as_utc(token.expires_at),
            type=TokenType(token.type),
            scope_list=list(token.scope_list or []),
            last_access=as_utc(token.last_access) if token.last_access else None,
            valid=bool(token.valid),
        )
