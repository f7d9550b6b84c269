"""Request Validator for the grant entry points.

Turns raw request parameters into typed DTOs or raises :class:`OAuthError`.
It never touches storage, so a malformed request is rejected before any
client or token lookup happens.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from marshmallow import Schema, ValidationError

from authserver.schemas.oauth import AuthorizeRequestSchema, TokenRequestSchema
from authserver.services._shared.errors import (
    MALFORMED_CLIENT_ID,
    MISSING_PARAMETER,
    UNSUPPORTED_GRANT,
    OAuthError,
    OAuthErrorKind,
)
from authserver.services.grants.dto import AuthorizeIn, TokenRequestIn

AUTHORIZATION_CODE_GRANT = "authorization_code"


def _flatten(messages: Any) -> list[str]:
    if isinstance(messages, str):
        return [messages]
    if isinstance(messages, Mapping):
        return [m for value in messages.values() for m in _flatten(value)]
    if isinstance(messages, list | tuple):
        return [m for value in messages for m in _flatten(value)]
    return [str(messages)]


def _invalid_request(err: ValidationError) -> OAuthError:
    """Pick the client-facing description; missing parameters win."""
    found = _flatten(err.messages)
    if MISSING_PARAMETER in found:
        return OAuthError(OAuthErrorKind.INVALID_REQUEST, MISSING_PARAMETER)
    if MALFORMED_CLIENT_ID in found:
        return OAuthError(OAuthErrorKind.INVALID_REQUEST, MALFORMED_CLIENT_ID)
    return OAuthError(OAuthErrorKind.INVALID_REQUEST, found[0] if found else MISSING_PARAMETER)


class RequestValidator:
    """Validate grant requests with the Marshmallow schemas."""

    def __init__(self) -> None:
        self._token_schema = TokenRequestSchema()
        self._authorize_schema = AuthorizeRequestSchema()

    @staticmethod
    def _load(schema: Schema, params: Mapping[str, Any]) -> dict[str, Any]:
        try:
            return dict(schema.load(dict(params)))
        except ValidationError as err:
            raise _invalid_request(err) from err

    def token_request(self, params: Mapping[str, Any]) -> TokenRequestIn:
        """
        Validate ``POST /token`` parameters.

        :raises OAuthError: ``invalid_request`` for missing/malformed
            parameters, ``unsupported_grant_type`` for any grant other than
            ``authorization_code``.
        """
        data = self._load(self._token_schema, params)
        if data["grant_type"] != AUTHORIZATION_CODE_GRANT:
            raise OAuthError(OAuthErrorKind.UNSUPPORTED_GRANT_TYPE, UNSUPPORTED_GRANT)
        declared = self._token_schema.fields.keys()
        return TokenRequestIn(
            grant_type=data["grant_type"],
            code=data["code"],
            redirect_uri=data["redirect_uri"],
            client_id=data["client_id"],
            extras={k: v for k, v in data.items() if k not in declared},
        )

    def authorize_request(self, params: Mapping[str, Any]) -> AuthorizeIn:
        """
        Validate ``GET /authorize`` parameters.

        :raises OAuthError: ``invalid_request`` for missing/malformed parameters.
        """
        data = self._load(self._authorize_schema, params)
        return AuthorizeIn(
            response_type=data["response_type"],
            client_id=data["client_id"],
            redirect_uri=data.get("redirect_uri"),
            scope=data.get("scope"),
            state=data.get("state"),
        )
