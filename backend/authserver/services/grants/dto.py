# authserver/services/grants/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenRequestIn:
    """
    Validated authorization-code exchange request.

    :param grant_type: Requested grant (only ``authorization_code`` passes).
    :param code: Authorization code being exchanged.
    :param redirect_uri: Redirect URI the code was requested with.
    :param client_id: Canonical 24-hex client identifier.
    :param extras: Unrecognized request parameters, echoed in the response.
    """

    grant_type: str
    code: str
    redirect_uri: str
    client_id: str
    extras: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AuthorizeIn:
    """
    Validated implicit-grant request.

    :param response_type: Requested response type (only ``token`` issues).
    :param client_id: Canonical 24-hex client identifier.
    :param redirect_uri: Requested redirect URI, ``None`` when not supplied.
    :param scope: Space-delimited scope string, ``None`` when not supplied.
    :param state: Opaque client state, ``None`` when not supplied.
    """

    response_type: str
    client_id: str
    redirect_uri: str | None = None
    scope: str | None = None
    state: str | None = None

    @property
    def scope_list(self) -> list[str]:
        return self.scope.split() if self.scope else []


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenGrantOut:
    """
    Successful token-endpoint result (RFC 6749 §5.1).

    :param access_token: Issued access token.
    :param expires_in: Lifetime in seconds.
    :param extras: Pass-through request fields (reserved ones removed).
    """

    access_token: str
    expires_in: int
    token_type: str = "bearer"
    extras: Mapping[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload = dict(self.extras)
        payload.update(
            access_token=self.access_token,
            token_type=self.token_type,
            expires_in=self.expires_in,
        )
        return payload


@dataclass(frozen=True, slots=True)
class RedirectOut:
    """
    A 302 the transport layer must issue.

    :param location: Absolute or relative target URL.
    :param reason: ``"login"``, ``"token"`` or ``"error"``.
    """

    location: str
    reason: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class GrantConfig:
    """
    Grant issuance configuration.

    :param token_ttl: Access-token lifetime.
    :param code_ttl: Authorization-code lifetime.
    :param login_url: Interactive login step for the implicit flow.
    :param response_mode: ``"query"`` or ``"fragment"`` for implicit redirects.
    """

    token_ttl: timedelta = timedelta(seconds=3600)
    code_ttl: timedelta = timedelta(seconds=600)
    login_url: str = "/login"
    response_mode: str = "query"

    @property
    def token_ttl_seconds(self) -> int:
        return int(self.token_ttl.total_seconds())

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any]) -> GrantConfig:
        """Build from a Flask config (or any mapping with the same keys)."""
        return cls(
            token_ttl=timedelta(seconds=int(cfg.get("TOKEN_TTL", 3600))),
            code_ttl=timedelta(seconds=int(cfg.get("AUTHORIZATION_CODE_TTL", 600))),
            login_url=str(cfg.get("LOGIN_URL", "/login")),
            response_mode=str(cfg.get("IMPLICIT_RESPONSE_MODE", "query")),
        )


@dataclass(frozen=True, slots=True)
class AuthorizationCodeOut:
    """
    Freshly issued authorization code.

    :param code: Opaque single-use code.
    :param client_id: Canonical client identifier the code is bound to.
    :param expires_in: Lifetime in seconds.
    """

    code: str
    client_id: str
    expires_in: int
