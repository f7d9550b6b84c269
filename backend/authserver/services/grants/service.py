# authserver/services/grants/service.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import timedelta
from typing import Any
from urllib.parse import urlencode

from authserver.core.logger import mask_token
from authserver.models.token import Token, TokenType
from authserver.services._shared.base import BaseService, UnitOfWorkFactory
from authserver.services._shared.errors import (
    ACCESS_DENIED,
    EXPIRED_CODE,
    INVALID_CODE,
    MALFORMED_CLIENT_ID,
    NO_REDIRECT_URI,
    REDIRECT_MISMATCH,
    UNKNOWN_CLIENT,
    UNSUPPORTED_RESPONSE,
    OAuthError,
    OAuthErrorKind,
    StorageError,
    TokenCollisionError,
)
from authserver.services._shared.policies.client_id import normalize_client_id
from authserver.services._shared.ports import (
    SecureTokenGenerator,
    TokenGenerator,
    TokenRepository,
)
from authserver.services.grants.dto import (
    AuthorizationCodeOut,
    GrantConfig,
    RedirectOut,
    TokenGrantOut,
)
from authserver.services.grants.validation import AUTHORIZATION_CODE_GRANT, RequestValidator

log = logging.getLogger(__name__)

#: Parameters never echoed back in a token response
RESERVED_FIELDS = frozenset(
    {"grant_type", "redirect_uri", "client_id", "client_secret", "type", "code"}
)

IMPLICIT_RESPONSE_TYPE = "token"

#: Fresh values tried before giving up on a unique token
MAX_GENERATION_ATTEMPTS = 5


def append_params(
    uri: str,
    pairs: Iterable[tuple[str, str | None]],
    *,
    mode: str = "query",
) -> str:
    """
    Append URL-encoded ``pairs`` to ``uri``, skipping ``None`` values.

    :param uri: Redirect target; an existing query string is preserved.
    :param pairs: Ordered ``(name, value)`` pairs.
    :param mode: ``"query"`` or ``"fragment"``.
    :rtype: str
    """
    encoded = urlencode([(k, v) for k, v in pairs if v is not None])
    base = uri.split("#", 1)[0]
    if mode == "fragment":
        return f"{base}#{encoded}"
    if "?" not in base:
        return f"{base}?{encoded}"
    joiner = "" if base.endswith(("?", "&")) else "&"
    return f"{base}{joiner}{encoded}"


class GrantService(BaseService):
    """
    Grant engine: authorization-code exchange and implicit issuance.

    Every use case runs inside one Unit of Work. The code exchange relies on
    :meth:`TokenRepository.exchange_code` so the "consume the code" and
    "store the access token" steps are a single atomic operation.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        generator: TokenGenerator | None = None,
        config: GrantConfig | None = None,
        validator: RequestValidator | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param uow_factory: Builds the Unit of Work exposing ``clients``/``tokens``.
        :param generator: Opaque token source (CSPRNG by default).
        :param config: Lifetimes, login URL and implicit response mode.
        :param validator: Request validator (Marshmallow based by default).
        """
        super().__init__(uow_factory=uow_factory)
        self.generator = generator or SecureTokenGenerator()
        self.cfg = config or GrantConfig()
        self.validator = validator or RequestValidator()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _new_token(
        self, tokens: TokenRepository, build: Callable[[str], Token]
    ) -> Token:
        """Build a token around a generated value not yet present in the store."""
        for _ in range(MAX_GENERATION_ATTEMPTS):
            value = self.generator.generate()
            if not tokens.token_exists(value):
                return build(value)
            log.warning("Generated token value collided; retrying", extra={"token": mask_token(value)})
        raise StorageError("Could not generate a unique token value")

    def _issue(
        self,
        tokens: TokenRepository,
        *,
        user_id: str,
        client_id: str,
        type: TokenType,
        ttl: timedelta,
        scope_list: list[str],
    ) -> Token:
        now = self.now_utc()
        token = self._new_token(
            tokens,
            lambda value: Token.issue(
                token=value,
                user_id=user_id,
                client_id=client_id,
                type=type,
                now=now,
                ttl=ttl,
                scope_list=scope_list,
            ),
        )
        try:
            return tokens.add(token)
        except TokenCollisionError as exc:
            raise StorageError("Token value already stored") from exc

    def login_redirect(self, resume_url: str) -> RedirectOut:
        """Suspend the flow behind the login step, carrying the original request."""
        return RedirectOut(append_params(self.cfg.login_url, [("next", resume_url)]), "login")

    # ------------------------------------------------------------------ #
    # Authorization Code exchange (POST /token)
    # ------------------------------------------------------------------ #

    def exchange_code(self, params: Mapping[str, Any]) -> TokenGrantOut:
        """
        Exchange an authorization code for an access token.

        :param params: Raw request parameters.
        :returns: Token payload; pass-through fields exclude reserved names.
        :raises OAuthError: ``invalid_request``, ``unsupported_grant_type``,
            ``invalid_client`` or ``invalid_grant``.
        :raises StorageError: When no unique token value can be stored.
        """
        dto = self.validator.token_request(params)
        now = self.now_utc()

        with self.uow() as uow:
            client = uow.clients.find_client(dto.client_id)
            if client is None:
                raise OAuthError(OAuthErrorKind.INVALID_CLIENT, UNKNOWN_CLIENT)
            if client.redirect_uri != dto.redirect_uri:
                raise OAuthError(OAuthErrorKind.INVALID_GRANT, REDIRECT_MISMATCH)

            codes = uow.tokens.find_tokens(token=dto.code, type=TokenType.AUTHORIZATION_CODE)
            if len(codes) != 1 or codes[0].client_id != dto.client_id:
                raise OAuthError(OAuthErrorKind.INVALID_GRANT, INVALID_CODE)
            code = codes[0]
            if code.is_expired(now) or code.is_consumed:
                raise OAuthError(OAuthErrorKind.INVALID_GRANT, EXPIRED_CODE)

            access = self._new_token(
                uow.tokens,
                lambda value: Token.issue(
                    token=value,
                    user_id=code.user_id,
                    client_id=code.client_id,
                    type=TokenType.ACCESS_TOKEN,
                    now=now,
                    ttl=self.cfg.token_ttl,
                    scope_list=list(code.scope_list or []),
                ),
            )
            value = access.token
            try:
                consumed = uow.tokens.exchange_code(
                    code=dto.code,
                    client_id=dto.client_id,
                    consumed_at=now,
                    access_token=access,
                )
            except TokenCollisionError as exc:
                raise StorageError("Token value already stored") from exc
            if not consumed:
                # Another request consumed the code between the read and the update
                log.warning(
                    "Authorization code consumed concurrently",
                    extra={"client_id": dto.client_id, "grant": AUTHORIZATION_CODE_GRANT,
                           "outcome": "conflict", "token": mask_token(dto.code)},
                )
                raise OAuthError(OAuthErrorKind.INVALID_GRANT, EXPIRED_CODE)

        log.info(
            "Authorization code exchanged",
            extra={"client_id": dto.client_id, "grant": AUTHORIZATION_CODE_GRANT,
                   "outcome": "issued", "token": mask_token(value)},
        )
        extras = {k: v for k, v in dto.extras.items() if k not in RESERVED_FIELDS}
        return TokenGrantOut(
            access_token=value,
            expires_in=self.cfg.token_ttl_seconds,
            extras=extras,
        )

    # ------------------------------------------------------------------ #
    # Implicit grant (GET /authorize)
    # ------------------------------------------------------------------ #

    def authorize(
        self,
        params: Mapping[str, Any],
        *,
        user_id: str | None,
        resume_url: str,
    ) -> RedirectOut:
        """
        Issue an implicit-flow access token and build the client redirect.

        :param params: Raw query parameters.
        :param user_id: Logged-in resource owner, ``None`` when anonymous.
        :param resume_url: Original request path and query, replayed after login.
        :returns: The redirect to issue (login, token or error redirect).
        :raises OAuthError: When the client or its redirect URI cannot be trusted.
        """
        dto = self.validator.authorize_request(params)
        implicit = dto.response_type == IMPLICIT_RESPONSE_TYPE

        if user_id is None and implicit:
            return self.login_redirect(resume_url)

        with self.uow() as uow:
            client = uow.clients.find_client(dto.client_id)
            if client is None:
                if not implicit:
                    raise OAuthError(OAuthErrorKind.UNSUPPORTED_RESPONSE_TYPE, UNSUPPORTED_RESPONSE)
                raise OAuthError(OAuthErrorKind.ACCESS_DENIED, ACCESS_DENIED)

            if dto.redirect_uri and client.redirect_uri != dto.redirect_uri:
                raise OAuthError(OAuthErrorKind.ACCESS_DENIED, REDIRECT_MISMATCH)
            redirect_uri = dto.redirect_uri or client.redirect_uri
            if not redirect_uri:
                raise OAuthError(OAuthErrorKind.INVALID_REQUEST, NO_REDIRECT_URI)

            if not implicit:
                location = append_params(
                    redirect_uri,
                    [("error", OAuthErrorKind.UNSUPPORTED_RESPONSE_TYPE.value), ("state", dto.state)],
                )
                log.info(
                    "Unsupported response type redirected",
                    extra={"client_id": dto.client_id, "grant": "implicit", "outcome": "error"},
                )
                return RedirectOut(location, "error")

            token = self._issue(
                uow.tokens,
                user_id=str(user_id),
                client_id=client.id,
                type=TokenType.ACCESS_TOKEN,
                ttl=self.cfg.token_ttl,
                scope_list=dto.scope_list,
            )
            value = token.token

        log.info(
            "Implicit access token issued",
            extra={"client_id": dto.client_id, "grant": "implicit",
                   "outcome": "issued", "token": mask_token(value)},
        )
        location = append_params(
            redirect_uri,
            [
                ("access_token", value),
                ("token_type", "bearer"),
                ("expires_in", str(self.cfg.token_ttl_seconds)),
                ("state", dto.state),
            ],
            mode=self.cfg.response_mode,
        )
        return RedirectOut(location, "token")

    # ------------------------------------------------------------------ #
    # Authorization code issuance (login/consent collaborator, CLI)
    # ------------------------------------------------------------------ #

    def issue_authorization_code(
        self,
        *,
        user_id: str,
        client_id: str,
        scope_list: Iterable[str] = (),
    ) -> AuthorizationCodeOut:
        """
        Issue a single-use authorization code for a registered client.

        :raises OAuthError: ``invalid_request`` for a malformed client id,
            ``invalid_client`` for an unknown client.
        """
        canonical = normalize_client_id(client_id)
        if canonical is None:
            raise OAuthError(OAuthErrorKind.INVALID_REQUEST, MALFORMED_CLIENT_ID)

        with self.uow() as uow:
            if uow.clients.find_client(canonical) is None:
                raise OAuthError(OAuthErrorKind.INVALID_CLIENT, UNKNOWN_CLIENT)
            token = self._issue(
                uow.tokens,
                user_id=str(user_id),
                client_id=canonical,
                type=TokenType.AUTHORIZATION_CODE,
                ttl=self.cfg.code_ttl,
                scope_list=list(scope_list),
            )
            value = token.token

        log.info(
            "Authorization code issued",
            extra={"client_id": canonical, "grant": AUTHORIZATION_CODE_GRANT,
                   "outcome": "issued", "token": mask_token(value)},
        )
        return AuthorizationCodeOut(
            code=value,
            client_id=canonical,
            expires_in=int(self.cfg.code_ttl.total_seconds()),
        )
