"""
Unit tests for GrantService using in-memory repositories.

Covers:
- authorization-code exchange (success, replay, expiry, client checks)
- atomic consumption under concurrent exchanges
- implicit issuance and its redirects
- authorization-code issuance
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qsl, urlsplit

import pytest
from authserver.models.client import Client
from authserver.models.token import Token, TokenType
from authserver.services._shared.errors import (
    ACCESS_DENIED,
    EXPIRED_CODE,
    INVALID_CODE,
    NO_REDIRECT_URI,
    REDIRECT_MISMATCH,
    OAuthError,
    OAuthErrorKind,
    StorageError,
)
from authserver.services._shared.ports import (
    InMemoryClientRepository,
    InMemoryTokenRepository,
    SequentialTokenGenerator,
)
from authserver.services.grants.dto import GrantConfig
from authserver.services.grants.service import GrantService, append_params
from authserver.uow import InMemoryUnitOfWork
from freezegun import freeze_time

CLIENT_ID = "5f1d7c2a9b3e4f60718293ab"
OTHER_CLIENT_ID = "0123456789abcdef01234567"
REDIRECT = "http://client.example.com"


def _client(client_id: str = CLIENT_ID, redirect_uri: str | None = REDIRECT) -> Client:
    return Client(id=client_id, redirect_uri=redirect_uri, name="demo", secret="s3cret")


def _code(
    value: str = "code-1",
    *,
    client_id: str = CLIENT_ID,
    now: datetime | None = None,
    ttl: timedelta = timedelta(minutes=10),
    scope_list: list[str] | None = None,
) -> Token:
    return Token.issue(
        token=value,
        user_id="user-1",
        client_id=client_id,
        type=TokenType.AUTHORIZATION_CODE,
        now=now or datetime.now(UTC),
        ttl=ttl,
        scope_list=scope_list if scope_list is not None else ["read", "write"],
    )


@pytest.fixture()
def clients():
    return InMemoryClientRepository([_client(), _client(OTHER_CLIENT_ID, None)])


@pytest.fixture()
def tokens():
    return InMemoryTokenRepository()


@pytest.fixture()
def service(clients, tokens):
    return GrantService(
        uow_factory=lambda: InMemoryUnitOfWork(clients, tokens),
        generator=SequentialTokenGenerator(prefix="at"),
        config=GrantConfig(token_ttl=timedelta(seconds=3600)),
    )


def _exchange_params(**overrides):
    params = {
        "grant_type": "authorization_code",
        "code": "code-1",
        "redirect_uri": REDIRECT,
        "client_id": CLIENT_ID,
    }
    params.update(overrides)
    return params


# ------------------------------------------------------------------ #
# Authorization Code exchange
# ------------------------------------------------------------------ #


class TestExchangeCode:
    def test_success_issues_access_token_with_code_scopes(self, service, tokens):
        tokens.add(_code(scope_list=["read", "profile"]))

        out = service.exchange_code(_exchange_params())

        assert out.access_token == "at-1"
        assert out.expires_in == 3600
        issued = tokens.find_tokens(token="at-1", type=TokenType.ACCESS_TOKEN)
        assert len(issued) == 1
        assert issued[0].scope_list == ["read", "profile"]
        assert issued[0].user_id == "user-1"
        code = tokens.find_tokens(token="code-1", type=TokenType.AUTHORIZATION_CODE)[0]
        assert code.last_access is not None

    def test_second_exchange_fails_with_invalid_grant(self, service, tokens):
        tokens.add(_code())
        service.exchange_code(_exchange_params())

        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params())
        assert exc.value.kind is OAuthErrorKind.INVALID_GRANT

    def test_payload_echoes_pass_through_fields_only(self, service, tokens):
        tokens.add(_code())
        out = service.exchange_code(
            _exchange_params(client_secret="s", type="x", custom="kept")
        )
        payload = out.to_payload()
        assert payload == {
            "custom": "kept",
            "access_token": "at-1",
            "token_type": "bearer",
            "expires_in": 3600,
        }

    def test_unsupported_grant_type_never_touches_storage(self, service, clients):
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params(grant_type="password"))
        assert exc.value.kind is OAuthErrorKind.UNSUPPORTED_GRANT_TYPE
        assert clients.lookups == 0

    def test_malformed_client_id_never_touches_storage(self, service, clients):
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params(client_id="nope"))
        assert exc.value.kind is OAuthErrorKind.INVALID_REQUEST
        assert clients.lookups == 0

    def test_unknown_client(self, service):
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params(client_id="ffffffffffffffffffffffff"))
        assert exc.value.kind is OAuthErrorKind.INVALID_CLIENT

    def test_redirect_mismatch(self, service, tokens):
        tokens.add(_code())
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params(redirect_uri="http://evil.example.com"))
        assert exc.value.kind is OAuthErrorKind.INVALID_GRANT
        assert exc.value.description == REDIRECT_MISMATCH

    def test_unknown_code(self, service):
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params(code="missing"))
        assert exc.value.description == INVALID_CODE

    def test_revoked_code_behaves_as_unknown(self, service, tokens):
        code = _code()
        code.valid = False
        tokens.add(code)
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params())
        assert exc.value.description == INVALID_CODE

    def test_access_token_cannot_be_exchanged(self, service, tokens):
        access = _code()
        access.type = TokenType.ACCESS_TOKEN
        tokens.add(access)
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params())
        assert exc.value.description == INVALID_CODE

    def test_code_of_another_client_is_rejected(self, service, tokens):
        tokens.add(_code(client_id=OTHER_CLIENT_ID))
        with pytest.raises(OAuthError) as exc:
            service.exchange_code(_exchange_params())
        assert exc.value.kind is OAuthErrorKind.INVALID_GRANT
        assert exc.value.description == INVALID_CODE

    def test_expired_code(self, service, tokens):
        with freeze_time("2026-01-01 12:00:00"):
            tokens.add(_code(ttl=timedelta(minutes=10)))
        with freeze_time("2026-01-01 12:10:00"), pytest.raises(OAuthError) as exc:
            # expires_at == now counts as expired
            service.exchange_code(_exchange_params())
        assert exc.value.description == EXPIRED_CODE

    def test_code_just_before_expiry_is_accepted(self, service, tokens):
        with freeze_time("2026-01-01 12:00:00"):
            tokens.add(_code(ttl=timedelta(minutes=10)))
        with freeze_time("2026-01-01 12:09:59"):
            assert service.exchange_code(_exchange_params()).access_token == "at-1"

    def test_generator_collision_is_retried(self, clients, tokens):
        existing = _code("taken")
        existing.type = TokenType.ACCESS_TOKEN
        tokens.add(existing)
        tokens.add(_code())
        service = GrantService(
            uow_factory=lambda: InMemoryUnitOfWork(clients, tokens),
            generator=SequentialTokenGenerator(prefix="at", scripted=["taken", "code-1"]),
        )
        assert service.exchange_code(_exchange_params()).access_token == "at-1"

    def test_generator_exhaustion_is_a_storage_error(self, clients, tokens):
        tokens.add(_code())
        service = GrantService(
            uow_factory=lambda: InMemoryUnitOfWork(clients, tokens),
            generator=SequentialTokenGenerator(scripted=["code-1"] * 5),
        )
        with pytest.raises(StorageError):
            service.exchange_code(_exchange_params())

    def test_concurrent_exchanges_yield_exactly_one_success(self, clients, tokens):
        tokens.add(_code())
        workers = 8
        barrier = threading.Barrier(workers)
        outcomes: list[str] = []
        lock = threading.Lock()

        def _run(n: int) -> None:
            service = GrantService(
                uow_factory=lambda: InMemoryUnitOfWork(clients, tokens),
                generator=SequentialTokenGenerator(prefix=f"w{n}"),
            )
            barrier.wait()
            try:
                service.exchange_code(_exchange_params())
                result = "ok"
            except OAuthError as exc:
                result = exc.kind.value
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=_run, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("invalid_grant") == workers - 1


# ------------------------------------------------------------------ #
# Implicit grant
# ------------------------------------------------------------------ #


def _authorize_params(**overrides):
    params = {
        "response_type": "token",
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT,
        "scope": "read write",
        "state": "xyz",
    }
    params.update(overrides)
    return {k: v for k, v in params.items() if v is not None}


class TestAuthorize:
    def test_redirects_with_access_token_in_query(self, service, tokens):
        out = service.authorize(_authorize_params(), user_id="user-9", resume_url="/authorize?x")

        assert out.reason == "token"
        assert out.location == (
            "http://client.example.com?access_token=at-1&token_type=bearer"
            "&expires_in=3600&state=xyz"
        )
        stored = tokens.find_tokens(token="at-1", type=TokenType.ACCESS_TOKEN)
        assert stored[0].user_id == "user-9"
        assert stored[0].scope_list == ["read", "write"]
        # Implicit credentials can never be exchanged as codes
        assert tokens.find_tokens(token="at-1", type=TokenType.AUTHORIZATION_CODE) == []

    def test_anonymous_owner_is_sent_to_login(self, service, clients):
        out = service.authorize(
            _authorize_params(), user_id=None, resume_url="/authorize?response_type=token"
        )
        assert out.reason == "login"
        parts = urlsplit(out.location)
        assert parts.path == "/login"
        assert dict(parse_qsl(parts.query)) == {"next": "/authorize?response_type=token"}
        assert clients.lookups == 0

    def test_validation_runs_before_login_redirect(self, service):
        with pytest.raises(OAuthError) as exc:
            service.authorize(_authorize_params(client_id="bad"), user_id=None, resume_url="/")
        assert exc.value.kind is OAuthErrorKind.INVALID_REQUEST

    def test_unknown_client_with_token_response_is_access_denied(self, service):
        with pytest.raises(OAuthError) as exc:
            service.authorize(
                _authorize_params(client_id="ffffffffffffffffffffffff"),
                user_id="u",
                resume_url="/",
            )
        assert exc.value.kind is OAuthErrorKind.ACCESS_DENIED
        assert exc.value.description == ACCESS_DENIED

    def test_unknown_client_with_other_response_is_unsupported(self, service):
        with pytest.raises(OAuthError) as exc:
            service.authorize(
                _authorize_params(client_id="ffffffffffffffffffffffff", response_type="code"),
                user_id=None,
                resume_url="/",
            )
        assert exc.value.kind is OAuthErrorKind.UNSUPPORTED_RESPONSE_TYPE

    def test_redirect_mismatch_is_access_denied(self, service):
        with pytest.raises(OAuthError) as exc:
            service.authorize(
                _authorize_params(redirect_uri="http://evil.example.com"),
                user_id="u",
                resume_url="/",
            )
        assert exc.value.kind is OAuthErrorKind.ACCESS_DENIED
        assert exc.value.description == REDIRECT_MISMATCH

    def test_stored_redirect_is_used_when_absent(self, service):
        out = service.authorize(_authorize_params(redirect_uri=None), user_id="u", resume_url="/")
        assert out.location.startswith("http://client.example.com?access_token=")

    def test_no_redirect_anywhere_is_invalid_request(self, service):
        with pytest.raises(OAuthError) as exc:
            service.authorize(
                _authorize_params(client_id=OTHER_CLIENT_ID, redirect_uri=None),
                user_id="u",
                resume_url="/",
            )
        assert exc.value.kind is OAuthErrorKind.INVALID_REQUEST
        assert exc.value.description == NO_REDIRECT_URI

    def test_other_response_type_redirects_with_error(self, service, tokens):
        out = service.authorize(_authorize_params(response_type="code"), user_id=None, resume_url="/")
        assert out.reason == "error"
        assert out.location == "http://client.example.com?error=unsupported_response_type&state=xyz"
        assert not tokens.token_exists("at-1")

    def test_fragment_mode(self, clients, tokens):
        service = GrantService(
            uow_factory=lambda: InMemoryUnitOfWork(clients, tokens),
            generator=SequentialTokenGenerator(prefix="at"),
            config=GrantConfig(response_mode="fragment"),
        )
        out = service.authorize(_authorize_params(state=None), user_id="u", resume_url="/")
        assert out.location == (
            "http://client.example.com#access_token=at-1&token_type=bearer&expires_in=3600"
        )


class TestAppendParams:
    def test_existing_query_is_preserved(self):
        assert append_params("https://c.example/cb?a=1", [("b", "2")]) == "https://c.example/cb?a=1&b=2"

    def test_none_values_are_skipped(self):
        assert append_params("https://c.example/cb", [("a", "1"), ("s", None)]) == "https://c.example/cb?a=1"

    def test_values_are_encoded(self):
        assert append_params("/login", [("next", "/authorize?a=b c")]) == "/login?next=%2Fauthorize%3Fa%3Db+c"


# ------------------------------------------------------------------ #
# Authorization code issuance
# ------------------------------------------------------------------ #


class TestIssueAuthorizationCode:
    def test_issues_exchangeable_code(self, service, tokens):
        out = service.issue_authorization_code(
            user_id="user-1", client_id=CLIENT_ID.upper(), scope_list=["read"]
        )
        assert out.client_id == CLIENT_ID
        assert out.expires_in == 600
        code = tokens.find_tokens(token=out.code, type=TokenType.AUTHORIZATION_CODE)[0]
        assert code.scope_list == ["read"]

        grant = service.exchange_code(_exchange_params(code=out.code))
        assert grant.access_token != out.code

    def test_unknown_client(self, service):
        with pytest.raises(OAuthError) as exc:
            service.issue_authorization_code(user_id="u", client_id="ffffffffffffffffffffffff")
        assert exc.value.kind is OAuthErrorKind.INVALID_CLIENT
