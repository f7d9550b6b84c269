"""Unit tests for TokenVerificationService and bearer extraction."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from authserver.models.token import Token, TokenType
from authserver.services._shared.errors import OAuthError, OAuthErrorKind
from authserver.services._shared.ports import InMemoryTokenRepository
from authserver.services.verification.dto import VerifyIn
from authserver.services.verification.service import TokenVerificationService
from authserver.uow import InMemoryUnitOfWork
from freezegun import freeze_time

CLIENT_ID = "5f1d7c2a9b3e4f60718293ab"


def _token(value="tok", *, type=TokenType.ACCESS_TOKEN, ttl=timedelta(hours=1)) -> Token:
    return Token.issue(
        token=value,
        user_id="user-1",
        client_id=CLIENT_ID,
        type=type,
        now=datetime.now(UTC),
        ttl=ttl,
        scope_list=["read"],
    )


@pytest.fixture()
def tokens():
    return InMemoryTokenRepository()


@pytest.fixture()
def service(tokens):
    return TokenVerificationService(uow_factory=lambda: InMemoryUnitOfWork(tokens=tokens))


class TestVerify:
    def test_valid_token_returns_record_and_tracks_access(self, service, tokens):
        with freeze_time("2026-03-01 08:00:00"):
            tokens.add(_token())
        with freeze_time("2026-03-01 08:30:00"):
            record = service.verify(VerifyIn(token="tok"))
        assert record.token == "tok"
        assert record.type is TokenType.ACCESS_TOKEN
        assert record.scope_list == ["read"]
        assert record.last_access == datetime(2026, 3, 1, 8, 30, tzinfo=UTC)

    def test_token_stays_reusable(self, service, tokens):
        tokens.add(_token())
        service.verify(VerifyIn(token="tok"))
        assert service.verify(VerifyIn(token="tok")).valid is True

    def test_expired_token_is_unauthorized(self, service, tokens):
        with freeze_time("2026-03-01 08:00:00"):
            tokens.add(_token(ttl=timedelta(hours=1)))
        with freeze_time("2026-03-01 09:00:00"), pytest.raises(OAuthError) as exc:
            service.verify(VerifyIn(token="tok"))
        assert exc.value.kind is OAuthErrorKind.UNAUTHORIZED

    @pytest.mark.parametrize("presented", [None, "", "unknown"])
    def test_missing_or_unknown_token(self, service, presented):
        with pytest.raises(OAuthError) as exc:
            service.verify(VerifyIn(token=presented))
        assert exc.value.kind is OAuthErrorKind.UNAUTHORIZED

    def test_authorization_code_is_not_a_bearer_token(self, service, tokens):
        tokens.add(_token(type=TokenType.AUTHORIZATION_CODE))
        with pytest.raises(OAuthError):
            service.verify(VerifyIn(token="tok"))

    def test_revoked_token(self, service, tokens):
        token = _token()
        token.valid = False
        tokens.add(token)
        with pytest.raises(OAuthError):
            service.verify(VerifyIn(token="tok"))


class TestVerifyIn:
    def test_header_takes_precedence(self):
        dto = VerifyIn.from_request("Bearer from-header", {"access_token": "from-query"})
        assert dto.token == "from-header"

    @pytest.mark.parametrize(
        "header",
        ["Basic abc", "Bearer", "Bearer a b", "bearer abc", "Bearer "],
    )
    def test_malformed_header_falls_back_to_query(self, header):
        dto = VerifyIn.from_request(header, {"access_token": "from-query"})
        assert dto.token == "from-query"

    def test_nothing_presented(self):
        assert VerifyIn.from_request(None, {}).token is None
