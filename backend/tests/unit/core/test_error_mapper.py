"""Unit tests for the pure RFC 6749 error mapper."""

from __future__ import annotations

import pytest
from authserver.core.errors import map_error
from authserver.services._shared.errors import OAuthErrorKind


@pytest.mark.parametrize(
    ("kind", "status"),
    [
        (OAuthErrorKind.INVALID_REQUEST, 400),
        (OAuthErrorKind.INVALID_CLIENT, 401),
        (OAuthErrorKind.INVALID_GRANT, 400),
        (OAuthErrorKind.UNSUPPORTED_GRANT_TYPE, 400),
        (OAuthErrorKind.UNSUPPORTED_RESPONSE_TYPE, 400),
        (OAuthErrorKind.ACCESS_DENIED, 401),
        (OAuthErrorKind.UNAUTHORIZED, 401),
        (OAuthErrorKind.SERVER_ERROR, 500),
    ],
)
def test_status_by_kind(kind, status):
    mapped_status, _, _ = map_error(kind, "x", realm="r")
    assert mapped_status == status


def test_body_and_challenge_header():
    status, headers, body = map_error(
        OAuthErrorKind.INVALID_GRANT, "Invalid authorization code", realm="authserver"
    )
    assert status == 400
    assert body == {"error": "invalid_grant", "error_description": "Invalid authorization code"}
    assert headers["WWW-Authenticate"] == (
        'Bearer realm="authserver", error="invalid_grant", '
        'error_description="Invalid authorization code"'
    )
    assert headers["Cache-Control"] == "no-store"


def test_unauthorized_reports_bare_status():
    _, headers, body = map_error(OAuthErrorKind.UNAUTHORIZED, "Unauthorized", realm="r")
    assert body == {"error": "401", "error_description": "Unauthorized"}
    assert 'error="401"' in headers["WWW-Authenticate"]


def test_quotes_are_escaped_in_header():
    _, headers, _ = map_error(OAuthErrorKind.INVALID_REQUEST, 'say "hi"', realm='a"b')
    assert 'realm="a\\"b"' in headers["WWW-Authenticate"]
    assert 'error_description="say \\"hi\\""' in headers["WWW-Authenticate"]
