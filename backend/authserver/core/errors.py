"""Centralized RFC 6749 error mapping and JSON error handling."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, current_app, jsonify, request
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from authserver.core.logger import ensure_request_id
from authserver.services._shared.errors import OAuthError, OAuthErrorKind, StorageError

log = logging.getLogger(__name__)

STATUS_BY_KIND: Mapping[OAuthErrorKind, int] = {
    OAuthErrorKind.INVALID_REQUEST: HTTPStatus.BAD_REQUEST,
    OAuthErrorKind.INVALID_CLIENT: HTTPStatus.UNAUTHORIZED,
    OAuthErrorKind.INVALID_GRANT: HTTPStatus.BAD_REQUEST,
    OAuthErrorKind.UNSUPPORTED_GRANT_TYPE: HTTPStatus.BAD_REQUEST,
    OAuthErrorKind.UNSUPPORTED_RESPONSE_TYPE: HTTPStatus.BAD_REQUEST,
    OAuthErrorKind.ACCESS_DENIED: HTTPStatus.UNAUTHORIZED,
    OAuthErrorKind.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    OAuthErrorKind.SERVER_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}

SERVER_ERROR_DESCRIPTION = (
    "The authorization server encountered an unexpected condition."
)


def _quote(value: str) -> str:
    """Escape a value for use inside a quoted ``WWW-Authenticate`` parameter."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def map_error(
    kind: OAuthErrorKind,
    description: str,
    *,
    realm: str,
) -> tuple[int, dict[str, str], dict[str, str]]:
    """
    Translate an error kind into an HTTP status, headers and JSON body.

    Pure function: everything it needs is passed in, nothing is read from the
    application or request context.

    :param kind: RFC 6749 error code.
    :param description: Client-safe ``error_description``.
    :param realm: Realm advertised in the ``WWW-Authenticate`` challenge.
    :returns: ``(status, headers, body)``.
    :rtype: tuple[int, dict[str, str], dict[str, str]]
    """
    status = int(STATUS_BY_KIND[kind])
    # The verification endpoint reports the bare status code as its error
    error = str(status) if kind is OAuthErrorKind.UNAUTHORIZED else kind.value
    headers = {
        "WWW-Authenticate": (
            f'Bearer realm="{_quote(realm)}", error="{_quote(error)}", '
            f'error_description="{_quote(description)}"'
        ),
        "Cache-Control": "no-store",
        "Pragma": "no-cache",
    }
    body = {"error": error, "error_description": description}
    return status, headers, body


def error_response(status: int, headers: Mapping[str, str], body: Mapping[str, Any]) -> Response:
    """Render a mapped error as a JSON response."""
    resp = jsonify(dict(body))
    resp.status_code = status
    for name, value in headers.items():
        resp.headers[name] = value
    return resp


def _http_status_to_code(status_code: int) -> str:
    """Map transport-level HTTP statuses to stable error codes."""
    mapping = {
        400: "invalid_request",
        404: "not_found",
        405: "method_not_allowed",
        413: "payload_too_large",
        415: "unsupported_media_type",
        500: "server_error",
        503: "temporarily_unavailable",
    }
    return mapping.get(status_code, "error")


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Every handler builds its response through :func:`map_error`, passing the
      configured ``OAUTH_REALM`` explicitly.
    - Storage failures surface as ``server_error`` (500), never as a missing
      client or token.
    - 4xx are logged as warnings; 5xx as errors with ``exc_info``.
    """

    def _realm() -> str:
        return str(current_app.config.get("OAUTH_REALM", "authserver"))

    @app.errorhandler(OAuthError)
    def handle_oauth_error(err: OAuthError):
        status, headers, body = map_error(err.kind, err.description, realm=_realm())
        level = log.error if status >= 500 else log.warning
        level(
            "OAuthError: error=%s status=%s path=%s request_id=%s",
            err.kind.value,
            status,
            request.path,
            ensure_request_id(),
        )
        return error_response(status, headers, body)

    def _server_error(kind_label: str) -> Response:
        log.error(
            "%s: path=%s request_id=%s",
            kind_label,
            request.path,
            ensure_request_id(),
            exc_info=True,
        )
        status, headers, body = map_error(
            OAuthErrorKind.SERVER_ERROR, SERVER_ERROR_DESCRIPTION, realm=_realm()
        )
        return error_response(status, headers, body)

    @app.errorhandler(StorageError)
    def handle_storage_error(err: StorageError):
        return _server_error("StorageError")

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(err: SQLAlchemyError):
        return _server_error("DatabaseError")

    @app.errorhandler(RedisError)
    def handle_redis_error(err: RedisError):
        return _server_error("RedisError")

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s request_id=%s",
            error_code,
            status,
            ensure_request_id(),
        )
        resp = jsonify({"error": error_code, "error_description": message})
        resp.status_code = status
        return resp

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        return _server_error("Unhandled exception")
