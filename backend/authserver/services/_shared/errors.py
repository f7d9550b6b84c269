"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask, HTTP or
SQLAlchemy. They are the stable contract between the request validator, the
grant/verification services and the error mapper in
``authserver/core/errors.py``, which turns them into RFC 6749 responses.
"""

from __future__ import annotations

from enum import Enum

from authserver.repositories.errors import TokenCollisionError  # noqa: F401 (re-exported)


class OAuthErrorKind(str, Enum):
    """RFC 6749 §5.2 error vocabulary plus the local ``unauthorized`` extension."""

    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    ACCESS_DENIED = "access_denied"
    UNAUTHORIZED = "unauthorized"
    SERVER_ERROR = "server_error"


# Client-facing descriptions shared by the validator and the services
MISSING_PARAMETER = "The request is missing a required parameter."
MALFORMED_CLIENT_ID = (
    "client_id must be a single String of 12 bytes or a string of 24 hex characters."
)
UNSUPPORTED_GRANT = (
    "The authorization grant type is not supported by the authorization server."
)
UNSUPPORTED_RESPONSE = (
    "The response type is not supported by the authorization server."
)
UNKNOWN_CLIENT = "Client authentication failed, unknown client."
ACCESS_DENIED = "The resource owner or authorization server denied the request."
REDIRECT_MISMATCH = "Redirection URI does not match."
NO_REDIRECT_URI = "No redirection URI provided."
INVALID_CODE = "Invalid authorization code"
EXPIRED_CODE = "Authorization code expired"
UNAUTHORIZED = "Unauthorized"


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, ports or services.
    - The error mapper translates them into status, headers and body.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class OAuthError(ServiceError):
    """
    A protocol-level failure carrying its RFC 6749 error code.

    :param kind: Error code from :class:`OAuthErrorKind`.
    :type kind: OAuthErrorKind
    :param description: Human-readable ``error_description`` (safe for clients).
    :type description: str
    """

    def __init__(self, kind: OAuthErrorKind, description: str) -> None:
        super().__init__(description)
        self.kind = kind
        self.description = description

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.description}"


class StorageError(ServiceError):
    """
    Raised when a backing store cannot serve a request.

    Never reported as "not found": the mapper turns it into ``server_error``.
    """
