"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`authserver.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``authserver.services._shared.base``)
    * :class:`BaseService`

- Grant engine (from ``authserver.services.grants``)
    * :class:`GrantService`, :class:`RequestValidator`
    * DTOs: :class:`GrantConfig`, :class:`TokenGrantOut`, :class:`RedirectOut`,
      :class:`AuthorizationCodeOut`

- Token verifier (from ``authserver.services.verification``)
    * :class:`TokenVerificationService`
    * DTOs: :class:`VerifyIn`, :class:`TokenRecordOut`
"""

from __future__ import annotations

# Base primitives
from ._shared.base import BaseService

# Grant engine + DTOs
from .grants.dto import AuthorizationCodeOut, GrantConfig, RedirectOut, TokenGrantOut
from .grants.service import GrantService
from .grants.validation import RequestValidator

# Token verifier + DTOs
from .verification.dto import TokenRecordOut, VerifyIn
from .verification.service import TokenVerificationService

__all__ = [
    # Base
    "BaseService",
    # Grants
    "GrantService",
    "RequestValidator",
    "GrantConfig",
    "TokenGrantOut",
    "RedirectOut",
    "AuthorizationCodeOut",
    # Verification
    "TokenVerificationService",
    "VerifyIn",
    "TokenRecordOut",
]
