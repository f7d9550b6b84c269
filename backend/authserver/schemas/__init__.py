"""Convenience exports for application schemas."""

from __future__ import annotations

from .oauth import AuthorizeRequestSchema, TokenRecordSchema, TokenRequestSchema, UTCDateTime

__all__ = [
    "AuthorizeRequestSchema",
    "TokenRequestSchema",
    "TokenRecordSchema",
    "UTCDateTime",
]
