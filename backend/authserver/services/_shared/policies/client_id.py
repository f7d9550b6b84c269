"""Accepted external encodings of an OAuth ``client_id``."""

from __future__ import annotations

import string

_HEX = frozenset(string.hexdigits)

#: Raw identifier length in bytes; its hex form is twice as long
RAW_ID_BYTES = 12


def is_hex_id(value: str) -> bool:
    """Return True for a 24-character hexadecimal string (any case)."""
    return len(value) == RAW_ID_BYTES * 2 and all(ch in _HEX for ch in value)


def normalize_client_id(value: str | None) -> str | None:
    """
    Return the canonical (lower-case hex) form of ``value``.

    Accepts a 24-character hex string, or a string whose UTF-8 encoding is
    exactly 12 bytes (its hex encoding becomes the canonical id). Anything else
    returns ``None``.

    :param value: Raw ``client_id`` request parameter.
    :type value: str | None
    :rtype: str | None
    """
    if not isinstance(value, str):
        return None
    if is_hex_id(value):
        return value.lower()
    raw = value.encode("utf-8")
    if len(raw) == RAW_ID_BYTES:
        return raw.hex()
    return None
