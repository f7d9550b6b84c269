from __future__ import annotations

import secrets
from collections.abc import Iterable, Iterator
from typing import Protocol

#: Raw entropy per generated credential, in bytes
TOKEN_BYTES = 24


class TokenGenerator(Protocol):
    """Port producing opaque credential values."""

    def generate(self) -> str: ...


class SecureTokenGenerator(TokenGenerator):
    """
    Cryptographically secure generator.

    Draws :data:`TOKEN_BYTES` bytes from the OS CSPRNG (via :mod:`secrets`) and
    encodes them as URL-safe base64 without padding (32 characters), so values
    can travel in query strings, fragments and ``Authorization`` headers as-is.
    """

    def __init__(self, nbytes: int = TOKEN_BYTES) -> None:
        if nbytes < TOKEN_BYTES:
            raise ValueError(f"Tokens need at least {TOKEN_BYTES} bytes of entropy.")
        self.nbytes = nbytes

    def generate(self) -> str:
        return secrets.token_urlsafe(self.nbytes)


class SequentialTokenGenerator(TokenGenerator):
    """
    Deterministic generator used in unit tests.

    Yields the ``scripted`` values first (handy to force collisions), then
    ``"<prefix>-<n>"`` forever.
    """

    def __init__(self, prefix: str = "tok", scripted: Iterable[str] = ()) -> None:
        self.prefix = prefix
        self._scripted: Iterator[str] = iter(list(scripted))
        self._seq = 0

    def generate(self) -> str:
        for value in self._scripted:
            return value
        self._seq += 1
        return f"{self.prefix}-{self._seq}"
