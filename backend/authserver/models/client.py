"""OAuth client registration record (read-only for this service)."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, validates

from authserver.core.extensions import db

from .base import ReprMixin


class Client(ReprMixin, db.Model):
    """
    Registered OAuth client.

    Rows are created and administered by the client-registration service;
    the authorization server only looks them up.

    Fields
    ------
    id : str
        Canonical 24-character lower-case hex identifier.
    redirect_uri : str | None
        Registered redirection endpoint. Requests must match it exactly.
    name : str
        Display name.
    secret : str
        Client secret as provisioned by the registration service.
    """

    __tablename__ = "oauth_clients"
    __repr_attr__ = "name"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    redirect_uri: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    secret: Mapped[str] = mapped_column(String(255), nullable=False)

    @validates("id")
    def _normalize_id(self, key: str, value: str) -> str:
        """
        Store identifiers in their canonical hex form.

        :raises ValueError: If ``value`` is not 24 hex characters.
        """
        v = (value or "").strip().lower()
        if len(v) != 24 or any(ch not in "0123456789abcdef" for ch in v):
            raise ValueError("Client id must be 24 hex characters.")
        return v
