"""Token model: authorization codes and bearer access tokens."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from authserver.core.extensions import db

from .base import PKMixin, ReprMixin, as_utc


class TokenType(str, Enum):
    """Kind of credential a :class:`Token` row represents."""

    AUTHORIZATION_CODE = "authorization_code"
    ACCESS_TOKEN = "access_token"


class Token(PKMixin, ReprMixin, db.Model):
    """
    Opaque credential issued by the grant engine.

    Fields
    ------
    token : str
        Opaque, unique credential value.
    user_id : str
        Resource owner the grant was issued for.
    client_id : str
        Client the grant was issued to.
    created : datetime
        Issuance instant (UTC).
    expires_at : datetime
        Absolute expiry instant (UTC). Stored and serialized as ``expires_in``.
    type : TokenType
        ``authorization_code`` (single use) or ``access_token`` (reusable).
    scope_list : list[str]
        Requested scopes, stored and echoed but never interpreted.
    last_access : datetime | None
        ``None`` until first use. Setting it consumes an authorization code;
        for access tokens it only records usage.
    valid : bool
        Soft-revocation flag. ``False`` behaves exactly like "not found".
    """

    __tablename__ = "oauth_tokens"
    __repr_attr__ = "type"

    token: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    client_id: Mapped[str] = mapped_column(
        String(24), ForeignKey("oauth_clients.id"), nullable=False
    )
    created: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        "expires_in", DateTime(timezone=True), nullable=False
    )
    type: Mapped[TokenType] = mapped_column(
        SAEnum(
            TokenType,
            name="token_type",
            native_enum=False,
            length=32,
            values_callable=lambda kinds: [k.value for k in kinds],
        ),
        nullable=False,
    )
    scope_list: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    last_access: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    valid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("token", name="uq_oauth_tokens_token"),
        Index("ix_oauth_tokens_client_id", "client_id"),
    )

    # -------------------- Factory --------------------
    @classmethod
    def issue(
        cls,
        *,
        token: str,
        user_id: str,
        client_id: str,
        type: TokenType,
        now: datetime,
        ttl: timedelta,
        scope_list: list[str] | None = None,
    ) -> Token:
        """
        Build a fresh, unused and valid credential.

        :param token: Generated opaque value.
        :param now: Issuance instant (UTC).
        :param ttl: Lifetime; ``expires_at = now + ttl``.
        :returns: Transient instance (not yet persisted).
        :rtype: Token
        """
        return cls(
            token=token,
            user_id=str(user_id),
            client_id=client_id,
            created=now,
            expires_at=now + ttl,
            type=type,
            scope_list=list(scope_list or []),
            last_access=None,
            valid=True,
        )

    # -------------------- State --------------------
    def is_expired(self, now: datetime) -> bool:
        """
        Return ``True`` once the wall clock reached the expiry instant.

        :param now: Current instant (UTC).
        :rtype: bool
        """
        return as_utc(self.expires_at) <= as_utc(now)

    @property
    def is_consumed(self) -> bool:
        """Whether the credential has been used (codes: exchanged)."""
        return self.last_access is not None

    def is_usable(self, now: datetime) -> bool:
        """Valid and not expired; codes must also be unconsumed."""
        if not self.valid or self.is_expired(now):
            return False
        if self.type is TokenType.AUTHORIZATION_CODE:
            return not self.is_consumed
        return True
