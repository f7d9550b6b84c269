"""Token repository for authorization codes and access tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update

from authserver.models.token import Token, TokenType
from authserver.repositories.base import BaseRepository
from authserver.repositories.errors import TokenCollisionError


class TokenRepository(BaseRepository[Token]):
    """Persistence-only repository for :class:`Token`.

    The authorization-code exchange is a single conditional ``UPDATE``
    (compare-and-set on ``last_access IS NULL``) followed by the access-token
    ``INSERT`` on the same session, so both land in one transaction owned by
    the Unit of Work.
    """

    model = Token

    # ---------------------------- Lookups ----------------------------

    def find_tokens(self, *, token: str, type: TokenType, valid: bool = True) -> list[Token]:
        """Return the tokens matching value, type and validity flag.

        :param token: Opaque credential value.
        :type token: str
        :param type: Expected credential kind.
        :type type: TokenType
        :param valid: Validity flag to match.
        :type valid: bool
        :returns: Matching rows (zero or one given the unique constraint).
        :rtype: list[Token]
        """
        stmt = (
            select(Token)
            .where(Token.token == token, Token.type == type, Token.valid.is_(valid))
            .order_by(Token.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def token_exists(self, token: str) -> bool:
        """Return ``True`` when ``token`` is stored, whatever its type or state."""
        stmt = select(Token.id).where(Token.token == token).limit(1)
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Writes ----------------------------

    def add(self, instance: Token) -> Token:
        """Insert a new token.

        :raises TokenCollisionError: If the value is already stored.
        """
        if self.token_exists(instance.token):
            raise TokenCollisionError(instance.token)
        return super().add(instance)

    def touch(self, token: Token, at: datetime) -> Token:
        """Record usage of ``token`` and flush."""
        token.last_access = at
        self.flush()
        return token

    def exchange_code(
        self,
        *,
        code: str,
        client_id: str,
        consumed_at: datetime,
        access_token: Token,
    ) -> bool:
        """Consume ``code`` and stage ``access_token`` in the current transaction.

        :param code: Authorization-code value being exchanged.
        :type code: str
        :param client_id: Client the code must have been issued to.
        :type client_id: str
        :param consumed_at: Exchange instant; also the expiry reference.
        :type consumed_at: datetime
        :param access_token: Transient access token to persist on success.
        :type access_token: Token
        :returns: ``True`` when this call consumed the code.
        :rtype: bool
        :raises TokenCollisionError: If the access-token value already exists.
        """
        # Single UPDATE so concurrent exchanges cannot both match the row.
        stmt = (
            update(Token)
            .where(
                Token.token == code,
                Token.type == TokenType.AUTHORIZATION_CODE,
                Token.client_id == client_id,
                Token.valid.is_(True),
                Token.last_access.is_(None),
                Token.expires_at > consumed_at,
            )
            .values(last_access=consumed_at)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        self.add(access_token)
        return True
