# authserver/services/verification/service.py
from __future__ import annotations

import logging

from authserver.core.logger import mask_token
from authserver.models.token import TokenType
from authserver.services._shared.base import BaseService
from authserver.services._shared.errors import UNAUTHORIZED, OAuthError, OAuthErrorKind
from authserver.services.verification.dto import TokenRecordOut, VerifyIn

log = logging.getLogger(__name__)


class TokenVerificationService(BaseService):
    """
    Resolve a presented bearer token to its record.

    Verification records usage (``last_access``) but never consumes the
    token: it stays valid until it expires or is revoked.
    """

    def verify(self, dto: VerifyIn) -> TokenRecordOut:
        """
        Verify an access token and record its use.

        :param dto: Presented token.
        :returns: Snapshot of the record with ``last_access`` set to now.
        :raises OAuthError: ``unauthorized`` when the token is missing,
            unknown, revoked, not an access token or expired.
        """
        if not dto.token:
            raise OAuthError(OAuthErrorKind.UNAUTHORIZED, UNAUTHORIZED)

        now = self.now_utc()
        with self.uow() as uow:
            found = uow.tokens.find_tokens(token=dto.token, type=TokenType.ACCESS_TOKEN)
            if len(found) != 1 or found[0].is_expired(now):
                log.info(
                    "Bearer token rejected",
                    extra={"outcome": "rejected", "token": mask_token(dto.token)},
                )
                raise OAuthError(OAuthErrorKind.UNAUTHORIZED, UNAUTHORIZED)
            record = TokenRecordOut.from_model(uow.tokens.touch(found[0], now))

        log.info(
            "Bearer token verified",
            extra={"client_id": record.client_id, "outcome": "verified",
                   "token": mask_token(record.token)},
        )
        return record
