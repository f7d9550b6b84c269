# authserver/infra/jwt/flask_jwt_session.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from authserver.services._shared.ports import ResourceOwnerSession

log = logging.getLogger(__name__)


@dataclass(slots=True)
class JWTResourceOwnerSession(ResourceOwnerSession):
    """
    Adapter reading the resource owner from the login session cookie.

    The login service sets a Flask-JWT-Extended access token in the
    ``JWT_ACCESS_COOKIE_NAME`` cookie; its identity is the user id.

    .. note::
       Requires an active Flask request context with proper JWT settings.
    """

    def current_user_id(self) -> str | None:
        try:
            verify_jwt_in_request(optional=True, locations=["cookies"])
        except (JWTExtendedException, PyJWTError) as exc:
            # Expired or tampered session: treat as logged out
            log.info("Ignoring unusable owner session: %s", exc.__class__.__name__)
            return None
        identity = get_jwt_identity()
        if identity is None or identity == "":
            return None
        return str(identity)
