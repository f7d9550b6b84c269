"""OAuth2 grant and verification endpoints (RFC 6749)."""

from __future__ import annotations

from flask import Blueprint, redirect, request

from authserver.api.deps import (
    grant_service,
    json_response,
    request_params,
    resume_url,
    timing,
    verification_service,
)
from authserver.infra.jwt.flask_jwt_session import JWTResourceOwnerSession
from authserver.schemas import TokenRecordSchema
from authserver.services.verification.dto import VerifyIn

bp = Blueprint("oauth", __name__)

record_schema = TokenRecordSchema()


@bp.post("/token")
@timing
def token():
    """Exchange an authorization code for a bearer access token."""

    result = grant_service().exchange_code(request_params())
    response = json_response(result.to_payload())
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    return response


@bp.get("/authorize")
@timing
def authorize():
    """Implicit grant: redirect back to the client with an access token."""

    owner = JWTResourceOwnerSession().current_user_id()
    result = grant_service().authorize(
        request.args.to_dict(),
        user_id=owner,
        resume_url=resume_url(),
    )
    return redirect(result.location, code=302)


@bp.get("/verify")
@timing
def verify():
    """Resolve a bearer token to its record."""

    dto = VerifyIn.from_request(request.headers.get("Authorization"), request.args)
    record = verification_service().verify(dto)
    return json_response(record_schema.dump(record))
