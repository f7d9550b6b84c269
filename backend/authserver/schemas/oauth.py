"""OAuth2 request and response Marshmallow schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from marshmallow import INCLUDE, Schema, ValidationError, fields, post_load, pre_load, validate

from authserver.models.base import as_utc
from authserver.services._shared.errors import MALFORMED_CLIENT_ID, MISSING_PARAMETER
from authserver.services._shared.policies.client_id import normalize_client_id

_REQUIRED_ERRORS = {"required": MISSING_PARAMETER, "null": MISSING_PARAMETER}


def _required() -> fields.String:
    return fields.String(
        required=True,
        validate=validate.Length(min=1, error=MISSING_PARAMETER),
        error_messages=_REQUIRED_ERRORS,
    )


def _optional() -> fields.String:
    return fields.String(load_default=None, allow_none=True)


def _check_client_id(value: str) -> None:
    # Empty values are reported by the Length validator
    if value and normalize_client_id(value) is None:
        raise ValidationError(MALFORMED_CLIENT_ID)


class _OAuthParamsSchema(Schema):
    """Shared rules of the grant entry points.

    Unknown parameters are kept so the token endpoint can echo them back.
    """

    class Meta:
        unknown = INCLUDE

    #: Optional parameters where an empty string means "not supplied"
    optional_fields: tuple[str, ...] = ()

    client_id = fields.String(
        required=True,
        validate=[validate.Length(min=1, error=MISSING_PARAMETER), _check_client_id],
        error_messages=_REQUIRED_ERRORS,
    )

    @pre_load
    def drop_empty_optionals(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data = dict(data)
        for name in self.optional_fields:
            if data.get(name) == "":
                data.pop(name)
        return data

    @post_load
    def canonical_client_id(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["client_id"] = normalize_client_id(data["client_id"])
        return data


class TokenRequestSchema(_OAuthParamsSchema):
    """Authorization-code exchange parameters (``POST /token``)."""

    grant_type = _required()
    code = _required()
    redirect_uri = _required()


class AuthorizeRequestSchema(_OAuthParamsSchema):
    """Implicit-grant parameters (``GET /authorize``)."""

    optional_fields = ("redirect_uri", "scope", "state")

    response_type = _required()
    redirect_uri = _optional()
    scope = _optional()
    state = _optional()


class UTCDateTime(fields.DateTime):
    """ISO-8601 datetime that always serializes with an explicit UTC offset."""

    def _serialize(self, value: datetime | None, attr: str | None, obj: Any, **kwargs: Any):
        if value is None:
            return None
        return super()._serialize(as_utc(value), attr, obj, **kwargs)


class TokenRecordSchema(Schema):
    """Full token record returned by ``GET /verify``."""

    token = fields.String(required=True)
    user_id = fields.String(required=True)
    client_id = fields.String(required=True)
    created = UTCDateTime(required=True)
    expires_at = UTCDateTime(required=True, data_key="expires_in")
    type = fields.Function(lambda t: getattr(t.type, "value", t.type))
    scope_list = fields.List(fields.String(), required=True)
    last_access = UTCDateTime(allow_none=True)
    valid = fields.Boolean(required=True)

