"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from authserver.api.deps import json_response, timing
from authserver.core import extensions
from authserver.core.extensions import db

bp = Blueprint("health", __name__)


def _redis_status() -> str:
    client = extensions.redis_client
    if client is None:
        return "disabled"
    try:
        client.ping()
    except RedisError:
        current_app.logger.exception("healthcheck.redis_error")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and token-store health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    redis_status = _redis_status()
    status = "ok" if db_status == "ok" and redis_status != "fail" else "degraded"
    payload = {
        "status": status,
        "db": db_status,
        "redis": redis_status,
        "token_backend": current_app.config.get("TOKEN_BACKEND", "sqlalchemy"),
        "version": current_app.config.get("APP_VERSION", "dev"),
        "commit": current_app.config.get("APP_COMMIT", "unknown"),
    }
    return json_response(payload, status=200 if status == "ok" else 503)
