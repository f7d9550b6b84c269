"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

from authserver.core.config import RESPONSE_MODES, TOKEN_BACKENDS

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
redis_client: redis.Redis | None = None


def _check_oauth_settings(app: Flask) -> None:
    """Fail fast on token-store and redirect settings the services cannot honor."""
    backend = app.config.get("TOKEN_BACKEND", "sqlalchemy")
    if backend not in TOKEN_BACKENDS:
        raise RuntimeError(
            f"Unknown TOKEN_BACKEND {backend!r}; expected one of {sorted(TOKEN_BACKENDS)}"
        )
    if backend == "redis" and not app.config.get("REDIS_URL"):
        raise RuntimeError("TOKEN_BACKEND='redis' requires REDIS_URL to be set.")
    mode = app.config.get("IMPLICIT_RESPONSE_MODE", "query")
    if mode not in RESPONSE_MODES:
        raise RuntimeError(
            f"Unknown IMPLICIT_RESPONSE_MODE {mode!r}; expected one of {sorted(RESPONSE_MODES)}"
        )


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, the session JWT manager and Redis.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`authserver.models` package to ensure SQLAlchemy metadata is ready
        for migrations.
    """
    _check_oauth_settings(app)

    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from authserver import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)

    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client
