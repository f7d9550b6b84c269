"""Shared API helpers for request parsing, service wiring and timing."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request

from authserver.services._shared.base import UnitOfWorkFactory
from authserver.services.grants.dto import GrantConfig
from authserver.services.grants.service import GrantService
from authserver.services.verification.service import TokenVerificationService
from authserver.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

F = TypeVar("F", bound=Callable[..., Any])


def request_params() -> dict[str, Any]:
    """Return form parameters, falling back to a JSON object body."""

    if request.form:
        return request.form.to_dict()
    payload = request.get_json(silent=True)
    return dict(payload) if isinstance(payload, dict) else {}


def resume_url() -> str:
    """Return the current path and query, replayable after the login step."""

    return request.script_root + request.full_path.rstrip("?")


def uow_factory() -> UnitOfWorkFactory:
    """Return the Unit of Work factory matching ``TOKEN_BACKEND``."""

    if current_app.config.get("TOKEN_BACKEND") == "redis":
        from authserver.uow.redis_uow import RedisTokenUnitOfWork

        return RedisTokenUnitOfWork
    return SQLAlchemyUnitOfWork


def grant_service() -> GrantService:
    """Build the grant engine for the current application."""

    return GrantService(
        uow_factory=uow_factory(),
        config=GrantConfig.from_mapping(current_app.config),
    )


def verification_service() -> TokenVerificationService:
    """Build the token verifier for the current application."""

    return TokenVerificationService(uow_factory=uow_factory())


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
