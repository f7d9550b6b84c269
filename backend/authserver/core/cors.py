"""CORS configuration helper for resource-server facing endpoints."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def init_app(app: Flask) -> None:
    """Allow browser-based resource servers to call ``/verify`` cross-origin.

    Parameters
    ----------
    app: flask.Flask
        Application whose ``CORS_ORIGINS`` and ``CORS_MAX_AGE`` settings are
        consulted. When ``CORS_ORIGINS`` is blank no CORS headers are emitted;
        ``"*"`` allows any origin but disables credential support.

    Notes
    -----
    ``/token`` and ``/authorize`` are never exposed cross-origin: the former is
    called server-to-server and the latter through top-level navigation.
    """
    raw_origins = app.config.get("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    if not origins:
        return
    wildcard = origins == ["*"]
    verify_path = app.config.get("OAUTH_BASE_PREFIX", "").rstrip("/") + "/verify"

    CORS(
        app,
        resources={
            verify_path: {"origins": "*" if wildcard else origins},
            r"/api/*": {"origins": "*" if wildcard else origins},
        },
        supports_credentials=not wildcard,
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
