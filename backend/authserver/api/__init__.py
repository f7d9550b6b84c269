"""HTTP surface: OAuth2 endpoints plus the versioned operational API."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """Join URL prefix segments into ``/a/b``; empty segments are skipped.

    >>> join_prefix("", "")
    '/'
    >>> join_prefix("/api/", "v1")
    '/api/v1'
    """
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount ``(blueprint, relative_prefix)`` pairs under ``base_prefix``.

    :param app: Application receiving the blueprints.
    :param base_prefix: Shared mount point (``OAUTH_BASE_PREFIX`` or ``/api/v1``).
    :param entries: Blueprints and their prefix relative to ``base_prefix``.
    """
    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=join_prefix(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register the OAuth endpoints and the versioned API on the Flask app."""

    from authserver.api.oauth import bp as oauth_bp
    from authserver.api.v1 import API_VERSION as V1
    from authserver.api.v1 import REGISTRY as V1_REGISTRY

    # /token, /authorize and /verify live at the server root by default
    register_blueprint_group(
        app,
        base_prefix=app.config.get("OAUTH_BASE_PREFIX", ""),
        entries=[(oauth_bp, "")],
    )
    register_blueprint_group(
        app,
        base_prefix=join_prefix(app.config.get("API_BASE_PREFIX", "/api"), V1),
        entries=V1_REGISTRY,
    )


__all__ = ["init_app", "join_prefix", "register_blueprint_group"]
