"""WSGI proxy middleware configuration helper."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix


def init_app(app: Flask) -> None:
    """Apply :class:`werkzeug.middleware.proxy_fix.ProxyFix` when enabled.

    Parameters
    ----------
    app: flask.Flask
        Application whose WSGI pipeline should respect upstream proxy headers.

    Notes
    -----
    TLS terminates at the load balancer, so ``request.url`` (used to build the
    ``next`` parameter of the login redirect) is only correct once
    ``X-Forwarded-Proto``/``-Host``/``-Prefix`` are honored. Controlled by
    ``USE_PROXYFIX`` (default ``True``) and ``PROXYFIX_HOPS`` (default ``1``).
    """
    if not app.config.get("USE_PROXYFIX", True):
        return
    hops = int(app.config.get("PROXYFIX_HOPS", 1))
    app.wsgi_app = ProxyFix(  # type: ignore[method-assign]
        app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops
    )
