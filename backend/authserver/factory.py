"""Application factory for the OAuth2 authorization server."""

from __future__ import annotations

import logging

from flask import Flask

from authserver.core.config import BaseConfig, get_config
from authserver.core.logger import configure_logging

log = logging.getLogger(__name__)


def _shell_context() -> dict[str, object]:
    """Objects preloaded by ``flask shell`` for token housekeeping."""
    from authserver.core.extensions import db
    from authserver.models import Client, Token, TokenType

    return {"db": db, "Client": Client, "Token": Token, "TokenType": TokenType}


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build the authorization server.

    :param config: Config class, import path or object; ``APP_ENV`` decides
        when omitted.
    :param instance_relative_config: Load ``instance/<filename>`` overrides.
    :param instance_config_filename: Name of the optional override file.
    :returns: Application with the ``/token``, ``/authorize`` and ``/verify``
        endpoints, the health API and the ``oauth`` CLI group registered.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from authserver import cli
    from authserver.api import init_app as init_api
    from authserver.core import cors, errors, extensions, logger, proxy

    # ProxyFix first; error handlers once every blueprint is registered
    for init in (
        proxy.init_app,
        extensions.init_app,
        logger.init_app,
        cors.init_app,
        init_api,
        errors.init_app,
        cli.init_app,
    ):
        init(app)

    app.shell_context_processor(_shell_context)

    log.info(
        "Authorization server ready",
        extra={
            "token_backend": app.config.get("TOKEN_BACKEND"),
            "realm": app.config.get("OAUTH_REALM"),
        },
    )
    return app
