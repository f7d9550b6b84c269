"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

TOKEN_BACKENDS: Final[frozenset[str]] = frozenset({"sqlalchemy", "redis"})
RESPONSE_MODES: Final[frozenset[str]] = frozenset({"query", "fragment"})


# Load .env during development (no-op when the file is absent)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse a positive integer from an environment variable.

    Raises
    ------
    ValueError
        If the variable is set but is not a positive integer.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    parsed = int(val.strip())
    if parsed <= 0:
        raise ValueError(f"{name} must be a positive integer, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    SECRET_KEY: str
        Flask secret. Defaults to a development-safe placeholder and should be
        overridden in production.
    JWT_SECRET_KEY: str
        Key shared with the login service; resource-owner session cookies are
        JWTs signed with it (verified through ``flask-jwt-extended``).
    JWT_TOKEN_LOCATION: list[str]
        The session JWT is read from cookies only, so it never collides with
        OAuth bearer tokens carried in the ``Authorization`` header.
    JWT_ACCESS_COOKIE_NAME: str
        Cookie carrying the resource-owner session JWT.
    SQLALCHEMY_DATABASE_URI: str
        Database holding clients and tokens.
    TOKEN_BACKEND: str
        ``"sqlalchemy"`` (default) or ``"redis"``; selects the token store.
    REDIS_URL: str | None
        Redis connection string. Required when ``TOKEN_BACKEND == "redis"``.
    TOKEN_TTL: int
        Access-token lifetime in seconds.
    AUTHORIZATION_CODE_TTL: int
        Authorization-code lifetime in seconds.
    OAUTH_REALM: str
        Realm advertised in ``WWW-Authenticate`` headers.
    OAUTH_BASE_PREFIX: str
        Mount point of ``/token``, ``/authorize`` and ``/verify``.
    LOGIN_URL: str
        Interactive login step receiving ``?next=<original request>``.
    IMPLICIT_RESPONSE_MODE: str
        Where implicit-grant parameters go on the redirect URI
        (``"query"`` or ``"fragment"``).
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of origins allowed to call ``/verify``.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"
    OAUTH_BASE_PREFIX = os.getenv("OAUTH_BASE_PREFIX", "")

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_TOKEN_LOCATION = ["cookies"]
    JWT_ACCESS_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "owner_session")
    JWT_COOKIE_SECURE = env_bool("SESSION_COOKIE_SECURE", True)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Token store
    TOKEN_BACKEND = os.getenv("TOKEN_BACKEND", "sqlalchemy").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL") or None

    # OAuth
    TOKEN_TTL = env_int("TOKEN_TTL", 3600)
    AUTHORIZATION_CODE_TTL = env_int("AUTHORIZATION_CODE_TTL", 600)
    OAUTH_REALM = os.getenv("OAUTH_REALM", "authserver")
    LOGIN_URL = os.getenv("LOGIN_URL", "/login")
    IMPLICIT_RESPONSE_MODE = os.getenv("IMPLICIT_RESPONSE_MODE", "query").strip().lower()

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")

    # Built-ins de Flask
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and accepts session cookies over plain HTTP.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_COOKIE_SECURE = env_bool("SESSION_COOKIE_SECURE", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Always uses the SQL token store; Redis is exercised with fakeredis.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    TOKEN_BACKEND = "sqlalchemy"
    REDIS_URL = None
    JWT_SECRET_KEY = "test-session-secret-with-enough-length"
    JWT_COOKIE_SECURE = False
    TOKEN_TTL = 3600
    AUTHORIZATION_CODE_TTL = 600
    OAUTH_REALM = "authserver"
    LOGIN_URL = "/login"
    IMPLICIT_RESPONSE_MODE = "query"
    PROPAGATE_EXCEPTIONS = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
