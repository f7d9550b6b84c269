"""Operational API (``/api/v1``): endpoints for deployments, not OAuth clients."""

from __future__ import annotations

from flask import Blueprint

from .health import bp as health_bp

API_VERSION = "v1"

#: ``(blueprint, prefix relative to /api/v1)``
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
]
