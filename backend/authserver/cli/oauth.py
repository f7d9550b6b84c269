"""Flask CLI commands for operating the authorization server."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from authserver.api.deps import uow_factory
from authserver.services._shared.errors import OAuthError
from authserver.services.grants.dto import GrantConfig
from authserver.services.grants.service import GrantService

LOGGER = logging.getLogger(__name__)


@click.group("oauth")
def oauth_cli() -> None:
    """Authorization-server maintenance commands."""


@oauth_cli.command("issue-code")
@click.option("--client-id", required=True, help="Client id (24 hex chars or 12 raw bytes).")
@click.option("--user-id", required=True, help="Resource owner the code is issued for.")
@click.option("--scope", default="", help="Space-delimited scopes stored with the code.")
@with_appcontext
def issue_code(client_id: str, user_id: str, scope: str) -> None:
    """Issue a single-use authorization code and print it."""
    service = GrantService(
        uow_factory=uow_factory(),
        config=GrantConfig.from_mapping(current_app.config),
    )
    try:
        issued = service.issue_authorization_code(
            user_id=user_id,
            client_id=client_id,
            scope_list=scope.split(),
        )
    except OAuthError as exc:
        raise click.ClickException(f"{exc.kind.value}: {exc.description}") from exc

    LOGGER.info("Issued authorization code from CLI", extra={"client_id": issued.client_id})
    click.echo(issued.code)
    click.echo(f"client_id={issued.client_id} expires_in={issued.expires_in}", err=True)
