"""Flask CLI commands for credential housekeeping."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from sessionauth.core.auth import get_auth

LOGGER = logging.getLogger(__name__)


@click.group("tokens")
def tokens_cli() -> None:
    """Housekeeping of stored credentials."""


@tokens_cli.command("purge-activation")
@with_appcontext
def purge_activation() -> None:
    """Delete activation tokens that are used or past their expiry."""
    removed = get_auth().activation.purge_expired()
    LOGGER.info("cli.tokens.purge_activation removed=%s", removed)
    click.echo(f"Removed {removed} activation token(s).")


@tokens_cli.command("revoke-user")
@click.argument("user_id")
@with_appcontext
def revoke_user(user_id: str) -> None:
    """Revoke every refresh token of USER_ID (forces re-login on all devices)."""
    count = get_auth().tokens.revoke_all_for_user(user_id)
    click.echo(f"Revoked {count} refresh token(s) for user {user_id}.")
