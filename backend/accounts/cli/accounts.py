"""Flask CLI commands for account administration."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from accounts.core.security import EVENT_PUBLISHER_KEY, KV_STORE_KEY
from accounts.models.user import ROLES
from accounts.services.users.service import UserProfileService
from accounts.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("accounts")
def accounts_cli() -> None:
    """Account administration commands."""


@accounts_cli.command("set-role")
@click.argument("email")
@click.argument("role", type=click.Choice(ROLES))
@with_appcontext
def set_role_command(email: str, role: str) -> None:
    """Assign ROLE to the account registered with EMAIL.

    Existing tokens keep the role they were issued with until they expire.
    """
    with SQLAlchemyUnitOfWork() as uow:
        user = uow.users.get_by_email(email)
        if user is None:
            raise click.ClickException(f"No account registered with {email!r}.")
        previous = user.role
        uow.users.set_role(user, role)
        user_id = user.id

    profiles = UserProfileService(
        cache=current_app.extensions[KV_STORE_KEY],
        events=current_app.extensions[EVENT_PUBLISHER_KEY],
    )
    profiles.invalidate(user_id)

    LOGGER.info("role changed from %s to %s", previous, role, extra={"user_id": user_id})
    click.echo(f"{email}: {previous} -> {role}")
