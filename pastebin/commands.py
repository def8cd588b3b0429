"""Maintenance commands for the ``flask`` CLI.

This module provides:
- create_user: a command that adds a user, optionally as admin
- purge_expired: a command that removes expired pastes for good
- bootstrap_admin: a function creating the first admin from config
- register_commands: a function that attaches the commands to an app
"""

import logging

import click
from flask import Flask, current_app
from flask.cli import with_appcontext

from .constants import ADMIN, USER
from .utils import validation
from .utils.errors import ConflictError, ValidationError
from .utils.passwords import hash_password

logger = logging.getLogger(__name__)


def bootstrap_admin(app: Flask) -> None:
    """Creates an admin from ``ADMIN_USERNAME``/``ADMIN_PASSWORD`` if there are no users yet."""
    password = app.config.get("ADMIN_PASSWORD")
    if not password:
        return
    users = app.extensions["pastebin"]["users"]
    if users.count():
        return
    try:
        username = validation.username(app.config["ADMIN_USERNAME"])
        validation.password(password)
    except ValidationError as e:
        logger.error("Cannot create the first admin: %s", e.message)
        return
    try:
        users.create_user(username, hash_password(password, app.config["BCRYPT_ROUNDS"]), ADMIN)
    except ConflictError:
        # another worker got there first
        return
    logger.warning("No users found. Created admin %s from configuration", username)


@click.command("create-user")
@click.argument("username")
@click.password_option()
@click.option("--admin", is_flag=True, help="Give the user the admin role.")
@with_appcontext
def create_user(username: str, password: str, admin: bool):
    """Creates a user with USERNAME."""
    try:
        validation.username(username)
        validation.password(password)
    except ValidationError as e:
        raise click.BadParameter(e.message) from e
    users = current_app.extensions["pastebin"]["users"]
    try:
        user = users.create_user(
            username,
            hash_password(password, current_app.config["BCRYPT_ROUNDS"]),
            ADMIN if admin else USER,
        )
    except ConflictError as e:
        raise click.ClickException(e.message) from e
    click.echo(f"Created {user.role} {user.username} with id {user.id}")


@click.command("purge-expired")
@with_appcontext
def purge_expired():
    """Removes pastes past their expiry."""
    services = current_app.extensions["pastebin"]
    removed = services["pastes"].purge_expired(services["clock"]())
    click.echo(f"Removed {removed} expired pastes")


def register_commands(app: Flask) -> None:
    app.cli.add_command(create_user)
    app.cli.add_command(purge_expired)
