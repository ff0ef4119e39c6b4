# app/cli.py
import click
from flask import Flask, current_app

from app.core.exceptions import BadRequestError
from app.core.security import Role


def register_cli(app: Flask):
    """Registers maintenance commands on ``flask``."""

    @app.cli.command('create-admin')
    @click.option('--name', required=True)
    @click.option('--email', required=True)
    @click.password_option()
    def create_admin(name, email, password):
        """Creates an admin account. Self-registration only ever creates users."""
        auth_service = current_app.services['auth']
        try:
            user = auth_service.register(
                {'name': name, 'email': email, 'password': password},
                role=Role.ADMIN
            )
        except (BadRequestError, ValueError) as e:
            raise click.ClickException(str(getattr(e, 'message', e)))
        click.echo(f"Admin created: {user.user_id} ({user.email})")
