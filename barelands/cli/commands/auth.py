from typing import Annotated, Optional

import typer

from barelands.api.v1.endpoints.user_endpoints.core_functions import (
    _hash_password,
    _verify_password,
)
from barelands.cli.cli_logging import logger
from barelands.cli.utils.rich_utils import rich_print_checked_statement


def register_auth_commands(app: typer.Typer):
    @app.command("hash-password")
    def hash_password(
        password: Annotated[
            Optional[str],
            typer.Argument(help="Password to hash; prompted for when omitted"),
        ] = None,
    ):
        """
        Print a bcrypt hash to use as BARELANDS_AUTH_ADMIN_PASSWORD_HASH.
        """
        if password is None:
            password = typer.prompt("Admin password", hide_input=True, confirmation_prompt=True)
        if not password:
            rich_print_checked_statement("Please provide a password to hash", "error")
            raise typer.Exit(code=1)

        hashed = _hash_password(password)
        logger.debug("Generated admin password hash")
        rich_print_checked_statement("Password hash (add it to your environment):", "success")
        typer.echo(f'BARELANDS_AUTH_ADMIN_PASSWORD_HASH="{hashed}"')

    @app.command("verify-password")
    def verify_password(
        password: Annotated[str, typer.Argument(help="Plain password to check")],
        hashed: Annotated[str, typer.Argument(metavar="HASH", help="bcrypt hash to check against")],
    ):
        """
        Check a password against a bcrypt hash.
        """
        if _verify_password(hashed, password):
            rich_print_checked_statement("Password matches the hash", "success")
        else:
            rich_print_checked_statement("Password does not match the hash", "error")
            raise typer.Exit(code=1)
