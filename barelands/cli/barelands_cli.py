import typer
from typer.main import get_command

from barelands.cli.cli_logging import setup_logging as setup_cli_logging
from barelands.cli.commands.auth import register_auth_commands
from barelands.cli.commands.catalog import register_catalog_commands
from barelands.cli.commands.standalone import register_standalone_commands
from barelands.models.logging import setup_logging as setup_models_logging

app = typer.Typer(help="Administration commands for the Barelands photo catalog")

# Register standalone commands (version, serve)
register_standalone_commands(app)

# Register credential helpers and catalog maintenance commands
register_auth_commands(app)
register_catalog_commands(app)


@app.callback()
def verbose_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging", is_eager=True
    ),
    verbose_level=typer.Option(
        "INFO",
        "--verbose-level",
        "-vl",
        help="Set verbose logging level",
        is_eager=True,
    ),
):
    """Set up logging for all commands"""
    setup_cli_logging(verbose, verbose_level)
    setup_models_logging(verbose, verbose_level)


barelandscli = get_command(app)


def main():
    app()


if __name__ == "__main__":
    main()
