from importlib.metadata import PackageNotFoundError, version
from typing import Annotated, Optional

import typer


def register_standalone_commands(app: typer.Typer):
    @app.command("version")
    def version_cmd():
        """Show version information"""
        try:
            package_version = version("barelands")
            typer.echo(f"Barelands CLI version: {package_version}")
        except PackageNotFoundError:
            typer.echo("Barelands CLI version: unknown (not installed)")

    @app.command("serve")
    def serve(
        reload: Annotated[
            Optional[bool],
            typer.Option("--reload/--no-reload", help="Restart on code changes"),
        ] = None,
    ):
        """Start the API server with uvicorn."""
        from barelands.api.run import main

        main(reload=reload)
