import sys

from pydantic import validate_call
from rich import print
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from barelands.models.models.photos import PhotoRecord

console = Console()


@validate_call
def handle_error(message: str, exit: bool = False):
    """Print an error message, optionally exiting with status 1."""
    print(f"• [bold red]:x: {message}[/bold red]")
    if exit:
        sys.exit(1)


@validate_call
def rich_print_command_usage(command: str):
    """
    Print the command usage in a styled panel.
    """
    console.print(
        Panel.fit(
            f"[bold magenta]{command}[/]",
            title="[cyan]Command Used[/]",
            border_style="bright_blue",
            title_align="center",
        )
    )


STATEMENT_STYLES = {
    "loading": ("bold yellow", ":hourglass:"),
    "success": ("bold green", ":white_check_mark:"),
    "error": ("bold red", ":x:"),
    "info": ("bold blue", ":blue_book:"),
    "warning": ("bold orange1", ":warning:"),
}


def rich_print_checked_statement(statement: str, mode: str, exit: bool = False):
    """
    Print a status line; ``mode`` is one of STATEMENT_STYLES.
    """
    if mode not in STATEMENT_STYLES:
        handle_error(f"Invalid mode: {mode}", exit=exit)
        return
    style, emoji = STATEMENT_STYLES[mode]
    print(f"• [{style}]{emoji} {statement}[/{style}]")


def rich_print_photos_table(photos: list[PhotoRecord], title: str = "Photos"):
    table = Table(title=title, show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Category")
    table.add_column("Featured", justify="center")
    table.add_column("Added")
    table.add_column("Image", overflow="fold")

    for photo in photos:
        table.add_row(
            photo.id,
            photo.title,
            photo.category,
            "★" if photo.featured else "",
            photo.date_added,
            photo.image,
        )
    console.print(table)
