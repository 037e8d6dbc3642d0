"""Context management commands.

A context selects where tasks and accounts live: a local SQLite vault or
a remote Firebase project.
"""

import typer
from rich.table import Table

from skillpulse_cli.services.config_service import get_config_service
from skillpulse_cli.utils.exit_codes import ERROR_NOT_FOUND
from skillpulse_cli.utils.ui.console import get_console
from skillpulse_cli.utils.ui.formatters import format_info, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Storage context management")
console = get_console()


@app.command("list")
@command_wrapper(auth_required=False)
def list_contexts() -> None:
    """List configured contexts."""
    config_svc = get_config_service()
    current = config_svc.config.current_context_name

    table = Table(title="Contexts", show_header=True)
    table.add_column("", width=1)
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Source")
    table.add_column("Description", style="dim")

    for ctx in config_svc.list_contexts():
        table.add_row(
            "*" if ctx.name == current else "",
            ctx.name,
            ctx.type,
            ctx.source,
            ctx.description,
        )

    console.print(table)


@app.command("use")
@command_wrapper(auth_required=False)
def use_context(name: str = typer.Argument(..., help="Context name")) -> None:
    """Switch the current context."""
    config_svc = get_config_service()
    try:
        context = config_svc.use_context(name)
    except ValueError as e:
        raise AppError(str(e), exit_code=ERROR_NOT_FOUND) from e

    format_success(f"Switched to context '{context.name}' ({context.type})")
    if config_svc.load_credentials(context.name) is None:
        format_info("Log in with 'skillpulse auth login'")
