"""Main entry point for SkillPulse CLI."""

import typer

from skillpulse_cli import __version__
from skillpulse_cli.commands import auth, contexts, tasks
from skillpulse_cli.services.config_service import get_config_service
from skillpulse_cli.utils.logger import log_file_path
from skillpulse_cli.utils.ui.console import get_console

app = typer.Typer(
    name="skillpulse",
    help="Track time-boxed tasks from the command line",
    no_args_is_help=True,
)

console = get_console()


# Add subcommands
app.add_typer(auth.app, name="auth", help="Authentication commands")
app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(contexts.app, name="contexts", help="Storage context management")


@app.command()
def version() -> None:
    """Show version information and the active context."""
    console.print(f"[bold]SkillPulse CLI[/bold] version [cyan]{__version__}[/cyan]")
    try:
        context = get_config_service().get_current_context()
    except (ValueError, RuntimeError) as e:
        console.print(f"[yellow]Configuration unavailable: {e}[/yellow]")
        return
    console.print(f"[dim]Context: {context.name} ({context.type})[/dim]")
    console.print(f"[dim]Log file: {log_file_path()}[/dim]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
