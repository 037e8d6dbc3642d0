"""Output formatters for different formats."""

import json
from typing import Any

import yaml
from rich.table import Table

from skillpulse_cli.models import Task, TaskPage
from skillpulse_cli.utils.ui.console import get_console

console = get_console()


def task_to_row(task: Task) -> dict[str, Any]:
    """Flatten a task for json/yaml output."""
    return task.model_dump()


def format_tasks(
    tasks: list[Task],
    output_format: str = "table",
    *,
    next_cursor: str | None = None,
    empty_message: str = "No tasks yet",
) -> None:
    """Format and display a list of tasks."""
    if output_format in ("json", "yaml"):
        payload = {
            "tasks": [task_to_row(t) for t in tasks],
            "next_cursor": next_cursor,
        }
        if output_format == "json":
            print(json.dumps(payload, indent=2, default=str))
        else:
            print(yaml.dump(payload, default_flow_style=False, sort_keys=False))
        return

    if tasks:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Date")
        table.add_column("Time")
        table.add_column("Description")
        for task in tasks:
            table.add_row(
                task.id,
                task.date_text or "-",
                task.time_range_text or "-",
                task.description,
            )
        console.print(table)
    else:
        console.print(f"[yellow]{empty_message}[/yellow]")

    if next_cursor:
        console.print(
            f"[dim]More tasks available. Continue with --after {next_cursor}[/dim]"
        )


def format_page(
    page: TaskPage, output_format: str = "table", *, empty_message: str = "No tasks yet"
) -> None:
    """Display a page of tasks with its continuation hint."""
    format_tasks(
        page.tasks, output_format, next_cursor=page.next_cursor, empty_message=empty_message
    )


def format_task_detail(task: Task) -> None:
    """Display a single task as a key/value table."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("ID", task.id)
    table.add_row("Owner", task.owner_id)
    table.add_row("Description", task.description)
    table.add_row("Created", task.created_at or "-")
    table.add_row("Start", task.start_time or "-")
    table.add_row("End", task.end_time or "-")
    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")
