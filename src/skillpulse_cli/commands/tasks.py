"""Task management commands."""

from datetime import date, datetime

import typer

from skillpulse_cli.repositories import filter_by_date
from skillpulse_cli.services.app_context import get_app_context
from skillpulse_cli.services.config_service import get_config_service
from skillpulse_cli.services.task_list import SUGGESTION_LIMIT
from skillpulse_cli.utils.dates import parse_task_time, today
from skillpulse_cli.utils.exit_codes import ERROR_INVALID_ARGS
from skillpulse_cli.utils.ui.console import get_console
from skillpulse_cli.utils.ui.formatters import (
    format_info,
    format_page,
    format_success,
    format_task_detail,
    format_tasks,
)

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Task management commands")
console = get_console()

DATE_FORMATS = ["%Y-%m-%d"]


def _output_format(output: str | None) -> str:
    return output or get_config_service().config.output.format


def _parse_time(value: str | None, day: date | None) -> datetime | None:
    """Read ``HH:MM`` (on ``day``, default today) or a full ISO-8601 datetime."""
    if value is None or not value.strip():
        return None
    parsed = parse_task_time(value.strip(), on=day)
    if parsed is None:
        raise AppError(
            f"Invalid time '{value}'. Use HH:MM or an ISO-8601 datetime.",
            exit_code=ERROR_INVALID_ARGS,
        )
    return parsed


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value else None


@app.command("list")
@command_wrapper
async def list_tasks(
    on: datetime | None = typer.Option(
        None, "--date", "-d", formats=DATE_FORMATS, help="Only tasks starting on this date"
    ),
    after: str | None = typer.Option(
        None, "--after", help="Continue after this task id (from a previous page)"
    ),
    load_all: bool = typer.Option(False, "--all", "-a", help="Load every page"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format (table/json/yaml)"
    ),
) -> None:
    """List your tasks, newest first."""
    output_format = _output_format(output)
    empty_message = (
        f"No tasks on {on.date().isoformat()} in the loaded window" if on else "No tasks yet"
    )

    async with get_app_context() as ctx:
        ctx.restore_session()
        owner = ctx.session.require_owner()

        if after:
            page = await ctx.task_service.load_tasks(owner, after)
            if on:
                page = page.model_copy(update={"tasks": filter_by_date(page.tasks, on.date())})
            format_page(page, output_format, empty_message=empty_message)
            return

        task_list = ctx.task_list()
        await task_list.reload()
        if on:
            await task_list.apply_filter(on.date())
        # The filter only sees loaded pages; keep paging until it shows something
        while task_list.has_more and (load_all or not task_list.tasks):
            await task_list.load_more()

        format_tasks(
            task_list.tasks,
            output_format,
            next_cursor=task_list.last_task_id,
            empty_message=empty_message,
        )
        task_list.close()


@app.command("suggest")
@command_wrapper
async def suggest(
    text: str = typer.Argument(..., help="Beginning of a description"),
    load_all: bool = typer.Option(False, "--all", "-a", help="Search every page"),
    limit: int = typer.Option(
        SUGGESTION_LIMIT, "--limit", "-n", min=1, help="Most suggestions shown"
    ),
) -> None:
    """Suggest earlier task descriptions starting with TEXT."""
    async with get_app_context() as ctx:
        ctx.restore_session()
        task_list = ctx.task_list()
        await task_list.reload()
        while load_all and task_list.has_more:
            await task_list.load_more()
        suggestions = task_list.suggestions(text, limit)
        task_list.close()

    if not suggestions:
        format_info("No suggestions")
        return
    for description in suggestions:
        console.print(description, markup=False, highlight=False)


@app.command("add")
@command_wrapper
async def add_task(
    description: str = typer.Argument(..., help="What you are going to do"),
    start: str | None = typer.Option(None, "--start", "-s", help="Start time (HH:MM or ISO-8601)"),
    end: str | None = typer.Option(None, "--end", "-e", help="End time (HH:MM or ISO-8601)"),
    on: datetime | None = typer.Option(
        None, "--date", "-d", formats=DATE_FORMATS, help="Date for HH:MM times (default: today)"
    ),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format (table/json/yaml)"
    ),
) -> None:
    """Add a task."""
    day = _as_date(on) or today()
    start_time = _parse_time(start, day)
    end_time = _parse_time(end, day)

    async with get_app_context() as ctx:
        ctx.restore_session()
        task = await ctx.task_service.create_task(
            description,
            ctx.session.require_owner(),
            start_time=start_time,
            end_time=end_time,
        )

    output_format = _output_format(output)
    if output_format in ("json", "yaml"):
        format_tasks([task], output_format)
    else:
        format_success(f"Task added: {task.id}")


@app.command("edit")
@command_wrapper
async def edit_task(
    task_id: str = typer.Argument(..., help="Task id"),
    description: str | None = typer.Option(None, "--description", "-m", help="New description"),
    start: str | None = typer.Option(None, "--start", "-s", help="Start time (HH:MM or ISO-8601)"),
    end: str | None = typer.Option(None, "--end", "-e", help="End time (HH:MM or ISO-8601)"),
    on: datetime | None = typer.Option(
        None, "--date", "-d", formats=DATE_FORMATS, help="Date for HH:MM times (default: today)"
    ),
    clear_times: bool = typer.Option(False, "--clear-times", help="Remove the time range"),
) -> None:
    """Edit a task's description or time range."""
    day = _as_date(on) or today()

    async with get_app_context() as ctx:
        ctx.restore_session()
        owner = ctx.session.require_owner()
        current = await ctx.task_service.get_task(task_id, owner_id=owner)

        if clear_times:
            start_time = end_time = None
        else:
            start_time = _parse_time(start, day) if start else current.start_datetime()
            end_time = _parse_time(end, day) if end else current.end_datetime()

        task = await ctx.task_service.update_task(
            task_id,
            description if description is not None else current.description,
            start_time=start_time,
            end_time=end_time,
            owner_id=owner,
        )

    format_success(f"Task updated: {task.id}")


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: str = typer.Argument(..., help="Task id"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    async with get_app_context() as ctx:
        ctx.restore_session()
        owner = ctx.session.require_owner()
        task = await ctx.task_service.get_task(task_id, owner_id=owner)

        if not force and not typer.confirm(f"Delete task '{task.description}'?"):
            format_info("Cancelled")
            return

        await ctx.task_service.delete_task(task_id, owner_id=owner)

    format_success(f"Task deleted: {task_id}")


@app.command("show")
@command_wrapper
async def show_task(
    task_id: str = typer.Argument(..., help="Task id"),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Output format (table/json/yaml)"
    ),
) -> None:
    """Show one task."""
    async with get_app_context() as ctx:
        ctx.restore_session()
        task = await ctx.task_service.get_task(task_id, owner_id=ctx.session.require_owner())

    output_format = _output_format(output)
    if output_format in ("json", "yaml"):
        format_tasks([task], output_format)
    else:
        format_task_detail(task)
