"""Authentication commands."""

import typer

from skillpulse_cli.services.app_context import get_app_context
from skillpulse_cli.utils.exit_codes import ERROR_INVALID_ARGS
from skillpulse_cli.utils.ui.console import get_console
from skillpulse_cli.utils.ui.formatters import format_info, format_success, format_warning

from .decorators import AppError, command_wrapper

app = typer.Typer(help="Authentication commands")
console = get_console()


@app.command()
@command_wrapper(auth_required=False)
async def signup(
    email: str | None = typer.Option(None, "--email", help="Email address"),
    password: str | None = typer.Option(None, "--password", help="Password"),
) -> None:
    """Create a new account in the current context and sign in."""
    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True)
        confirm_password = typer.prompt("Confirm password", hide_input=True)
        if password != confirm_password:
            raise AppError("Passwords do not match", exit_code=ERROR_INVALID_ARGS)

    async with get_app_context() as ctx:
        identity = await ctx.auth_service.sign_up(email, password)
        format_success(
            f"Account created for {identity.email} (context: {ctx.context.name})"
        )


@app.command()
@command_wrapper(auth_required=False)
async def login(
    email: str | None = typer.Option(None, "--email", help="Email address"),
    password: str | None = typer.Option(None, "--password", help="Password"),
) -> None:
    """Sign in to the current context."""
    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    async with get_app_context() as ctx:
        identity = await ctx.auth_service.sign_in(email, password)
        format_success(f"Logged in as {identity.email} (context: {ctx.context.name})")


@app.command()
@command_wrapper(auth_required=False)
async def logout() -> None:
    """Sign out of the current context."""
    async with get_app_context() as ctx:
        if not ctx.restore_session():
            format_info("Not logged in")
            return
        email = ctx.session.email
        await ctx.auth_service.sign_out()
        format_success(f"Logged out {email}")


@app.command("reset-password")
@command_wrapper(auth_required=False)
async def reset_password(
    email: str | None = typer.Option(None, "--email", help="Email address"),
) -> None:
    """Send a password reset for an account."""
    if not email:
        email = typer.prompt("Email")

    async with get_app_context() as ctx:
        await ctx.auth_service.send_password_reset(email)
        if ctx.storage.storage_type == "remote":
            format_success(f"Password reset email sent to {email}")
        else:
            format_warning(
                f"Reset requested for {email}. Local vaults have no mail delivery; "
                "sign up again in a new vault if the password is lost."
            )


@app.command()
@command_wrapper(auth_required=False)
async def status() -> None:
    """Show who is signed in."""
    async with get_app_context() as ctx:
        signed_in = ctx.restore_session()
        console.print(
            f"[bold]Context:[/bold] {ctx.context.name} ({ctx.storage.storage_type})"
        )
        if signed_in:
            console.print(f"[bold]Signed in as:[/bold] [cyan]{ctx.session.email}[/cyan]")
        else:
            console.print("[yellow]Not logged in[/yellow]")
