"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer

from skillpulse_cli.models import AuthError, StoreError
from skillpulse_cli.services.config_service import get_config_service
from skillpulse_cli.utils.exit_codes import ERROR_AUTH_FAILURE, exit_code_for
from skillpulse_cli.utils.logger import get_logger
from skillpulse_cli.utils.ui.console import apply_output_settings
from skillpulse_cli.utils.ui.formatters import format_error


def _require_auth() -> None:
    """Require stored session credentials for the current context.

    Tasks are scoped to their owner, so local contexts need a signed-in
    account as well.
    """
    config_svc = get_config_service()
    if config_svc.load_credentials() is None:
        try:
            context_name = config_svc.get_current_context().name
        except ValueError:
            context_name = "unknown"
        format_error(
            f"Not logged in (context: {context_name}). "
            "Use 'skillpulse auth login' to authenticate."
        )
        raise typer.Exit(ERROR_AUTH_FAILURE)


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


def command_wrapper(_func: Callable | None = None, *, auth_required: bool = True):
    """Decorator to wrap command functions with common functionality."""

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                apply_output_settings(get_config_service().config.output)

                # 1. Handle Auth
                if auth_required:
                    _require_auth()

                # 2. Run Sync or Async
                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except AppError as e:
                elapsed = time.monotonic() - start
                logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
                format_error(str(e))
                raise typer.Exit(code=e.exit_code) from e

            except (AuthError, StoreError) as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %r", cmd, elapsed, e
                )
                format_error(e.message)
                raise typer.Exit(code=exit_code_for(e)) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                # Generic fallback for unexpected crashes
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=1) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
