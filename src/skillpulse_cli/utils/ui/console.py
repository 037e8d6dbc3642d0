"""Shared Rich console for SkillPulse CLI output.

Every module prints through the same console so ``output.color`` from the
config file can be applied once per command. Rich also honours ``NO_COLOR``.
"""

from functools import lru_cache

from rich.console import Console

from skillpulse_cli.models.config_models import OutputConfig


@lru_cache(maxsize=1)
def get_console() -> Console:
    """The process-wide console."""
    return Console()


def apply_output_settings(output: OutputConfig) -> Console:
    """Switch colour on or off for everything printed from here on."""
    console = get_console()
    console.no_color = not output.color
    return console
