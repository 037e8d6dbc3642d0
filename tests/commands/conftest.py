"""Fixtures for CLI command tests.

Every command builds its own AppContext; here each one is built over the
same in-memory storage so state carries across invocations.
"""

from unittest.mock import patch

import pytest

from skillpulse_cli.services.app_context import AppContext

EMAIL = "u@x.com"
PASSWORD = "secret1"


@pytest.fixture()
def cli_storage(tmp_config, memory_storage, memory_strategy):
    """Route auth and task commands to the memory backend."""
    memory_strategy.provider.add_account(EMAIL, PASSWORD)

    def build():
        return AppContext(tmp_config, storage=memory_storage)

    with (
        patch("skillpulse_cli.commands.auth.get_app_context", side_effect=build),
        patch("skillpulse_cli.commands.tasks.get_app_context", side_effect=build),
    ):
        yield memory_strategy


@pytest.fixture()
def signed_in(cli_storage, tmp_config):
    """Stored session for EMAIL in the local context."""
    tmp_config.save_credentials({"uid": "uid-1", "email": EMAIL}, context_name="local")
    return cli_storage
