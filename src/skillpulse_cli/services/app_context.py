"""Wiring of services for one CLI invocation."""

from __future__ import annotations

import logging

from skillpulse_cli.models.storage_strategy import StorageStrategyContext
from skillpulse_cli.services.auth_service import AuthService
from skillpulse_cli.services.config_service import ConfigService, get_config_service
from skillpulse_cli.services.session_gate import SessionGate
from skillpulse_cli.services.task_list import TaskListController
from skillpulse_cli.services.task_service import TaskService

logger = logging.getLogger(__name__)


class AppContext:
    """Services bound to the active context.

    Use as an async context manager so remote HTTP clients are closed when
    the command finishes.
    """

    def __init__(
        self,
        config_service: ConfigService,
        storage: StorageStrategyContext | None = None,
    ):
        self.config_service = config_service
        self.storage = storage or config_service.storage_strategy_context
        self.context = config_service.get_current_context()

        self.auth_service = AuthService(
            self.storage.identity_provider,
            config_service=config_service,
            context_name=self.context.name,
        )
        self.session = SessionGate(self.auth_service)
        self.task_service = TaskService(self.storage.task_repository)

    async def __aenter__(self) -> AppContext:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def restore_session(self) -> bool:
        """Restore the stored session; True when someone is signed in."""
        if not self.session.is_authenticated:
            self.auth_service.restore_session()
        return self.session.is_authenticated

    def task_list(self) -> TaskListController:
        """Task list for the signed-in user.

        Raises:
            AuthError: When nobody is signed in
        """
        return TaskListController(self.task_service, self.session.require_owner())

    async def close(self) -> None:
        self.session.close()
        self.auth_service.close()
        await self.storage.close()
        logger.debug("app context for %s closed", self.context.name)


def get_app_context() -> AppContext:
    """Build the AppContext for the current configuration."""
    return AppContext(get_config_service())
