"""Configuration service for managing SkillPulse CLI configuration.

This module provides the ConfigService class, which is the single source of truth
for all configuration management in SkillPulse CLI. It handles:

- Loading and saving config.json
- Context management (list, switch)
- Session credential management per context
- Config file initialization with sensible defaults
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from json import JSONDecodeError
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir

from skillpulse_cli.models.config_models import AppConfig, Context
from skillpulse_cli.models.storage_strategy import (
    LocalStorageStrategy,
    RemoteStorageStrategy,
    StorageStrategyContext,
)

logger = logging.getLogger(__name__)

APP_NAME = "skillpulse_cli"


class ConfigService:
    """Service for managing application configuration.

    Args:
        config_dir: Override for the config directory (default: platformdirs)
        data_dir: Override for the data directory holding the local vault
    """

    def __init__(self, config_dir: Path | None = None, data_dir: Path | None = None):
        """Initialize the config service."""

        self.config_dir = Path(config_dir or user_config_dir(APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.credentials_dir = self.config_dir / "credentials"
        self.data_dir = Path(data_dir or user_data_dir(APP_NAME))

        # Ensure directories exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.credentials_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None
        self._storage_strategy_context: StorageStrategyContext | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    @property
    def storage_strategy_context(self) -> StorageStrategyContext:
        """StorageStrategyContext for the current context, built on first use."""
        if self._storage_strategy_context is None:
            context = self.get_current_context()
            if context.type == "remote":
                strategy = RemoteStorageStrategy(project_id=context.source, config=self.config)
            else:
                strategy = LocalStorageStrategy(db_path=context.source)
            logger.debug("storage strategy for context %s: %s", context.name, context.type)
            self._storage_strategy_context = StorageStrategyContext(
                strategy, tasks=self.config.tasks
            )
        return self._storage_strategy_context

    def load_config(self) -> AppConfig:
        """Load configuration from storage."""
        if self._config is not None:
            return self._config  # Return cached config if already loaded

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # Config file doesn't exist yet - create default config
            # This is expected on first run
            self._config = self.create_default_config()
        except Exception as e:
            raise RuntimeError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self):
        """Save the current configuration to storage."""
        if self._config is None:
            raise RuntimeError("No configuration to save")

        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self._config.model_dump_json(indent=4))

            # Set file permissions
            self.config_path.chmod(0o600)
        except Exception as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def create_default_config(self) -> AppConfig:
        """Create a default configuration with a local context.

        The local vault needs no network access, so it is the current context
        on first run; a ``cloud`` context is added for easy switching later.
        """
        local_context = Context(
            name="local",
            type="local",
            source=str(self.data_dir / "vault.db"),
            description="Local SQLite vault",
        )
        cloud_context = Context(
            name="cloud",
            type="remote",
            source="skillpulse",
            description="SkillPulse Firebase project (requires login)",
        )

        self._config = AppConfig(
            current_context_name=local_context.name,
            contexts=[local_context, cloud_context],
        )
        self.save_config()
        logger.info("created default config at %s", self.config_path)
        return self._config

    def list_contexts(self) -> list[Context]:
        """List all available contexts."""
        return self.config.contexts

    def get_current_context(self) -> Context:
        """Get the currently active context.

        Raises:
            ValueError: If the current context is not found
        """
        return self.config.get_current_context()

    def use_context(self, name: str) -> Context:
        """Set the current context by name."""

        context = self.config.get_context(name)
        self.config.current_context_name = context.name
        self.save_config()
        self._storage_strategy_context = None
        return context

    def _credentials_path(self, context_name: str | None) -> Path | None:
        if context_name is None:
            try:
                context_name = self.get_current_context().name
            except ValueError:
                return None
        return self.credentials_dir / f"{context_name}.json"

    def load_credentials(self, context_name: str | None = None) -> dict | None:
        """Load session credentials for a context (default: current).

        Returns:
            dict with 'uid', 'email' and optionally tokens, or None if not found
        """
        cred_path = self._credentials_path(context_name)
        if cred_path is None or not cred_path.exists():
            return None

        try:
            with open(cred_path, encoding="utf-8") as f:
                return json.load(f)
        except JSONDecodeError:
            logger.warning("ignoring unreadable credentials file %s", cred_path)
            return None

    def save_credentials(self, credentials: dict, context_name: str | None = None):
        """Save session credentials for a context (default: current)."""
        cred_path = self._credentials_path(context_name)
        if cred_path is None:
            raise RuntimeError("No current context to save credentials for")
        cred_path.parent.mkdir(parents=True, exist_ok=True)

        with open(cred_path, "w", encoding="utf-8") as f:
            json.dump(credentials, f, indent=2)

        # Set secure file permissions
        cred_path.chmod(0o600)

    def clear_credentials(self, context_name: str | None = None) -> None:
        """Clear session credentials for a context (default: current)."""
        cred_path = self._credentials_path(context_name)
        if cred_path is not None and cred_path.exists():
            cred_path.unlink()


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
