"""Tests for ConfigService: default config, contexts and credentials."""

from __future__ import annotations

import stat

import pytest

from skillpulse_cli.models.config_models import AppConfig
from skillpulse_cli.models.storage_strategy import (
    LocalStorageStrategy,
    RemoteStorageStrategy,
)
from skillpulse_cli.repositories import ScanTaskIdAllocator
from skillpulse_cli.services.config_service import ConfigService


class TestDefaultConfig:
    def test_first_load_writes_default(self, tmp_config):
        config = tmp_config.load_config()

        assert tmp_config.config_path.exists()
        assert config.current_context_name == "local"
        assert [c.name for c in config.contexts] == ["local", "cloud"]
        assert config.get_context("local").source.endswith("vault.db")
        assert config.get_context("cloud").type == "remote"

    def test_config_file_is_private(self, tmp_config):
        tmp_config.load_config()
        assert stat.S_IMODE(tmp_config.config_path.stat().st_mode) == 0o600

    def test_reload_from_disk(self, tmp_config, tmp_path):
        tmp_config.config.tasks.page_size = 10
        tmp_config.save_config()

        fresh = ConfigService(config_dir=tmp_path, data_dir=tmp_path)

        assert fresh.config.tasks.page_size == 10

    def test_corrupt_config_raises(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json")
        service = ConfigService(config_dir=tmp_path, data_dir=tmp_path)

        with pytest.raises(RuntimeError, match="Failed to load config"):
            service.load_config()

    def test_save_without_config(self, tmp_config):
        with pytest.raises(RuntimeError):
            tmp_config.save_config()


class TestContexts:
    def test_use_context_persists(self, tmp_config, tmp_path):
        tmp_config.use_context("cloud")

        assert tmp_config.get_current_context().name == "cloud"
        fresh = ConfigService(config_dir=tmp_path, data_dir=tmp_path)
        assert fresh.get_current_context().name == "cloud"

    def test_use_unknown_context(self, tmp_config):
        with pytest.raises(ValueError, match="not found"):
            tmp_config.use_context("nope")

    def test_local_strategy_for_local_context(self, tmp_config):
        storage = tmp_config.storage_strategy_context

        assert isinstance(storage.strategy, LocalStorageStrategy)
        assert storage is tmp_config.storage_strategy_context

    def test_switching_context_rebuilds_strategy(self, tmp_config):
        local = tmp_config.storage_strategy_context

        tmp_config.use_context("cloud")

        remote = tmp_config.storage_strategy_context
        assert remote is not local
        assert isinstance(remote.strategy, RemoteStorageStrategy)
        assert remote.strategy.project_id == "skillpulse"

    def test_tasks_config_reaches_repository(self, tmp_config):
        tmp_config.config.tasks.id_strategy = "scan"
        tmp_config.config.tasks.page_size = 7

        repository = tmp_config.storage_strategy_context.task_repository

        assert isinstance(repository.allocator, ScanTaskIdAllocator)
        assert repository.page_size == 7


class TestCredentials:
    def test_round_trip_per_context(self, tmp_config):
        tmp_config.save_credentials({"uid": "1", "email": "a@x.com"}, context_name="local")

        assert tmp_config.load_credentials("local") == {"uid": "1", "email": "a@x.com"}
        assert tmp_config.load_credentials("cloud") is None

    def test_defaults_to_current_context(self, tmp_config):
        tmp_config.save_credentials({"uid": "1", "email": "a@x.com"})

        assert tmp_config.load_credentials("local") is not None
        tmp_config.use_context("cloud")
        assert tmp_config.load_credentials() is None

    def test_credentials_file_is_private(self, tmp_config):
        tmp_config.save_credentials({"uid": "1", "email": "a@x.com"}, context_name="local")

        path = tmp_config.credentials_dir / "local.json"
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_clear(self, tmp_config):
        tmp_config.save_credentials({"uid": "1", "email": "a@x.com"}, context_name="local")

        tmp_config.clear_credentials("local")
        tmp_config.clear_credentials("local")

        assert tmp_config.load_credentials("local") is None

    def test_unreadable_credentials_ignored(self, tmp_config):
        (tmp_config.credentials_dir / "local.json").write_text("{oops")
        assert tmp_config.load_credentials("local") is None

    def test_no_current_context(self, tmp_path):
        service = ConfigService(config_dir=tmp_path, data_dir=tmp_path)
        service._config = AppConfig(current_context_name="missing")

        assert service.load_credentials() is None
        with pytest.raises(RuntimeError):
            service.save_credentials({"uid": "1"})
