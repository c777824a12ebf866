"""Tests for wiring the OnyxIQ sync into the scheduler."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mcacrm.config import Settings
from mcacrm.sync.jobs import build_sync_job, build_sync_scheduler
from mcacrm.sync.progress import ProgressTracker
from mcacrm.sync.scheduler import SyncScheduler


def _settings(**overrides) -> Settings:
    values = {
        "onyx_base_url": "https://onyx.test/api",
        "onyx_bearer_token": "tok",
        "sync_cron": "*/5 * * * *",
        "sync_timezone": "UTC",
        "progress_retention_ms": 1234,
    }
    values.update(overrides)
    return Settings(**values)


class TestBuildSyncScheduler:
    def test_uses_configured_schedule(self):
        runner = build_sync_scheduler(ProgressTracker(), _settings())
        assert isinstance(runner, SyncScheduler)
        assert runner.sync_interval == "*/5 * * * *"
        assert runner.timezone == "UTC"
        assert not runner.is_scheduled

    def test_settings_defaults(self):
        settings = Settings()
        runner = build_sync_scheduler(ProgressTracker(), settings)
        assert runner.sync_interval == settings.sync_cron


class TestBuildSyncJob:
    @pytest.mark.asyncio
    async def test_runs_full_sync_with_fresh_client(self):
        tracker = ProgressTracker()
        client = AsyncMock()
        client_cls = MagicMock()
        client_cls.return_value.__aenter__.return_value = client
        service = AsyncMock()
        service.perform_full_sync = AsyncMock(return_value={"clients": {"total": 0}})

        with patch("mcacrm.sync.jobs.OnyxClient", client_cls), \
             patch("mcacrm.sync.jobs.OnyxSyncService", return_value=service) as service_cls:
            results = await build_sync_job(tracker, _settings())()

        assert results == {"clients": {"total": 0}}
        client_cls.assert_called_once_with("https://onyx.test/api", "tok", timeout=60.0)
        service_cls.assert_called_once_with(client, tracker, 1234)
        client_cls.return_value.__aexit__.assert_awaited_once()
