"""Wiring of the OnyxIQ full sync into a SyncScheduler."""
from typing import Any, Awaitable, Callable, Dict, Optional

from mcacrm.config import Settings, get_settings
from mcacrm.onyx.client import OnyxClient
from mcacrm.onyx.sync_service import OnyxSyncService
from mcacrm.sync.progress import ProgressTracker
from mcacrm.sync.scheduler import SyncScheduler


def build_sync_job(
    tracker: ProgressTracker, settings: Optional[Settings] = None
) -> Callable[[], Awaitable[Dict[str, Any]]]:
    """Return a coroutine function running one full sync with a fresh HTTP client."""
    settings = settings or get_settings()

    async def full_sync() -> Dict[str, Any]:
        async with OnyxClient(
            settings.onyx_base_url,
            settings.onyx_bearer_token,
            timeout=settings.onyx_timeout_seconds,
        ) as client:
            service = OnyxSyncService(client, tracker, settings.progress_retention_ms)
            return await service.perform_full_sync()

    return full_sync


def build_sync_scheduler(
    tracker: ProgressTracker, settings: Optional[Settings] = None
) -> SyncScheduler:
    """Create the sync runner (not yet started)."""
    settings = settings or get_settings()
    return SyncScheduler(
        build_sync_job(tracker, settings),
        sync_interval=settings.sync_cron,
        timezone=settings.sync_timezone,
    )
