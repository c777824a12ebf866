"""
OnyxSyncService: the full sync job invoked by the scheduler.

Flow:
  1. Drop stale operations from the progress tracker
  2. Register a tracker operation for this run
  3. Fetch clients, applications and fundings, reporting progress per step
  4. Complete the operation and return per-step counts

On any failure the operation is marked failed and ExternalJobError is raised.
Fetched records are counted, not yet persisted.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from mcacrm.services.errors import ExternalJobError
from mcacrm.sync.progress import DEFAULT_MAX_AGE_MS, ProgressTracker

logger = logging.getLogger(__name__)

# (result key, OnyxIQ endpoint)
SYNC_STEPS = (
    ("clients", "/clients/"),
    ("applications", "/applications/"),
    ("fundings", "/fundings/"),
)


class OnyxSyncService:
    """Runs a full OnyxIQ fetch and reports it through a ProgressTracker."""

    def __init__(self, client, tracker: ProgressTracker, retention_ms: int = DEFAULT_MAX_AGE_MS):
        """
        Args:
            client: OnyxClient instance (or AsyncMock in tests).
            tracker: ProgressTracker that observers poll.
            retention_ms: how long finished operations stay visible.
        """
        self.client = client
        self.tracker = tracker
        self.retention_ms = retention_ms

    async def perform_full_sync(self) -> Dict[str, Any]:
        self.tracker.cleanup(self.retention_ms)

        operation_id = f"onyx-full-sync-{int(time.time() * 1000)}"
        self.tracker.start_operation(operation_id, {"total_items": len(SYNC_STEPS), "step": None})
        logger.info("Starting full OnyxIQ sync (%s)", operation_id)

        results: Dict[str, Any] = {"operation_id": operation_id}
        try:
            for index, (key, endpoint) in enumerate(SYNC_STEPS):
                self.tracker.update_progress(operation_id, {"step": key})
                started = time.monotonic()
                records = await self.client.fetch_paginated(endpoint)
                results[key] = {
                    "total": len(records),
                    "fetch_seconds": round(time.monotonic() - started, 2),
                }
                logger.info("Fetched %d %s from OnyxIQ", len(records), key)
                self.tracker.update_progress(operation_id, {
                    "processed_items": index + 1,
                    "progress": int((index + 1) * 100 / len(SYNC_STEPS)),
                })
        except Exception as exc:
            self.tracker.fail_operation(operation_id, str(exc))
            raise ExternalJobError(f"Full sync failed: {exc}") from exc

        results["timestamp"] = datetime.now(timezone.utc).isoformat()
        self.tracker.complete_operation(operation_id, results)
        logger.info("Full OnyxIQ sync completed")
        return results
