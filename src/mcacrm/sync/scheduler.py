"""
Cron-driven runner for the external full sync.

One APScheduler cron job fires perform_scheduled_sync() on the configured
schedule (default every 6 hours, in a fixed time zone). force_sync() runs
the same path on demand. Runs are single-flight: while one is in progress,
further triggers are dropped, not queued.

The is_running flag is checked and set with no await in between, so on a
single event loop two triggers can never both see it clear. A failing job
is recorded in last_sync and logged; it never propagates out of the runner
and the schedule stays in place for the next tick.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from mcacrm.services.errors import ValidationError

logger = logging.getLogger(__name__)

JOB_ID = "onyx_full_sync"
DEFAULT_SYNC_INTERVAL = "0 */6 * * *"
DEFAULT_TIMEZONE = "America/New_York"


@dataclass
class SyncRun:
    """Outcome of one sync run. Exactly one of results / error is meaningful."""

    timestamp: datetime
    duration: int  # milliseconds
    results: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"timestamp": self.timestamp.isoformat(), "duration": self.duration}
        if self.error is None:
            data["results"] = self.results
        else:
            data["error"] = self.error
        return data


def build_trigger(expression: str, tz: str) -> CronTrigger:
    """
    Parse a 5-field crontab expression bound to `tz`.

    Raises:
        ValidationError: malformed expression or unknown time zone.
    """
    try:
        return CronTrigger.from_crontab(expression, timezone=tz)
    except (ValueError, LookupError) as exc:
        raise ValidationError(f"Invalid schedule {expression!r} ({tz}): {exc}") from exc


class SyncScheduler:
    """
    Single-flight scheduled invoker of one async sync job.

    start() must be called from inside a running event loop.
    """

    def __init__(
        self,
        sync_job: Callable[[], Awaitable[Any]],
        sync_interval: str = DEFAULT_SYNC_INTERVAL,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        """
        Args:
            sync_job: coroutine function performing the full sync; its return
                      value is stored as the run's results.
            sync_interval: crontab expression.
            timezone: IANA time zone the expression is evaluated in.
        """
        self._sync_job = sync_job
        self.sync_interval = sync_interval
        self.timezone = timezone
        self.is_running = False
        self.last_sync: Optional[SyncRun] = None
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def is_scheduled(self) -> bool:
        return self._scheduler is not None

    def start(self) -> None:
        """Register the cron job. A second call while scheduled does nothing."""
        if self._scheduler is not None:
            logger.warning("Sync scheduler already started; ignoring start()")
            return

        scheduler = AsyncIOScheduler(timezone=self.timezone)
        scheduler.add_job(
            self.perform_scheduled_sync,
            trigger=build_trigger(self.sync_interval, self.timezone),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "Sync scheduler started (%s, %s)", self.sync_interval, self.timezone
        )

    def stop(self) -> None:
        """Cancel the cron job, if any. An in-flight run is left to finish."""
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Sync scheduler stopped")

    async def perform_scheduled_sync(self) -> None:
        """Run the sync job unless a run is already in progress."""
        if self.is_running:
            logger.info("Sync already in progress; skipping this trigger")
            return

        self.is_running = True
        started_at = datetime.now(timezone.utc)
        started = time.monotonic()
        logger.info("Full sync starting at %s", started_at.isoformat())

        try:
            results = await self._sync_job()
        except Exception as exc:
            self.last_sync = SyncRun(
                timestamp=started_at,
                duration=_elapsed_ms(started),
                error=str(exc),
            )
            logger.error("Full sync failed: %s", exc)
        else:
            self.last_sync = SyncRun(
                timestamp=started_at,
                duration=_elapsed_ms(started),
                results=results,
            )
            logger.info("Full sync finished in %d ms", self.last_sync.duration)
        finally:
            self.is_running = False

    async def force_sync(self) -> None:
        """Run a sync now, subject to the same single-flight guard."""
        await self.perform_scheduled_sync()

    def update_interval(self, sync_interval: str) -> None:
        """
        Replace the crontab expression.

        An active schedule is stopped and NOT restarted here; call start()
        to resume on the new expression.

        Raises:
            ValidationError: the expression does not parse (nothing changes).
        """
        build_trigger(sync_interval, self.timezone)
        was_scheduled = self.is_scheduled
        self.stop()
        self.sync_interval = sync_interval
        if was_scheduled:
            logger.warning(
                "Sync interval changed to %s; scheduler is stopped until start() is called",
                sync_interval,
            )

    def get_status(self) -> Dict[str, Any]:
        next_run = None
        if self._scheduler is not None:
            job = self._scheduler.get_job(JOB_ID)
            if job is not None and job.next_run_time is not None:
                next_run = job.next_run_time.isoformat()
        return {
            "is_running": self.is_running,
            "is_scheduled": self.is_scheduled,
            "sync_interval": self.sync_interval,
            "timezone": self.timezone,
            "next_run": next_run,
            "last_sync": self.last_sync.to_dict() if self.last_sync else None,
        }


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
