"""
Main entrypoint: runs the OnyxIQ sync scheduler as a standalone worker.

FastAPI runs separately under uvicorn (it starts its own scheduler when
SYNC_ENABLED is true, so run only one of the two in production).

Usage:
    python -m mcacrm sync        # one full sync now, then exit
    python -m mcacrm             # scheduled syncs until interrupted
    uvicorn mcacrm.api.main:create_app --factory --host 0.0.0.0 --port 8000
"""
import asyncio
import json
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


async def _run_once() -> None:
    from mcacrm.sync.jobs import build_sync_job
    from mcacrm.sync.progress import ProgressTracker

    results = await build_sync_job(ProgressTracker())()
    print(json.dumps(results, indent=2, default=str))


async def _run_scheduler() -> None:
    from mcacrm.config import get_settings
    from mcacrm.sync.jobs import build_sync_scheduler
    from mcacrm.sync.progress import ProgressTracker

    settings = get_settings()
    scheduler = build_sync_scheduler(ProgressTracker(), settings)
    scheduler.start()
    logger.info("Worker is running. Press Ctrl+C to stop.")

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        scheduler.stop()
        logger.info("Goodbye.")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "sync":
        asyncio.run(_run_once())
    else:
        asyncio.run(_run_scheduler())
