"""FastAPI application factory."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mcacrm.api.routes import onyx
from mcacrm.config import Settings, get_settings
from mcacrm.services.errors import ServiceError
from mcacrm.sync.jobs import build_sync_scheduler
from mcacrm.sync.progress import ProgressTracker
from mcacrm.sync.scheduler import SyncScheduler


def create_app(
    settings: Optional[Settings] = None,
    tracker: Optional[ProgressTracker] = None,
    scheduler: Optional[SyncScheduler] = None,
) -> FastAPI:
    """Build and return the FastAPI app. Tracker and scheduler are created if not given."""
    settings = settings or get_settings()
    tracker = tracker or ProgressTracker()
    scheduler = scheduler or build_sync_scheduler(tracker, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.sync_enabled:
            scheduler.start()
        yield
        scheduler.stop()

    app = FastAPI(
        title="MCA CRM API",
        description="MCA CRM service layer: OnyxIQ sync status and progress",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.tracker = tracker
    app.state.scheduler = scheduler

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    app.include_router(onyx.router, prefix="/onyx", tags=["onyx"])

    return app
