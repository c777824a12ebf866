"""OnyxIQ sync status, manual trigger and operation progress routes."""
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from pydantic import BaseModel

from mcacrm.services.errors import NotFoundError
from mcacrm.sync.progress import ProgressTracker
from mcacrm.sync.scheduler import SyncScheduler

router = APIRouter()


class IntervalUpdateRequest(BaseModel):
    sync_interval: str
    restart: bool = True  # start() again if the scheduler was running


def get_tracker(request: Request) -> ProgressTracker:
    return request.app.state.tracker


def get_scheduler(request: Request) -> SyncScheduler:
    return request.app.state.scheduler


@router.get("/status")
def sync_status(scheduler: SyncScheduler = Depends(get_scheduler)) -> Dict[str, Any]:
    """Scheduler state and the outcome of the most recent sync."""
    return scheduler.get_status()


@router.post("/sync/full")
async def trigger_full_sync(
    background_tasks: BackgroundTasks,
    scheduler: SyncScheduler = Depends(get_scheduler),
):
    """
    Trigger a full sync now. Returns immediately; the sync runs in background.
    A trigger while a sync is running is dropped.
    """
    if scheduler.is_running:
        return {"message": "Sync already in progress", "started": False}
    background_tasks.add_task(scheduler.force_sync)
    return {"message": "Sync started", "started": True}


@router.put("/interval")
async def update_interval(
    body: IntervalUpdateRequest,
    scheduler: SyncScheduler = Depends(get_scheduler),
) -> Dict[str, Any]:
    """Change the sync schedule (crontab expression)."""
    was_scheduled = scheduler.is_scheduled
    scheduler.update_interval(body.sync_interval)
    if was_scheduled and body.restart:
        scheduler.start()
    return scheduler.get_status()


@router.get("/operations")
def active_operations(tracker: ProgressTracker = Depends(get_tracker)) -> List[Dict[str, Any]]:
    """Operations still running."""
    return [record.to_dict() for record in tracker.get_active_operations()]


@router.get("/progress/{operation_id}")
def operation_progress(operation_id: str, tracker: ProgressTracker = Depends(get_tracker)):
    """Progress of one operation (polled by the import UI)."""
    record = tracker.get_progress(operation_id)
    if record is None:
        raise NotFoundError("Operation not found")
    return {"success": True, "data": record.to_dict()}
