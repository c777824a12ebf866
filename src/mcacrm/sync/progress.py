"""
In-memory progress ledger for long-running operations (external syncs, imports).

Callers report progress fire-and-forget: every method on an unknown id is a
silent no-op, and nothing here ever raises. State lives only in this process
and is lost on restart.

Lifecycle of a record:
  start_operation → update_progress* → complete_operation | fail_operation → cleanup

The first terminal transition wins; later updates and terminal calls on a
finished record are ignored.
"""
import logging
import time
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"

DEFAULT_MAX_AGE_MS = 60 * 60 * 1000  # 1 hour


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class OperationRecord:
    """State of one tracked operation. Timestamps are epoch milliseconds."""

    id: str
    start_time: int
    last_update: int
    status: str = RUNNING
    progress: int = 0  # percent, 0-100
    processed_items: int = 0
    total_items: int = 0
    errors: List[Any] = field(default_factory=list)
    results: Any = None
    error: Optional[str] = None
    end_time: Optional[int] = None
    duration: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.end_time is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Fields callers may set through start_operation / update_progress.
# results and error belong to the terminal transitions only.
_WRITABLE = {f.name for f in fields(OperationRecord)} - {
    "id", "start_time", "last_update", "status", "results", "error", "end_time", "duration",
}


class ProgressTracker:
    """
    Registry of operation id → OperationRecord.

    Not thread-safe: meant to be shared by tasks on one asyncio event loop.
    Create one per process (or per test) and pass it to whoever reports.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms):
        """
        Args:
            clock: returns the current time in epoch milliseconds.
        """
        self._clock = clock
        self._operations: Dict[str, OperationRecord] = {}

    def start_operation(self, operation_id: str, initial_data: Optional[Dict[str, Any]] = None) -> None:
        """Register a running operation. An existing record with the same id is replaced."""
        now = self._clock()
        record = OperationRecord(id=operation_id, start_time=now, last_update=now)
        self._merge(record, initial_data or {})
        self._operations[operation_id] = record
        logger.debug("Operation %s started", operation_id)

    def update_progress(self, operation_id: str, updates: Dict[str, Any]) -> None:
        """Shallow-merge `updates` into a running record and refresh last_update."""
        record = self._operations.get(operation_id)
        if record is None or record.is_terminal:
            return
        self._merge(record, updates)
        record.last_update = self._clock()

    def complete_operation(self, operation_id: str, results: Any = None) -> None:
        record = self._operations.get(operation_id)
        if record is None or record.is_terminal:
            return
        record.status = COMPLETED
        record.progress = 100
        record.results = results
        self._finish(record)
        logger.info("Operation %s completed in %d ms", operation_id, record.duration)

    def fail_operation(self, operation_id: str, error_message: str) -> None:
        record = self._operations.get(operation_id)
        if record is None or record.is_terminal:
            return
        record.status = FAILED
        record.error = error_message
        self._finish(record)
        logger.warning("Operation %s failed after %d ms: %s", operation_id, record.duration, error_message)

    def get_progress(self, operation_id: str) -> Optional[OperationRecord]:
        return self._operations.get(operation_id)

    def get_active_operations(self) -> List[OperationRecord]:
        return [r for r in self._operations.values() if r.status == RUNNING]

    def cleanup(self, max_age_ms: int = DEFAULT_MAX_AGE_MS) -> int:
        """
        Drop finished records whose end_time is more than `max_age_ms` ago.
        Running records stay regardless of age so a stuck operation remains visible.

        Returns:
            Number of records removed.
        """
        now = self._clock()
        stale = [
            op_id
            for op_id, record in self._operations.items()
            if record.end_time is not None and now - record.end_time > max_age_ms
        ]
        for op_id in stale:
            del self._operations[op_id]
        if stale:
            logger.debug("Removed %d stale operations", len(stale))
        return len(stale)

    # ─── Internal helpers ─────────────────────────────────────────────────────

    def _merge(self, record: OperationRecord, updates: Dict[str, Any]) -> None:
        for key, value in updates.items():
            if key in _WRITABLE:
                setattr(record, key, value)
            else:
                record.details[key] = value

    def _finish(self, record: OperationRecord) -> None:
        now = self._clock()
        record.end_time = now
        record.last_update = now
        record.duration = now - record.start_time
