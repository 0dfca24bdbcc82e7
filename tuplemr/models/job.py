# Standard library imports for enumeration, UUID generation, and datetime handling
from enum import Enum
from datetime import datetime, timezone
import uuid

# Third-party imports for data validation and type hints
from typing import Optional
from pydantic import BaseModel


class JobStatus(str, Enum):
    """
    Enumeration of possible states of one job run.

    - PENDING: Run created but no task published yet
    - RUNNING: Map or reduce tasks are in flight
    - COMPLETED: Every reduce result was collected
    - FAILED: A configuration check, timeout, or task failure aborted the run
    """
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class JobRun(BaseModel):
    """
    Bookkeeping for a single invocation of `JobCoordinator.run()`.

    The owner id tags every task and result tuple of the run so that its
    results never mix with those of another run sharing the same tuple space.
    """

    # === Run Identification ===
    owner_id: str = None                        # Auto-generated uuid4 hex if not provided
    map_tasks: int
    reduce_tasks: int

    # === Run State Tracking ===
    status: JobStatus = JobStatus.PENDING
    error_message: Optional[str] = None

    # === Timing Information ===
    created_at: datetime = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __init__(self, **data):
        """
        Initialize JobRun with automatic owner id and timestamp generation.

        Args:
            **data: Run configuration parameters
        """
        if data.get('owner_id') is None:
            data['owner_id'] = uuid.uuid4().hex

        if data.get('created_at') is None:
            data['created_at'] = _utcnow()

        super().__init__(**data)

    def mark_running(self):
        self.status = JobStatus.RUNNING
        self.started_at = _utcnow()

    def mark_completed(self):
        self.status = JobStatus.COMPLETED
        self.completed_at = _utcnow()

    def mark_failed(self, error: Exception):
        self.status = JobStatus.FAILED
        self.error_message = str(error)
        self.completed_at = _utcnow()

    def get_execution_time(self) -> Optional[float]:
        """Elapsed seconds between start and completion, if both are known."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)
