# Standard library imports for enumeration and type hints
from enum import Enum
from typing import Any, List

# Third-party imports for data validation
from pydantic import BaseModel, Field

from tuplemr.core.transform import Transform


class TaskPhase(str, Enum):
    """
    Enumeration of the two phases of a job run.

    - MAP: Tasks that process a partition of the job input
    - REDUCE: Tasks that process a partition of the map output
    """
    MAP = "map"
    REDUCE = "reduce"


class Task(BaseModel):
    """
    Immutable unit of work published to the tuple space.

    A task is created by the JobCoordinator immediately before submission,
    taken exactly once by one worker, executed, and discarded once its result
    has been published. Ids are 1-based positions in the task list of one
    phase of one job run; the coordinator matches results back by this id.
    """

    # === Task Identification ===
    task_id: int = Field(..., ge=1)             # 1-based index within its phase
    phase: TaskPhase                            # MAP or REDUCE

    # === Payload ===
    data: List[Any] = Field(default_factory=list)   # Partition this task processes
    function: Transform                         # Logic applied to `data`

    class Config:
        frozen = True
        arbitrary_types_allowed = True

    def run(self) -> Any:
        """Execute the task's function over its data and return the result."""
        return self.function.apply(self.data)

    def __str__(self):
        return f"{self.phase.value.capitalize()}Task({self.task_id}, size={len(self.data)})"


class TaskFailure(BaseModel):
    """
    Result value a worker publishes in place of a real result when the
    task's function raised. The coordinator turns it into a TaskExecutionError.
    """
    task_id: int
    error_type: str
    error_message: str

    class Config:
        frozen = True
