import time
import traceback
from typing import Any

from tuplemr.models.task import Task
from tuplemr.worker.metrics import MetricsCollector
from tuplemr.utils.logger import get_logger


class TaskExecutor:
    """Runs a single map or reduce task on behalf of a worker."""

    def __init__(self, metrics: MetricsCollector):
        self.metrics = metrics
        self.logger = get_logger(__name__)

    def execute(self, task: Task) -> Any:
        """Validate and execute a task; exceptions from its function propagate."""
        self._validate_task(task)
        self.logger.info(f"Executing {task}")

        started = time.perf_counter()
        try:
            result = task.run()
        except Exception as e:
            self.logger.error(f"{task} failed: {e}")
            self.logger.debug(traceback.format_exc())
            raise
        finally:
            self.metrics.observe_histogram("task_duration", time.perf_counter() - started)

        self.logger.info(f"{task} completed in {time.perf_counter() - started:.3f}s")
        return result

    def _validate_task(self, task: Any):
        if not isinstance(task, Task):
            raise ValueError(f"Expected a Task, got {type(task).__name__}")
        if not isinstance(task.task_id, int) or isinstance(task.task_id, bool) or task.task_id < 1:
            raise ValueError(f"Task id must be a positive integer, got {task.task_id!r}")
        if task.function is None:
            raise ValueError(f"Task {task.task_id} has no function")
