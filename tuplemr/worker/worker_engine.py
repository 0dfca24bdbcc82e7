import threading
from typing import Optional

from tuplemr.exceptions import TupleSpaceConnectionError, TupleSpaceTimeoutError
from tuplemr.models.task import TaskFailure
from tuplemr.services.codec import CodecError
from tuplemr.services.tuple_space import TupleSpace
from tuplemr.worker.metrics import MetricsCollector
from tuplemr.worker.task_executor import TaskExecutor
from tuplemr.utils.config import get_worker_settings
from tuplemr.utils.logger import get_logger

TASK_PATTERN = ("task", None, None)


class WorkerEngine:
    """
    Main worker loop: take any published task, execute it, publish its result.

    Workers pull from the shared tuple space, so load balancing falls out of
    whichever idle worker takes the next task first. A task whose function
    raises is answered with a TaskFailure so the submitting coordinator does
    not wait forever. Tasks are never retried.
    """

    def __init__(self, tuple_space: TupleSpace,
                 worker_id: Optional[str] = None,
                 poll_interval: Optional[float] = None,
                 metrics: Optional[MetricsCollector] = None):
        settings = get_worker_settings()
        self.tuple_space = tuple_space
        self.worker_id = worker_id or settings.worker_id
        self.poll_interval = poll_interval if poll_interval is not None else settings.poll_interval
        self.metrics = metrics or MetricsCollector(settings.metrics_port)
        self.task_executor = TaskExecutor(self.metrics)
        self.logger = get_logger(__name__)

        # State
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Run the worker loop in a background daemon thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run, name=f"tuplemr-{self.worker_id}", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        """Ask the loop to exit after its current take/task and wait for it."""
        self.logger.info(f"Stopping worker {self.worker_id}...")
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run(self):
        """Process tasks in the calling thread until `stop()` is called."""
        self.logger.info(f"Worker {self.worker_id} waiting for tasks")
        self.metrics.start_server()
        while not self._stop_event.is_set():
            try:
                self.run_once(self.poll_interval)
            except (TupleSpaceConnectionError, CodecError) as e:
                self.logger.error(f"Error in worker loop: {e}")
                self._stop_event.wait(self.poll_interval)
        self.logger.info(f"Worker {self.worker_id} stopped")

    def run_once(self, timeout: Optional[float] = None) -> bool:
        """
        Take and process at most one task.

        Returns:
            bool: True if a task was processed, False if none arrived in time.

        Raises:
            CodecError: If the taken task cannot be decoded on this worker
                (e.g. its function is not importable here). `run` logs it and
                keeps going.
        """
        try:
            _, owner_id, task = self.tuple_space.take(TASK_PATTERN, timeout=timeout)
        except TupleSpaceTimeoutError:
            return False

        task_id = getattr(task, "task_id", 0)
        try:
            result = self.task_executor.execute(task)
        except Exception as e:
            self._publish_failure(owner_id, task_id, e)
            return True

        try:
            self.tuple_space.write(("result", owner_id, task_id, result))
        except CodecError as e:
            # Result cannot travel to the coordinator; answer with the encoding error instead
            self.logger.error(f"Result of task {task_id} cannot be published: {e}")
            self._publish_failure(owner_id, task_id, e)
            return True

        self.metrics.increment_counter("tasks_completed")
        return True

    def _publish_failure(self, owner_id: str, task_id: int, error: Exception):
        failure = TaskFailure(
            task_id=task_id,
            error_type=type(error).__name__,
            error_message=str(error),
        )
        self.tuple_space.write(("result", owner_id, task_id, failure))
        self.metrics.increment_counter("tasks_failed")
