# Standard library imports for type hints
from typing import Any, Dict, Iterable, List, Optional, Sequence

# Internal imports for job/task models, partitioning, and logging
from tuplemr.core.partitioner import simple_partition_data
from tuplemr.core.transform import Transform, as_partitioner, as_transform
from tuplemr.exceptions import (
    ConfigurationError,
    TaskExecutionError,
    TaskTimeoutError,
    TupleSpaceTimeoutError,
)
from tuplemr.models.job import JobRun
from tuplemr.models.task import Task, TaskFailure, TaskPhase
from tuplemr.services.tuple_space import TupleSpace
from tuplemr.utils.config import get_settings
from tuplemr.utils.logger import get_logger

TASK = "task"
RESULT = "result"

# Marks an omitted task_timeout; an explicit None still means "wait forever"
_UNSET = object()


class JobCoordinator:
    """
    Drives one MapReduce job through its map and reduce phases.

    Jobs are specialized by assignment rather than subclassing: set `data`,
    then `map`, `reduce`, and `partition` to callables or to objects exposing
    `apply()`, and call `run()`. The coordinator never executes user logic
    itself; every map and reduce task is published to the injected tuple
    space and executed by whichever worker takes it.

    Protocol of one run:
    1. Split `data` into `map_tasks` partitions with `simple_partition_data`
    2. Publish one map task per partition, then collect each result in
       submission order by matching (owner id, task id)
    3. Re-split the ordered map results with `partition` into `reduce_tasks`
       partitions
    4. Publish and collect the reduce tasks the same way
    5. Return the reduce results, index i belonging to reduce task i + 1

    Example:
        job = JobCoordinator(LocalTupleSpace(), map_tasks=4, reduce_tasks=2)
        job.data = lines
        job.map = count_words
        job.reduce = sum_counts
        job.partition = hash_partition_by_first_field
        counts = merge_results(job.run())
    """

    def __init__(self, tuple_space: TupleSpace,
                 map_tasks: Optional[int] = None,
                 reduce_tasks: Optional[int] = None,
                 task_timeout: Any = _UNSET,
                 silent: bool = False):
        """
        Initialize the coordinator with its tuple space and task counts.

        Args:
            tuple_space: Shared space the job's tasks and results travel through
            map_tasks: Number of map tasks; defaults to `Settings.default_map_tasks`
            reduce_tasks: Number of reduce tasks; defaults to `Settings.default_reduce_tasks`
            task_timeout: Seconds to wait for each single result. None waits
                forever; omitted, it defaults to `Settings.task_timeout`
            silent: Log per-task submission messages at DEBUG instead of INFO

        Raises:
            ConfigurationError: If a task count is less than 1
        """
        settings = get_settings()
        self.tuple_space = tuple_space
        self.map_tasks = map_tasks if map_tasks is not None else settings.default_map_tasks
        self.reduce_tasks = reduce_tasks if reduce_tasks is not None else settings.default_reduce_tasks
        self.task_timeout: Optional[float] = (
            settings.task_timeout if task_timeout is _UNSET else task_timeout
        )
        self.silent = silent

        # User-provided job definition
        self.data: Optional[Sequence[Any]] = None
        self.map: Any = None
        self.reduce: Any = None
        self.partition: Any = None

        # Bookkeeping of the most recent run
        self.last_run: Optional[JobRun] = None

        self.logger = get_logger(__name__)
        self._check_task_counts()

    def run(self) -> List[Any]:
        """
        Run the whole job and return the reduce results.

        Each call is an independent run with a fresh owner id; nothing is
        cached between runs.

        Returns:
            List[Any]: One result per reduce task, in reduce-task order. Merging
            them (e.g. with `merge_results`) is left to the caller.

        Raises:
            ConfigurationError: If map, reduce, partition, or data is unset, a
                function is not callable, or `partition` returns the wrong
                number of partitions. Raised before any task is published,
                except for the partition count check which follows the map phase.
            TaskTimeoutError: If `task_timeout` is set and a result never arrives
            TaskExecutionError: If a worker reports that a task's function raised
        """
        map_transform = as_transform(self.map, "map")
        reduce_transform = as_transform(self.reduce, "reduce")
        partitioner = as_partitioner(self.partition)
        if self.data is None:
            raise ConfigurationError("job data not assigned")
        self._check_task_counts()

        job_run = JobRun(map_tasks=self.map_tasks, reduce_tasks=self.reduce_tasks)
        self.last_run = job_run

        try:
            data = list(self.data)
            job_run.mark_running()
            self.logger.info(
                f"Job {job_run.owner_id} started: {len(data)} records, "
                f"{self.map_tasks} map / {self.reduce_tasks} reduce tasks"
            )

            # Map phase over an even split of the input
            map_data = simple_partition_data(data, self.map_tasks)
            map_tasks = self._build_tasks(TaskPhase.MAP, map_data, map_transform)
            map_results = self.submit_and_collect(job_run.owner_id, TaskPhase.MAP, map_tasks)

            # Re-partition map output for the reduce phase
            reduce_data = list(partitioner.apply(map_results, self.reduce_tasks))
            if len(reduce_data) != self.reduce_tasks:
                raise ConfigurationError(
                    f"partition returned {len(reduce_data)} partitions, "
                    f"expected {self.reduce_tasks}"
                )

            reduce_tasks = self._build_tasks(TaskPhase.REDUCE, reduce_data, reduce_transform)
            results = self.submit_and_collect(job_run.owner_id, TaskPhase.REDUCE, reduce_tasks)

        except Exception as e:
            job_run.mark_failed(e)
            self.logger.error(f"Job {job_run.owner_id} failed: {e}")
            self._withdraw_job_tuples(job_run.owner_id)
            raise

        job_run.mark_completed()
        self.logger.info(
            f"Job {job_run.owner_id} completed in {job_run.get_execution_time():.3f}s"
        )
        return results

    def submit_and_collect(self, owner_id: str, phase: TaskPhase, tasks: List[Task]) -> List[Any]:
        """
        Publish every task of one phase, then collect their results.

        Results are taken strictly in submission order, each by its own
        (owner id, task id) key, so the returned list lines up with `tasks`
        no matter which worker finished first.

        Args:
            owner_id: Identifier of the current run; tags every tuple
            phase: Phase the tasks belong to (used for logging and errors)
            tasks: Tasks to publish, ids 1..len(tasks)

        Returns:
            List[Any]: `results[i]` is the result of `tasks[i]`

        Raises:
            TaskTimeoutError: If `task_timeout` elapses while waiting for one result
            TaskExecutionError: If a worker published a TaskFailure for a task
        """
        for task in tasks:
            self._log_submission(f"Submitting {phase.value} task {task.task_id}")
            self.tuple_space.write((TASK, owner_id, task))

        results: List[Any] = [None] * len(tasks)
        for i, task in enumerate(tasks):
            try:
                tup = self.tuple_space.take(
                    (RESULT, owner_id, task.task_id, None), timeout=self.task_timeout
                )
            except TupleSpaceTimeoutError as e:
                raise TaskTimeoutError(phase.value, task.task_id, self.task_timeout) from e

            result = tup[3]
            if isinstance(result, TaskFailure):
                raise TaskExecutionError(
                    phase.value, task.task_id, result.error_type, result.error_message
                )
            results[i] = result

        self.logger.info(f"Collected {len(results)} {phase.value} results for job {owner_id}")
        return results

    def _build_tasks(self, phase: TaskPhase, partitions: List[Sequence[Any]],
                     function: Transform) -> List[Task]:
        return [
            Task(task_id=i + 1, phase=phase, data=list(partition), function=function)
            for i, partition in enumerate(partitions)
        ]

    def _withdraw_job_tuples(self, owner_id: str):
        """Remove this run's unclaimed tasks and uncollected results from the space."""
        for kind, pattern in (("tasks", (TASK, owner_id, None)),
                              ("results", (RESULT, owner_id, None, None))):
            withdrawn = 0
            while True:
                try:
                    self.tuple_space.take(pattern, timeout=0)
                except TupleSpaceTimeoutError:
                    break
                except Exception as e:
                    self.logger.warning(f"Could not withdraw {kind} of job {owner_id}: {e}")
                    break
                withdrawn += 1
            if withdrawn:
                self.logger.info(f"Withdrew {withdrawn} {kind} of job {owner_id}")

    def _check_task_counts(self):
        for name in ("map_tasks", "reduce_tasks"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")

    def _log_submission(self, message: str):
        if self.silent:
            self.logger.debug(message)
        else:
            self.logger.info(message)


def merge_results(results: Iterable[Any]) -> Dict[Any, Any]:
    """
    Union per-reduce-task results into a single dict.

    Each result may be a mapping or an iterable of key/value pairs. Later
    results win on duplicate keys, which cannot happen when the partition
    function co-locates keys.
    """
    merged: Dict[Any, Any] = {}
    for partition in results:
        merged.update(partition)
    return merged
