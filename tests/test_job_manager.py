import logging

import pytest

from tuplemr.core.job_manager import JobCoordinator, merge_results
from tuplemr.core.partitioner import recombine_and_split
from tuplemr.exceptions import ConfigurationError, TaskExecutionError, TaskTimeoutError
from tuplemr.models.job import JobStatus
from tuplemr.core.transform import FunctionTransform
from tuplemr.models.task import Task, TaskPhase
from tuplemr.services.tuple_space import LocalTupleSpace
from tuplemr.utils.config import get_settings
from tuplemr.worker.metrics import MetricsCollector
from tuplemr.worker.worker_engine import WorkerEngine

from sample_jobs import explode, identity, total


class ReversingTupleSpace(LocalTupleSpace):
    """
    Executes tasks inline as they are published, but holds the results back
    and releases them newest-first once the coordinator starts collecting.
    """

    def __init__(self):
        super().__init__()
        self.held = []
        self.writes = []
        self.release_order = []

    def write(self, tup):
        self.writes.append(tup)
        if tup[0] == "task":
            _, owner_id, task = tup
            self.held.append(("result", owner_id, task.task_id, task.run()))
        else:
            super().write(tup)

    def take(self, pattern, timeout=None):
        while self.held:
            result = self.held.pop()
            self.release_order.append(result[2])
            super().write(result)
        return super().take(pattern, timeout)


class InlineWorkerSpace(LocalTupleSpace):
    """Has a worker take and run each task the moment it is published."""

    def __init__(self):
        super().__init__()
        self.engine = WorkerEngine(self, worker_id="inline", metrics=MetricsCollector())

    def write(self, tup):
        super().write(tup)
        if tup[0] == "task":
            self.engine.run_once(timeout=0)


def explode_on_first_record(data):
    if 1 in data:
        raise RuntimeError("boom")
    return list(data)


def configure(job, data=None):
    job.data = list(range(1, 11)) if data is None else data
    job.map = identity
    job.reduce = identity
    job.partition = recombine_and_split
    return job


class TestConfigurationGuard:
    @pytest.mark.parametrize("missing", ["map", "reduce", "partition"])
    def test_run_requires_every_function(self, missing):
        space = ReversingTupleSpace()
        job = configure(JobCoordinator(space, 2, 2))
        setattr(job, missing, None)

        with pytest.raises(ConfigurationError):
            job.run()

        assert space.writes == []
        assert space.count() == 0

    def test_run_requires_data(self):
        space = ReversingTupleSpace()
        job = configure(JobCoordinator(space, 2, 2))
        job.data = None

        with pytest.raises(ConfigurationError):
            job.run()
        assert space.writes == []

    @pytest.mark.parametrize("counts", [(0, 1), (1, 0), (-3, 2), (True, 1), (1, True), (2.0, 1)])
    def test_task_counts_must_be_positive(self, counts):
        with pytest.raises(ConfigurationError):
            JobCoordinator(LocalTupleSpace(), *counts)

    def test_configuration_error_is_a_value_error(self):
        job = JobCoordinator(LocalTupleSpace(), 1, 1)

        with pytest.raises(ValueError):
            job.run()

    def test_task_counts_default_from_settings(self):
        job = JobCoordinator(LocalTupleSpace())

        assert (job.map_tasks, job.reduce_tasks) == (10, 2)
        assert job.task_timeout is None

    def test_task_timeout_defaults_from_settings(self, monkeypatch):
        monkeypatch.setenv("TUPLEMR_TASK_TIMEOUT", "5")
        get_settings.cache_clear()
        try:
            assert JobCoordinator(LocalTupleSpace()).task_timeout == 5.0
            assert JobCoordinator(LocalTupleSpace(), task_timeout=0.5).task_timeout == 0.5
            # An explicit None waits forever even when a default is configured
            assert JobCoordinator(LocalTupleSpace(), task_timeout=None).task_timeout is None
        finally:
            get_settings.cache_clear()


class TestResultOrdering:
    def test_results_align_with_submission_despite_reverse_completion(self):
        space = ReversingTupleSpace()
        job = configure(JobCoordinator(space, 5, 5, silent=True))
        job.data = list(range(1, 21))

        results = job.run()

        assert space.release_order == [5, 4, 3, 2, 1, 5, 4, 3, 2, 1]
        assert results == [[1, 2, 3, 4], [5, 6, 7, 8], [9, 10, 11, 12],
                           [13, 14, 15, 16], [17, 18, 19, 20]]

    def test_submit_and_collect_matches_by_task_id(self):
        space = ReversingTupleSpace()
        job = configure(JobCoordinator(space, 1, 1))
        tasks = job._build_tasks(
            TaskPhase.MAP, [[1], [2, 2], [3, 3, 3]], FunctionTransform(total)
        )

        assert job.submit_and_collect("owner", TaskPhase.MAP, tasks) == [1, 4, 9]

    def test_task_ids_are_one_based_per_phase(self):
        space = ReversingTupleSpace()
        configure(JobCoordinator(space, 3, 2)).run()

        tasks = [tup[2] for tup in space.writes if tup[0] == "task"]
        assert [(t.phase.value, t.task_id) for t in tasks] == [
            ("map", 1), ("map", 2), ("map", 3), ("reduce", 1), ("reduce", 2),
        ]
        assert all(isinstance(t, Task) for t in tasks)

    def test_every_tuple_of_a_run_shares_one_owner_id(self):
        space = ReversingTupleSpace()
        job = configure(JobCoordinator(space, 2, 2))
        job.run()

        owners = {tup[1] for tup in space.writes}
        assert owners == {job.last_run.owner_id}

    def test_reruns_are_independent(self):
        space = ReversingTupleSpace()
        job = configure(JobCoordinator(space, 2, 2))

        first = job.run()
        first_owner = job.last_run.owner_id
        second = job.run()

        assert first == second
        assert job.last_run.owner_id != first_owner
        assert space.count() == 0


class TestJobRunBookkeeping:
    def test_completed_run(self):
        job = configure(JobCoordinator(ReversingTupleSpace(), 2, 1))
        job.run()

        assert job.last_run.status == JobStatus.COMPLETED
        assert job.last_run.get_execution_time() >= 0
        assert job.last_run.error_message is None

    def test_partition_returning_wrong_count_fails_before_reduce(self):
        space = ReversingTupleSpace()
        job = configure(JobCoordinator(space, 2, 3))
        job.partition = lambda data, n: [[item for p in data for item in p]]

        with pytest.raises(ConfigurationError, match="expected 3"):
            job.run()

        assert job.last_run.status == JobStatus.FAILED
        assert [t[2].phase.value for t in space.writes if t[0] == "task"] == ["map", "map"]

    def test_partition_function_errors_propagate(self):
        job = configure(JobCoordinator(ReversingTupleSpace(), 2, 2))

        def broken(data, n):
            raise KeyError("nope")

        job.partition = broken

        with pytest.raises(KeyError):
            job.run()
        assert job.last_run.status == JobStatus.FAILED


class TestFailures:
    def test_missing_result_times_out(self):
        space = LocalTupleSpace()
        job = configure(JobCoordinator(space, 3, 1, task_timeout=0.05))

        with pytest.raises(TaskTimeoutError) as excinfo:
            job.run()

        assert excinfo.value.phase == "map"
        assert excinfo.value.task_id == 1
        assert job.last_run.status == JobStatus.FAILED
        # Unclaimed tasks are withdrawn from the space
        assert space.count() == 0

    def test_timeout_is_an_ordinary_timeout_error(self):
        job = configure(JobCoordinator(LocalTupleSpace(), 1, 1, task_timeout=0.01))

        with pytest.raises(TimeoutError):
            job.run()

    def test_worker_failure_is_raised(self, tuple_space, start_workers):
        start_workers(tuple_space, 2)
        job = configure(JobCoordinator(tuple_space, 2, 1, task_timeout=5))
        job.reduce = explode

        with pytest.raises(TaskExecutionError) as excinfo:
            job.run()

        assert excinfo.value.phase == "reduce"
        assert excinfo.value.task_id == 1
        assert excinfo.value.error_type == "RuntimeError"
        assert "boom" in str(excinfo.value)

    def test_failed_run_leaves_no_results_behind(self):
        space = InlineWorkerSpace()
        job = configure(JobCoordinator(space, 3, 1, task_timeout=1))
        job.map = explode_on_first_record

        with pytest.raises(TaskExecutionError) as excinfo:
            job.run()

        assert excinfo.value.task_id == 1
        # Results of map tasks 2 and 3 were published but never collected
        assert space.count() == 0


class TestLogging:
    def test_submissions_logged_at_info(self, caplog):
        job = configure(JobCoordinator(ReversingTupleSpace(), 2, 1))
        caplog.set_level(logging.INFO, logger="tuplemr.core.job_manager")

        job.run()

        assert "Submitting map task 2" in caplog.text

    def test_silent_jobs_only_log_submissions_at_debug(self, caplog):
        job = configure(JobCoordinator(ReversingTupleSpace(), 2, 1, silent=True))
        caplog.set_level(logging.INFO, logger="tuplemr.core.job_manager")

        job.run()

        assert "Submitting" not in caplog.text
        assert "completed" in caplog.text


def test_merge_results_unions_mappings_and_pairs():
    assert merge_results([{"dog": 2}, [("cat", 1)], {}]) == {"dog": 2, "cat": 1}
