import pytest

from tuplemr.services.tuple_space import LocalTupleSpace
from tuplemr.worker.metrics import MetricsCollector
from tuplemr.worker.worker_engine import WorkerEngine


@pytest.fixture
def tuple_space():
    return LocalTupleSpace()


@pytest.fixture
def start_workers():
    """Factory starting in-process workers on a tuple space; all are stopped at teardown."""
    engines = []

    def _start(space, count=3):
        for _ in range(count):
            engine = WorkerEngine(
                space,
                worker_id=f"test-worker-{len(engines)}",
                poll_interval=0.05,
                metrics=MetricsCollector(),
            )
            engine.start()
            engines.append(engine)
        return engines

    yield _start

    for engine in engines:
        engine.stop(timeout=5)
