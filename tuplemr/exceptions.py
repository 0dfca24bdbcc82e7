class TupleMRError(Exception):
    """Base class for every error raised by tuplemr."""


class ConfigurationError(TupleMRError, ValueError):
    """A job was run without a complete or valid configuration."""


class TaskTimeoutError(TupleMRError, TimeoutError):
    """
    No result was matched for a submitted task before the collection deadline.

    Attributes:
        phase (str): "map" or "reduce".
        task_id (int): Id of the task whose result never arrived.
        timeout (float): Seconds waited for that single result.
    """

    def __init__(self, phase: str, task_id: int, timeout: float):
        self.phase = phase
        self.task_id = task_id
        self.timeout = timeout
        super().__init__(
            f"No result for {phase} task {task_id} after {timeout:.2f}s"
        )


class TaskExecutionError(TupleMRError):
    """
    A worker reported that a user function raised while executing a task.

    Attributes:
        phase (str): "map" or "reduce".
        task_id (int): Id of the failed task.
        error_type (str): Class name of the exception raised on the worker.
        error_message (str): Message of that exception.
    """

    def __init__(self, phase: str, task_id: int, error_type: str, error_message: str):
        self.phase = phase
        self.task_id = task_id
        self.error_type = error_type
        self.error_message = error_message
        super().__init__(
            f"{phase} task {task_id} failed on worker: {error_type}: {error_message}"
        )


class TupleSpaceTimeoutError(TupleMRError, TimeoutError):
    """Nothing matched a take pattern before its deadline."""


class TupleSpaceConnectionError(TupleMRError, ConnectionError):
    """The remote tuple-space service could not be reached or answered badly."""
