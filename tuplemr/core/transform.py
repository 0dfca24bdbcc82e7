# Standard library imports for abstract interfaces and type hints
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Sequence

from tuplemr.exceptions import ConfigurationError


class Transform(ABC):
    """
    Capability interface for user map and reduce logic.

    A transform receives the whole data payload of one task (a partition of
    the job input for map tasks, a partition of the map output for reduce
    tasks) and returns the task's result. Results must be picklable when the
    job runs against a remote tuple space.
    """

    @abstractmethod
    def apply(self, data: Sequence[Any]) -> Any:
        """Compute the result of one task from its data payload."""


class Partitioner(ABC):
    """
    Capability interface for the repartitioning step between map and reduce.

    Receives the ordered sequence of map results (one per map task) and must
    return exactly `partitions` sub-sequences, one per reduce task. Any
    locality policy (e.g. grouping records by key) belongs here.
    """

    @abstractmethod
    def apply(self, partitioned_data: Sequence[Sequence[Any]], partitions: int) -> List[List[Any]]:
        """Re-split map output into reduce-task inputs."""


class FunctionTransform(Transform):
    """Adapts a plain callable `fn(data) -> result` to the Transform interface."""

    def __init__(self, fn: Callable[[Sequence[Any]], Any]):
        self.fn = fn

    def apply(self, data):
        return self.fn(data)

    def __repr__(self):
        return f"FunctionTransform({_callable_name(self.fn)})"


class FunctionPartitioner(Partitioner):
    """Adapts a plain callable `fn(partitioned_data, partitions)` to the Partitioner interface."""

    def __init__(self, fn: Callable[[Sequence[Sequence[Any]], int], List[List[Any]]]):
        self.fn = fn

    def apply(self, partitioned_data, partitions):
        return self.fn(partitioned_data, partitions)

    def __repr__(self):
        return f"FunctionPartitioner({_callable_name(self.fn)})"


def as_transform(obj: Any, role: str) -> Transform:
    """
    Normalize user map/reduce logic into a Transform.

    Args:
        obj: A Transform, any object exposing `apply`, or a plain callable.
        role: "map" or "reduce", used in error messages.

    Returns:
        Transform: `obj` itself when it already conforms, otherwise a FunctionTransform.

    Raises:
        ConfigurationError: If `obj` is unset or neither callable nor a Transform.
    """
    if obj is None:
        raise ConfigurationError(f"{role} function not assigned")
    if isinstance(obj, Transform):
        return obj
    if callable(getattr(obj, "apply", None)):
        return FunctionTransform(obj.apply)
    if callable(obj):
        return FunctionTransform(obj)
    raise ConfigurationError(f"{role} must be callable or expose apply(), got {type(obj).__name__}")


def as_partitioner(obj: Any) -> Partitioner:
    """Normalize a partition function into a Partitioner (see `as_transform`)."""
    if obj is None:
        raise ConfigurationError("partition function not assigned")
    if isinstance(obj, Partitioner):
        return obj
    if callable(getattr(obj, "apply", None)):
        return FunctionPartitioner(obj.apply)
    if callable(obj):
        return FunctionPartitioner(obj)
    raise ConfigurationError(f"partition must be callable or expose apply(), got {type(obj).__name__}")


def _callable_name(fn: Callable) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)
