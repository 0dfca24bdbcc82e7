"""TupleMR: MapReduce jobs dispatched to remote workers through a shared tuple space."""

from tuplemr.core.job_manager import JobCoordinator, merge_results
from tuplemr.core.partitioner import (
    hash_partition_by_first_field,
    recombine_and_split,
    simple_partition_data,
)
from tuplemr.core.transform import FunctionPartitioner, FunctionTransform, Partitioner, Transform
from tuplemr.exceptions import (
    ConfigurationError,
    TaskExecutionError,
    TaskTimeoutError,
    TupleMRError,
    TupleSpaceConnectionError,
    TupleSpaceTimeoutError,
)
from tuplemr.services.tuple_space import LocalTupleSpace, TupleSpace
from tuplemr.services.tuple_space_client import RemoteTupleSpace

__version__ = "1.0.0"

__all__ = [
    "JobCoordinator",
    "merge_results",
    "simple_partition_data",
    "recombine_and_split",
    "hash_partition_by_first_field",
    "Transform",
    "Partitioner",
    "FunctionTransform",
    "FunctionPartitioner",
    "TupleSpace",
    "LocalTupleSpace",
    "RemoteTupleSpace",
    "TupleMRError",
    "ConfigurationError",
    "TaskTimeoutError",
    "TaskExecutionError",
    "TupleSpaceTimeoutError",
    "TupleSpaceConnectionError",
]
