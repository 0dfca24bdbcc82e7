"""
Partitioning strategies used to split job input into map tasks and to
re-split map output into reduce tasks.

Every strategy returns exactly the requested number of partitions and places
each input element in exactly one of them.
"""

import math
from typing import Any, List, Sequence

from tuplemr.exceptions import ConfigurationError


def simple_partition_data(data: Sequence[Any], partitions: int) -> List[List[Any]]:
    """
    Split one sequence into `partitions` sub-lists.

    When the data is at least twice as long as the partition count, the data
    is cut into contiguous blocks of `ceil(len(data) / partitions)` items and
    the last block takes whatever is left. Otherwise items are dealt out
    round-robin so that no two partitions differ in size by more than one.

    Args:
        data (Sequence[Any]): Items to split. Relative order is preserved inside
            each partition.
        partitions (int): Number of partitions to produce, at least 1.

    Returns:
        List[List[Any]]: Exactly `partitions` lists.

    Raises:
        ConfigurationError: If `partitions` is less than 1.
    """
    _check_partition_count(partitions)
    data = list(data)

    if len(data) >= partitions * 2:
        # Contiguous blocks; only the last one may come up short
        size = math.ceil(len(data) / partitions)
        partitioned_data = [data[i * size:(i + 1) * size] for i in range(partitions - 1)]
        partitioned_data.append(data[(partitions - 1) * size:])
        return partitioned_data

    partitioned_data = [[] for _ in range(partitions)]
    for i, datum in enumerate(data):
        partitioned_data[i % partitions].append(datum)
    return partitioned_data


def recombine_and_split(partitioned_data: Sequence[Sequence[Any]], partitions: int) -> List[List[Any]]:
    """
    Flatten partitions in order and re-split them with `simple_partition_data`.

    Suitable between phases when reduce tasks have no locality constraint.

    Args:
        partitioned_data (Sequence[Sequence[Any]]): Partitions to concatenate.
        partitions (int): Number of output partitions.

    Returns:
        List[List[Any]]: Exactly `partitions` lists.
    """
    data = [item for partition in partitioned_data for item in partition]
    return simple_partition_data(data, partitions)


def hash_partition_by_first_field(partitioned_data: Sequence[Sequence[Any]], partitions: int) -> List[List[Any]]:
    """
    Route each record to a partition chosen by the key in its first field.

    The digest of a key is the sum of its byte values, so every record with
    the same key lands in the same partition no matter which input partition
    it came from. Distinct keys may share a partition.

    Args:
        partitioned_data (Sequence[Sequence[Any]]): Partitions of records such
            as `(word, 1)` pairs; `record[0]` must be a str or bytes key.
        partitions (int): Number of output partitions.

    Returns:
        List[List[Any]]: Exactly `partitions` lists of records.
    """
    _check_partition_count(partitions)
    result = [[] for _ in range(partitions)]

    for partition in partitioned_data:
        for record in partition:
            result[key_digest(record[0]) % partitions].append(record)

    return result


def key_digest(key: Any) -> int:
    """Sum of the UTF-8 byte values of `key`."""
    if isinstance(key, str):
        key = key.encode("utf-8")
    elif not isinstance(key, (bytes, bytearray)):
        raise TypeError(f"Partition key must be str or bytes, got {type(key).__name__}")
    return sum(key)


def _check_partition_count(partitions: int):
    if not isinstance(partitions, int) or isinstance(partitions, bool) or partitions < 1:
        raise ConfigurationError(f"Partition count must be a positive integer, got {partitions!r}")
