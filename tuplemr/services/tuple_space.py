# Standard library imports for thread coordination and abstract interfaces
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from tuplemr.exceptions import TupleSpaceTimeoutError
from tuplemr.utils.logger import get_logger


def matches(pattern: Tuple[Any, ...], tup: Tuple[Any, ...]) -> bool:
    """
    Check whether a tuple satisfies a take pattern.

    Matching is positional and requires equal length. Each pattern field is
    one of:
    - None: wildcard, matches anything
    - a type: matches any instance of that type
    - any other value: matches an equal field

    Args:
        pattern: Pattern to test.
        tup: Candidate tuple.

    Returns:
        bool: True if every field matches.
    """
    if len(pattern) != len(tup):
        return False
    for expected, actual in zip(pattern, tup):
        if expected is None:
            continue
        if isinstance(expected, type):
            if not isinstance(actual, expected):
                return False
        elif expected != actual:
            return False
    return True


class TupleSpace(ABC):
    """
    Shared, blocking, pattern-matched store through which coordinators and
    workers exchange task and result tuples.

    Implementations guarantee that each written tuple is removed by at most
    one `take`, and that `take` blocks until a matching tuple exists.
    """

    @abstractmethod
    def write(self, tup: Tuple[Any, ...]) -> None:
        """Publish a tuple. Never blocks."""

    @abstractmethod
    def take(self, pattern: Tuple[Any, ...], timeout: Optional[float] = None) -> Tuple[Any, ...]:
        """
        Remove and return the oldest tuple matching `pattern`.

        Args:
            pattern: Positional pattern (see `matches`).
            timeout: Seconds to wait; None waits forever.

        Raises:
            TupleSpaceTimeoutError: If nothing matched before the deadline.
        """

    @abstractmethod
    def count(self, pattern: Optional[Tuple[Any, ...]] = None) -> int:
        """Number of stored tuples, optionally only those matching `pattern`."""


class LocalTupleSpace(TupleSpace):
    """
    In-process, thread-safe tuple space.

    All tuples live in one list guarded by a single condition variable; every
    write wakes every waiting taker, which rescans for its own pattern. The
    queue service hosts one of these, and in-process workers and tests share
    one directly.
    """

    def __init__(self):
        self._tuples: List[Tuple[Any, ...]] = []
        self._condition = threading.Condition()
        self.logger = get_logger(__name__)

    def write(self, tup):
        tup = tuple(tup)
        with self._condition:
            self._tuples.append(tup)
            self._condition.notify_all()
        self.logger.debug(f"Tuple written: kind={tup[0] if tup else None!r}")

    def take(self, pattern, timeout=None):
        pattern = tuple(pattern)
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._condition:
            while True:
                for i, tup in enumerate(self._tuples):
                    if matches(pattern, tup):
                        return self._tuples.pop(i)

                if deadline is None:
                    self._condition.wait()
                    continue

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TupleSpaceTimeoutError(
                        f"No tuple matched {_describe(pattern)} within {timeout}s"
                    )
                self._condition.wait(remaining)

    def count(self, pattern=None):
        with self._condition:
            if pattern is None:
                return len(self._tuples)
            pattern = tuple(pattern)
            return sum(1 for tup in self._tuples if matches(pattern, tup))


def _describe(pattern: Tuple[Any, ...]) -> str:
    fields = []
    for field in pattern:
        if field is None:
            fields.append("*")
        elif isinstance(field, type):
            fields.append(field.__name__)
        else:
            fields.append(repr(field)[:40])
    return "(" + ", ".join(fields) + ")"
