# Standard library imports for deadlines and type hints
import time
from typing import Any, Optional, Tuple

# Third-party imports for HTTP client operations
import httpx

# Internal imports for the tuple-space contract, wire codec, and logging
from tuplemr.exceptions import TupleSpaceConnectionError, TupleSpaceTimeoutError
from tuplemr.services.codec import decode_tuple, encode_tuple
from tuplemr.services.tuple_space import TupleSpace
from tuplemr.utils.config import get_settings
from tuplemr.utils.logger import get_logger


class RemoteTupleSpace(TupleSpace):
    """
    HTTP client for the TupleMR tuple-space service.

    Implements the same blocking write/take contract as LocalTupleSpace, so a
    JobCoordinator or WorkerEngine can be pointed at a shared service instead
    of an in-process space without any other change.

    Blocking takes are long-polled: each HTTP request asks the service to
    wait at most `max_take_wait` seconds, and the client keeps re-issuing the
    request until a tuple arrives or its own deadline passes.
    """

    def __init__(self, base_url: str,
                 request_timeout: float = 30.0,
                 max_take_wait: Optional[float] = None,
                 client: Optional[httpx.Client] = None):
        """
        Args:
            base_url: Service root, e.g. "http://master:8000".
            request_timeout: Timeout for non-blocking requests, and the extra
                margin allowed on top of each long-poll wait.
            max_take_wait: Longest wait requested per take call; defaults to
                `Settings.max_take_wait`.
            client: Pre-built httpx client (tests pass one bound to the ASGI app).
        """
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self.max_take_wait = max_take_wait if max_take_wait is not None else get_settings().max_take_wait
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(request_timeout),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5)
        )
        self.logger = get_logger(__name__)
        self.logger.info(f"Tuple-space client initialized for {self.base_url}")

    def close(self):
        """Close the HTTP client and release its connections."""
        self.client.close()
        self.logger.info("Tuple-space client closed")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def write(self, tup: Tuple[Any, ...]) -> None:
        response = self._post("/api/v1/tuples", {"tuple": encode_tuple(tup)}, self.request_timeout)
        if response.status_code != httpx.codes.CREATED:
            raise TupleSpaceConnectionError(
                f"Unexpected status {response.status_code} writing tuple: {response.text}"
            )

    def take(self, pattern: Tuple[Any, ...], timeout: Optional[float] = None) -> Tuple[Any, ...]:
        encoded_pattern = encode_tuple(pattern)
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            wait = self.max_take_wait
            if deadline is not None:
                wait = min(wait, max(0.0, deadline - time.monotonic()))

            response = self._post(
                "/api/v1/tuples/take",
                {"pattern": encoded_pattern, "timeout": wait},
                wait + self.request_timeout,
            )

            if response.status_code == httpx.codes.OK:
                return decode_tuple(response.json()["tuple"])
            if response.status_code != httpx.codes.NO_CONTENT:
                raise TupleSpaceConnectionError(
                    f"Unexpected status {response.status_code} taking tuple: {response.text}"
                )

            if deadline is not None and time.monotonic() >= deadline:
                raise TupleSpaceTimeoutError(f"No tuple matched within {timeout}s")

    def count(self, pattern: Optional[Tuple[Any, ...]] = None) -> int:
        params = {} if pattern is None else {"pattern": encode_tuple(pattern)}
        try:
            response = self.client.get(f"{self.base_url}/api/v1/tuples/count",
                                       params=params, timeout=self.request_timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TupleSpaceConnectionError(f"Tuple-space service unavailable: {e}") from e
        return response.json()["count"]

    def _post(self, path: str, payload: dict, timeout: float) -> httpx.Response:
        try:
            return self.client.post(f"{self.base_url}{path}", json=payload, timeout=timeout)
        except httpx.HTTPError as e:
            self.logger.error(f"Request to {path} failed: {e}")
            raise TupleSpaceConnectionError(f"Tuple-space service unavailable: {e}") from e
