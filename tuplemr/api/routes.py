# FastAPI imports for routing, HTTP handling, and dependency injection
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

# Internal API models for request/response validation
from tuplemr.api.models import (
    TakeTupleRequest,
    TupleCountResponse,
    TupleResponse,
    WriteTupleRequest,
)

# Tuple-space storage and wire codec
from tuplemr.exceptions import TupleSpaceTimeoutError
from tuplemr.services.codec import CodecError, decode_tuple, encode_tuple
from tuplemr.services.tuple_space import LocalTupleSpace, TupleSpace

# Utility imports
from tuplemr.utils.config import get_settings
from tuplemr.utils.logger import get_logger

# ===== API Router Configuration =====
router = APIRouter()

# Single tuple space shared by every coordinator and worker of this service
tuple_space = LocalTupleSpace()

logger = get_logger(__name__)


def get_tuple_space() -> TupleSpace:
    """Dependency returning the tuple space served by this process."""
    return tuple_space


# ===== Tuple Space Endpoints =====

@router.post("/tuples", status_code=status.HTTP_201_CREATED)
def write_tuple(request: WriteTupleRequest, space: TupleSpace = Depends(get_tuple_space)):
    """
    Publish a tuple into the shared tuple space.

    Coordinators publish `("task", owner_id, task)` tuples and workers publish
    `("result", owner_id, task_id, result)` tuples through this endpoint.

    Args:
        request: Encoded tuple to store

    Returns:
        Dict with the write status

    Raises:
        HTTPException: 400 if the payload cannot be decoded
    """
    try:
        tup = decode_tuple(request.tuple)
    except CodecError as e:
        logger.warning(f"Rejected tuple write: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    space.write(tup)
    return {"status": "written"}


@router.post("/tuples/take", response_model=TupleResponse,
             responses={204: {"description": "Nothing matched before the deadline"}})
def take_tuple(request: TakeTupleRequest, space: TupleSpace = Depends(get_tuple_space)):
    """
    Remove and return a tuple matching the given pattern, blocking until one
    is available or the wait deadline passes.

    The endpoint is synchronous, so FastAPI runs each blocked take on its own
    threadpool worker and other requests keep being served meanwhile.

    Args:
        request: Encoded pattern plus optional timeout

    Returns:
        TupleResponse with the removed tuple, or an empty 204 response when
        nothing matched within `min(timeout, max_take_wait)` seconds

    Raises:
        HTTPException: 400 if the pattern cannot be decoded
    """
    try:
        pattern = decode_tuple(request.pattern)
    except CodecError as e:
        logger.warning(f"Rejected take pattern: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    max_wait = get_settings().max_take_wait
    timeout = max_wait if request.timeout is None else min(request.timeout, max_wait)

    try:
        tup = space.take(pattern, timeout=timeout)
    except TupleSpaceTimeoutError:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return TupleResponse(tuple=encode_tuple(tup))


@router.get("/tuples/count", response_model=TupleCountResponse)
def count_tuples(
    pattern: Optional[str] = Query(None, description="Encoded pattern; omit to count every tuple"),
    space: TupleSpace = Depends(get_tuple_space),
):
    """Report how many tuples are waiting in the space, optionally only those matching a pattern."""
    decoded = None
    if pattern is not None:
        try:
            decoded = decode_tuple(pattern)
        except CodecError as e:
            logger.warning(f"Rejected count pattern: {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return TupleCountResponse(count=space.count(decoded))
