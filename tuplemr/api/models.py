from pydantic import BaseModel, Field
from typing import Optional


class WriteTupleRequest(BaseModel):
    """
    Request payload sent by a coordinator or worker to publish a tuple
    into the shared tuple space.
    """
    tuple: str = Field(..., description="Base64-encoded pickled tuple")


class TakeTupleRequest(BaseModel):
    """
    Request payload for a blocking take. The service holds the request open
    for at most `Settings.max_take_wait` seconds, so clients with longer or
    unlimited deadlines re-issue the request.
    """
    pattern: str = Field(..., description="Base64-encoded pickled pattern tuple")
    timeout: Optional[float] = Field(
        None, ge=0, description="Seconds to wait; null waits up to the service maximum"
    )


class TupleResponse(BaseModel):
    """Tuple removed from the space by a successful take."""
    tuple: str = Field(..., description="Base64-encoded pickled tuple")


class TupleCountResponse(BaseModel):
    count: int = Field(..., description="Number of tuples currently stored")
