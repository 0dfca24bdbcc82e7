"""
Wire encoding for tuples exchanged with the remote tuple-space service.

Tuples carry arbitrary Python objects (tasks with their transforms, results),
so they are pickled and then base64-encoded to travel inside JSON bodies.
Functions are pickled by reference: anything shipped to a remote worker must
be importable there under the same module path.
"""

import base64
import binascii
import pickle
from typing import Any, Tuple


class CodecError(ValueError):
    """Payload could not be encoded or decoded."""


def encode_tuple(tup: Tuple[Any, ...]) -> str:
    try:
        raw = pickle.dumps(tuple(tup), protocol=pickle.HIGHEST_PROTOCOL)
    except (pickle.PicklingError, AttributeError, TypeError) as e:
        raise CodecError(f"Tuple cannot be serialized: {e}") from e
    return base64.b64encode(raw).decode("ascii")


def decode_tuple(payload: str) -> Tuple[Any, ...]:
    try:
        raw = base64.b64decode(payload.encode("ascii"), validate=True)
        tup = pickle.loads(raw)
    except (binascii.Error, UnicodeEncodeError, pickle.UnpicklingError, EOFError,
            AttributeError, ImportError, IndexError, KeyError, TypeError, ValueError) as e:
        raise CodecError(f"Tuple payload cannot be decoded: {e}") from e
    if not isinstance(tup, tuple):
        raise CodecError(f"Decoded payload is a {type(tup).__name__}, not a tuple")
    return tup
