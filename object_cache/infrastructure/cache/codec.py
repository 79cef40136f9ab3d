"""
Value Codec

Serializes cache values for the remote store.

Storable values form a closed set:
    None | bool | int | float | str | bytes | list/tuple | dict

Wire format:
    int (not bool)  -> ASCII decimal, e.g. b"42" (remote counters work on it)
    None            -> b"n:"
    bytes           -> b"b:" + raw bytes (top level only)
    anything else   -> b"j:" + orjson JSON

Tuples come back as lists and non-string dict keys come back as strings,
as with any JSON round trip.
"""

import copy
import math
from typing import Any

import orjson

from object_cache.core.config.constants import CODEC_TAG_BYTES, CODEC_TAG_JSON, CODEC_TAG_NONE
from object_cache.core.exceptions import CacheValueError

_SCALARS = (str, int, float, bool, type(None))


def is_integer_like(value: Any) -> bool:
    """True for values incr/decr may operate on."""
    return isinstance(value, int) and not isinstance(value, bool)


def _check_storable(value: Any, path: str = "$") -> None:
    if isinstance(value, float):
        if not math.isfinite(value):
            raise CacheValueError("Non-finite floats cannot be cached", details={"path": path})
        return
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _check_storable(item, f"{path}[{index}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, _SCALARS) or isinstance(key, float) and not math.isfinite(key):
                raise CacheValueError(
                    "Unsupported mapping key type",
                    details={"path": path, "type": type(key).__name__},
                )
            _check_storable(item, f"{path}[{key!r}]")
        return
    raise CacheValueError(
        "Unsupported value type", details={"path": path, "type": type(value).__name__}
    )


def encode(value: Any) -> bytes:
    """
    Encode a value for the remote store.

    Raises:
        CacheValueError: If the value is outside the storable set
    """
    if is_integer_like(value):
        return str(int(value)).encode("ascii")
    if value is None:
        return CODEC_TAG_NONE
    if isinstance(value, (bytes, bytearray, memoryview)):
        return CODEC_TAG_BYTES + bytes(value)

    _check_storable(value)
    try:
        return CODEC_TAG_JSON + orjson.dumps(value, option=orjson.OPT_NON_STR_KEYS)
    except orjson.JSONEncodeError as e:
        # e.g. integers wider than 64 bits nested in a container
        raise CacheValueError.from_exception(e, message="Value could not be serialized")


def decode(payload: bytes | str) -> Any:
    """
    Decode a payload written by encode().

    Raises:
        CacheValueError: If the payload was not produced by this codec
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    if payload.startswith(CODEC_TAG_JSON):
        try:
            return orjson.loads(payload[len(CODEC_TAG_JSON):])
        except orjson.JSONDecodeError as e:
            raise CacheValueError.from_exception(e, message="Corrupt JSON payload")
    if payload.startswith(CODEC_TAG_BYTES):
        return payload[len(CODEC_TAG_BYTES):]
    if payload == CODEC_TAG_NONE:
        return None

    try:
        return int(payload)
    except ValueError:
        raise CacheValueError("Unrecognized payload", details={"payload": payload[:32]})


def detach(value: Any) -> Any:
    """Copy mutable containers so callers cannot alter memoized entries."""
    if isinstance(value, (list, dict, tuple)):
        return copy.deepcopy(value)
    return value
