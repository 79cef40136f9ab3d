"""
In-Memory Remote Client

Process-local implementation of the remote cache protocol for tests and
single-process development. Values go through the same codec as the
Redis client, so type round-trips match production.

Failure injection:
    fail_reads  -> get/get_multi behave as if the store were unreachable
    fail_writes -> add/set/replace/delete/increment/decrement return failure
"""

import time
from collections.abc import Callable, Iterable
from typing import Any

from object_cache.core.config.constants import Stage
from object_cache.core.exceptions import CacheValueError
from object_cache.core.interfaces import MISSING
from object_cache.core.logging.logger import get_logger, log_stage
from object_cache.infrastructure.cache import codec

logger = get_logger(__name__)


class InMemoryRemoteClient:
    """
    Dict-backed remote store with memcached semantics.

    Attributes:
        calls: Names of the operations invoked, in order (for round-trip assertions)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: dict[str, tuple[bytes, float | None]] = {}
        self.calls: list[str] = []
        self.fail_reads = False
        self.fail_writes = False

    def _expires_at(self, expiration: int) -> float | None:
        return self._clock() + expiration if expiration and expiration > 0 else None

    def _live_payload(self, key: str) -> bytes | None:
        item = self._data.get(key)
        if item is None:
            return None
        payload, expires_at = item
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return payload

    def _store(self, key: str, value: Any, expiration: int) -> bool:
        try:
            payload = codec.encode(value)
        except CacheValueError as e:
            log_stage(logger, Stage.REMOTE, "Value rejected by codec", level="warning", key=key, error=e.message)
            return False
        self._data[key] = (payload, self._expires_at(expiration))
        return True

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Any:
        self.calls.append("get")
        if self.fail_reads:
            return MISSING
        payload = self._live_payload(key)
        return MISSING if payload is None else codec.decode(payload)

    def get_multi(self, keys: Iterable[str]) -> dict[str, Any]:
        self.calls.append("get_multi")
        if self.fail_reads:
            return {}
        found = {}
        for key in keys:
            payload = self._live_payload(key)
            if payload is not None:
                found[key] = codec.decode(payload)
        return found

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, key: str, value: Any, expiration: int = 0) -> bool:
        self.calls.append("add")
        if self.fail_writes or self._live_payload(key) is not None:
            return False
        return self._store(key, value, expiration)

    def set(self, key: str, value: Any, expiration: int = 0) -> bool:
        self.calls.append("set")
        if self.fail_writes:
            return False
        return self._store(key, value, expiration)

    def replace(self, key: str, value: Any, expiration: int = 0) -> bool:
        self.calls.append("replace")
        if self.fail_writes or self._live_payload(key) is None:
            return False
        return self._store(key, value, expiration)

    def delete(self, key: str) -> bool:
        self.calls.append("delete")
        if self.fail_writes or self._live_payload(key) is None:
            return False
        del self._data[key]
        return True

    def increment(self, key: str, delta: int = 1) -> int | None:
        self.calls.append("increment")
        return self._adjust(key, delta)

    def decrement(self, key: str, delta: int = 1) -> int | None:
        self.calls.append("decrement")
        return self._adjust(key, -delta)

    def _adjust(self, key: str, delta: int) -> int | None:
        if self.fail_writes:
            return None
        payload = self._live_payload(key)
        if payload is None:
            return None
        current = codec.decode(payload)
        if not codec.is_integer_like(current):
            return None
        # Only decrements floor at zero
        value = current + delta if delta >= 0 else max(0, current + delta)
        self._data[key] = (codec.encode(value), self._data[key][1])
        return value

    def flush_all(self) -> bool:
        self.calls.append("flush_all")
        if self.fail_writes:
            return False
        self._data.clear()
        return True

    def close(self) -> None:
        self.calls.append("close")

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def raw(self, key: str) -> bytes | None:
        """Stored payload for a key, bypassing the codec."""
        return self._live_payload(key)

    def keys(self) -> list[str]:
        return [key for key in list(self._data) if self._live_payload(key) is not None]

    def __len__(self) -> int:
        return len(self.keys())
