"""
Remote Cache Client Protocol

This module defines the protocol the coordinator expects from the
memcached-compatible remote store, enabling dependency injection and
testability.

Architectural Decision: Protocol-based abstraction
- Any client with memcached semantics can be injected (Redis, memcached, in-memory)
- Facilitates testing with in-memory and mock implementations
- No-throw contract: failures surface as MISSING / None / False

Author: System Architect
Date: 2026-10-19
"""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable


class _Missing:
    """Marker for a key the remote store does not hold."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()


@runtime_checkable
class RemoteCacheClient(Protocol):
    """
    Protocol for the remote store used by the coordinator.

    Semantics follow memcached:
    - add only stores when the key is absent
    - replace only stores when the key is present
    - increment/decrement refuse absent keys; decrement floors at zero
    - get_multi omits absent keys instead of returning None for them

    Implementations:
    - RedisRemoteClient: Production Redis-backed client
    - InMemoryRemoteClient: Testing/development client
    """

    def get(self, key: str) -> Any:
        """
        Get a value.

        Returns:
            The stored value, or MISSING if absent or the call failed
        """
        ...

    def get_multi(self, keys: Iterable[str]) -> dict[str, Any]:
        """
        Get several values in one round trip.

        Returns:
            Mapping of present keys only
        """
        ...

    def add(self, key: str, value: Any, expiration: int = 0) -> bool:
        """Store only if absent. Expiration in seconds, 0 = never."""
        ...

    def set(self, key: str, value: Any, expiration: int = 0) -> bool:
        """Store unconditionally."""
        ...

    def replace(self, key: str, value: Any, expiration: int = 0) -> bool:
        """Store only if present."""
        ...

    def delete(self, key: str) -> bool:
        """Delete; False if the key did not exist."""
        ...

    def increment(self, key: str, delta: int = 1) -> int | None:
        """Atomically add delta; None if absent or not an integer."""
        ...

    def decrement(self, key: str, delta: int = 1) -> int | None:
        """Atomically subtract delta, flooring at zero; None if absent or not an integer."""
        ...

    def flush_all(self) -> bool:
        """Wipe the whole store."""
        ...

    def close(self) -> None:
        """Release connections."""
        ...
