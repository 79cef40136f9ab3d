"""
Local (per-unit-of-work) cache storage.

Entries are keyed by physical key and remember whether the value was
found, so a memoized miss is distinguishable from a stored falsy value.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from object_cache.core.interfaces import MISSING


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """
    A memoized lookup result.

    Attributes:
        value: Stored value, or MISSING for a memoized miss
        found: Whether the value is known to exist in the remote tier
    """

    value: Any
    found: bool

    @classmethod
    def miss(cls) -> "CacheEntry":
        return cls(MISSING, False)

    @property
    def is_miss(self) -> bool:
        return self.value is MISSING


class LocalCache:
    """
    In-memory memo of physical key -> CacheEntry.

    Responsibility: Plain storage for one unit of work. No eviction; the
    unit of work bounds its size. The only store for non-persistent groups.
    """

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    def get(self, physical_key: str) -> CacheEntry | None:
        """
        Get an entry.

        Returns:
            The entry, or None if the key was never resolved in this unit of work
        """
        return self._entries.get(physical_key)

    def put(self, physical_key: str, entry: CacheEntry) -> None:
        self._entries[physical_key] = entry

    def forget(self, physical_key: str) -> bool:
        """Remove an entry. Returns True if one was present."""
        return self._entries.pop(physical_key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, physical_key: object) -> bool:
        return physical_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
