"""
Flush generations (lazy mass invalidation).

Every physical key embeds the flush generation of its scope. Rotating a
scope's generation makes every key built under the old one unreachable,
which invalidates the whole scope without touching the remote store's
data; the orphaned entries age out through the store's own eviction.

Generations are microsecond timestamps so that a cold store never reuses
a generation an earlier process may have cached under.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from object_cache.core.config.constants import RotationStatus, Stage
from object_cache.core.interfaces import RemoteCacheClient
from object_cache.core.logging.logger import get_logger, log_stage
from object_cache.infrastructure.cache.codec import is_integer_like

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RotationResult:
    """Outcome of rotating one scope's generation."""

    scope: str
    previous: int | None
    generation: int
    status: RotationStatus

    @property
    def persisted(self) -> bool:
        return self.status is RotationStatus.PERSISTED


class FlushGenerationStore:
    """
    Per-scope generation counters with a unit-of-work memo.

    Args:
        remote: Remote client holding the bookkeeping keys
        key_for_scope: Maps a scope id to its bookkeeping physical key
        clock: Seconds since the epoch (injectable for tests)
    """

    def __init__(
        self,
        remote: RemoteCacheClient,
        key_for_scope: Callable[[str], str],
        clock: Callable[[], float] = time.time,
    ):
        self._remote = remote
        self._key_for_scope = key_for_scope
        self._clock = clock
        self._memo: dict[str, int] = {}

    def current_generation(self, scope: str) -> int:
        """
        Get the scope's generation, reading (and if needed initializing) it remotely once.
        """
        generation = self._memo.get(scope)
        if generation is not None:
            return generation

        stored = self._remote.get(self._key_for_scope(scope))
        if is_integer_like(stored) and stored > 0:
            self._memo[scope] = stored
            return stored

        log_stage(logger, Stage.FLUSH, "Initializing flush generation", level="debug", scope=scope)
        return self.rotate(scope).generation

    def rotate(self, scope: str) -> RotationResult:
        """
        Move the scope to a new generation.

        The memo is updated even when the remote write fails; the rotation
        is then only visible to this unit of work until a later write lands.
        """
        previous = self._memo.get(scope)
        if previous is None:
            stored = self._remote.get(self._key_for_scope(scope))
            previous = stored if is_integer_like(stored) else None

        generation = self._new_generation(previous)
        persisted = self._remote.set(self._key_for_scope(scope), generation, 0)
        self._memo[scope] = generation

        status = RotationStatus.PERSISTED if persisted else RotationStatus.LOCAL_ONLY
        if persisted:
            log_stage(
                logger, Stage.FLUSH, "Flush generation rotated", level="debug",
                scope=scope, generation=generation,
            )
        else:
            log_stage(
                logger, Stage.FLUSH, "Flush generation rotated locally only", level="warning",
                scope=scope, generation=generation,
            )
        return RotationResult(scope=scope, previous=previous, generation=generation, status=status)

    def peek(self, scope: str) -> int | None:
        """Memoized generation without any remote access."""
        return self._memo.get(scope)

    def forget(self) -> None:
        """Drop the memo so the next lookup re-reads the remote store."""
        self._memo.clear()

    def _new_generation(self, previous: int | None) -> int:
        now_us = int(self._clock() * 1_000_000)
        if previous is not None and now_us <= previous:
            return previous + 1
        return now_us
