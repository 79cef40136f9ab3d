"""
Cache operation observer.

Tracks per-operation counters, hit/miss accounting and a per-group
operation log for diagnostics, and emits the debug log line for each
primitive. All side effects of observability live here so the
coordinator's logic stays free of logging calls.
"""

from collections import Counter, defaultdict
from typing import Any

from object_cache.core.config.constants import CacheTier, Stage
from object_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

_STAGES = {
    "get": Stage.LOCAL_LOOKUP,
    "get_multiple": Stage.BATCH,
    "add": Stage.WRITE,
    "set": Stage.WRITE,
    "replace": Stage.WRITE,
    "delete": Stage.DELETE,
    "incr": Stage.COUNTER,
    "decr": Stage.COUNTER,
}


class CacheObserver:
    """
    Records cache operations for metrics and logging.

    Metrics Tracked:
    - Operation counts by primitive
    - Local hits, remote hits, misses
    - Operation log per group

    Everything is cleared by a runtime flush.
    """

    def __init__(self, logger_instance=None):
        self._logger = logger_instance or logger
        self._operations: Counter[str] = Counter()
        self._hits_local = 0
        self._hits_remote = 0
        self._misses = 0
        self._group_ops: defaultdict[str, list[tuple[str, str]]] = defaultdict(list)

    def record_operation(
        self,
        operation: str,
        group: str,
        key: str,
        tier: CacheTier | None = None,
        remote_read: bool = False,
    ) -> None:
        """
        Record one primitive call.

        Args:
            operation: Primitive name ('get', 'set', ...)
            group: Normalized group name
            key: Logical key
            tier: For lookups, which tier answered (or MISS)
            remote_read: The lookup went to the remote store
        """
        self._operations[operation] += 1
        self._group_ops[group].append((operation, str(key)))

        if tier is CacheTier.LOCAL:
            self._hits_local += 1
        elif tier is CacheTier.REMOTE:
            self._hits_remote += 1
        elif tier is CacheTier.MISS:
            self._misses += 1

        log_stage(
            self._logger,
            Stage.REMOTE_LOOKUP if remote_read else _STAGES.get(operation, Stage.WRITE),
            f"Cache {operation}",
            level="debug",
            group=group,
            cache_key=str(key)[:64],
            tier=tier.value if tier else None,
        )

    @property
    def group_ops(self) -> dict[str, list[tuple[str, str]]]:
        return {group: list(ops) for group, ops in self._group_ops.items()}

    def reset_runtime(self) -> None:
        """Forget the per-group operation log and counters."""
        self._group_ops.clear()
        self._operations.clear()
        self._hits_local = 0
        self._hits_remote = 0
        self._misses = 0

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache performance statistics.

        Returns:
            Dict with operation counts and hit rates
        """
        lookups = self._hits_local + self._hits_remote + self._misses
        hit_rate = (self._hits_local + self._hits_remote) / lookups if lookups > 0 else 0.0

        return {
            "operations": dict(self._operations),
            "local_hits": self._hits_local,
            "remote_hits": self._hits_remote,
            "misses": self._misses,
            "total_lookups": lookups,
            "hit_rate": round(hit_rate, 3),
            "local_hit_rate": round(self._hits_local / lookups, 3) if lookups > 0 else 0.0,
        }
