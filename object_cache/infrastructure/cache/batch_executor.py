"""
Chunked multi-get.

A single remote multi-get is bounded by the protocol's practical packet
and key-count limits, so large requests are split into fixed-size chunks
and the partial results are unioned.
"""

from collections.abc import Iterable, Iterator
from typing import Any

from object_cache.core.config.constants import MULTIGET_BATCH_SIZE, Stage
from object_cache.core.exceptions import CacheError
from object_cache.core.interfaces import MISSING, RemoteCacheClient
from object_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)


def chunked(keys: list[str], size: int) -> Iterator[list[str]]:
    for start in range(0, len(keys), size):
        yield keys[start:start + size]


class BatchExecutor:
    """
    Splits multi-key reads into remote round trips of at most ``batch_size`` keys.

    Example:
        4000 keys with batch_size=1000 -> 4 get_multi calls, one merged dict
        with exactly 4000 entries (MISSING for keys the store did not return).
    """

    def __init__(self, remote: RemoteCacheClient, batch_size: int = MULTIGET_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._remote = remote
        self._batch_size = batch_size

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def multi_get(self, physical_keys: Iterable[str]) -> dict[str, Any]:
        """
        Fetch many keys.

        Returns:
            Mapping of every requested key to its value or MISSING
        """
        # dict.fromkeys dedupes while keeping order, so no key spans two chunks
        unique_keys = list(dict.fromkeys(physical_keys))
        results: dict[str, Any] = dict.fromkeys(unique_keys, MISSING)
        if not unique_keys:
            return results

        chunks = 0
        for chunk in chunked(unique_keys, self._batch_size):
            chunks += 1
            try:
                found = self._remote.get_multi(chunk)
            except CacheError as e:
                log_stage(
                    logger, Stage.BATCH, "Multi-get chunk failed", level="warning",
                    chunk_size=len(chunk), error=str(e),
                )
                continue

            for key in chunk:
                if key in found:
                    results[key] = found[key]

        log_stage(
            logger, Stage.BATCH, "Batched remote lookup complete", level="debug",
            keys=len(unique_keys), chunks=chunks,
        )
        return results
