"""
Two-Tier Object Cache Coordinator

Architecture:
    CacheCoordinator (Public API, one per unit of work)
        ├── GroupPolicy (global / non-persistent classification)
        ├── KeyBuilder (physical keys)
        │   └── FlushGenerationStore (per-scope flush generations)
        ├── LocalCache (per-unit-of-work memo)
        ├── BatchExecutor (chunked multi-get)
        ├── CacheObserver (counters, group_ops, debug logging)
        └── RemoteCacheClient (injected: Redis, in-memory, ...)

Primitive contract:
    - Nothing is raised to the caller; failures are False / misses
    - get() returns Lookup(value, found); a miss is Lookup(False, False)
    - Non-persistent groups never touch the remote client and always
      report found=False
    - Mutable containers are copied on the way in and out

Author: System Architect
Date: 2026-10-19
"""

import time
import warnings
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from pydantic import ValidationError

from object_cache.core.config.constants import GLOBAL_SCOPE, CacheTier, Stage
from object_cache.core.config.settings import ObjectCacheSettings, get_settings
from object_cache.core.exceptions import ConfigurationError, NonIntegerValueWarning
from object_cache.core.interfaces import MISSING, RemoteCacheClient
from object_cache.core.logging.logger import get_logger, log_stage
from object_cache.infrastructure.cache.batch_executor import BatchExecutor
from object_cache.infrastructure.cache.codec import detach, is_integer_like
from object_cache.infrastructure.cache.flush_generations import FlushGenerationStore, RotationResult
from object_cache.infrastructure.cache.group_policy import GroupPolicy, normalize_group
from object_cache.infrastructure.cache.key_builder import KeyBuilder
from object_cache.infrastructure.cache.local_cache import CacheEntry, LocalCache
from object_cache.infrastructure.cache.observer import CacheObserver
from object_cache.infrastructure.cache.redis_client import RedisRemoteClient

logger = get_logger(__name__)

# Value reported to callers for a miss
NOT_FOUND = False


class Lookup(NamedTuple):
    """Result of get(): the value (False on a miss) and whether it was found."""

    value: Any
    found: bool


@dataclass(frozen=True, slots=True)
class FlushResult:
    """Outcome of flush(): the tenant and global rotations."""

    blog: RotationResult
    global_: RotationResult

    @property
    def persisted(self) -> bool:
        return self.blog.persisted and self.global_.persisted

    def __bool__(self) -> bool:
        return self.persisted


def _public(value: Any) -> Any:
    return NOT_FOUND if value is MISSING else detach(value)


class CacheCoordinator:
    """
    Two-tier object cache for one unit of work.

    Usage:
        cache = CacheCoordinator(InMemoryRemoteClient())
        cache.add("post-1", {"title": "Hello"}, group="posts")
        value, found = cache.get("post-1", group="posts")

    Args:
        remote: Remote store client
        settings: Cache settings (defaults to the global settings)
        blog_id: Initial tenant scope (defaults to CACHE_DEFAULT_BLOG_ID)
        clock: Seconds since the epoch, used for flush generations

    Raises:
        ConfigurationError: If the settings are invalid
    """

    def __init__(
        self,
        remote: RemoteCacheClient,
        settings: ObjectCacheSettings | None = None,
        blog_id: int | str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        if settings is None:
            try:
                settings = get_settings().cache
            except ValidationError as e:
                raise ConfigurationError.from_exception(e, message="Invalid object cache settings")

        self._remote = remote
        self._default_expiration = settings.CACHE_DEFAULT_EXPIRATION
        self._groups = GroupPolicy(settings.CACHE_GLOBAL_GROUPS, settings.CACHE_NON_PERSISTENT_GROUPS)
        self._keys = KeyBuilder(
            self._groups,
            key_salt=settings.CACHE_KEY_SALT,
            global_prefix=settings.CACHE_GLOBAL_PREFIX,
            max_key_length=settings.CACHE_MAX_KEY_LENGTH,
        )
        self._generations = FlushGenerationStore(remote, self._keys.bookkeeping_key, clock)
        self._keys.bind(self._generations)
        self._local = LocalCache()
        try:
            self._batch = BatchExecutor(remote, settings.CACHE_MULTIGET_BATCH_SIZE)
        except ValueError as e:
            raise ConfigurationError.from_exception(e, batch_size=settings.CACHE_MULTIGET_BATCH_SIZE)
        self._observer = CacheObserver()
        self._blog_id = str(blog_id if blog_id is not None else settings.CACHE_DEFAULT_BLOG_ID)

        log_stage(
            logger, Stage.INITIALIZATION, "Object cache initialized", level="debug",
            blog_id=self._blog_id,
            global_groups=len(self._groups.global_groups),
            non_persistent_groups=len(self._groups.non_persistent_groups),
        )

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def blog_prefix(self) -> str:
        return self._blog_id

    @property
    def global_prefix(self) -> str:
        return self._keys.global_prefix

    @property
    def global_groups(self) -> list[str]:
        return self._groups.global_groups

    @property
    def non_persistent_groups(self) -> list[str]:
        return self._groups.non_persistent_groups

    @property
    def local(self) -> LocalCache:
        return self._local

    @property
    def generations(self) -> FlushGenerationStore:
        return self._generations

    @property
    def group_ops(self) -> dict[str, list[tuple[str, str]]]:
        return self._observer.group_ops

    def key(self, logical_key: Any, group: str | None = "") -> str:
        """Physical key for a logical key in the active scope."""
        return self._keys.resolve(logical_key, group, self._blog_id)

    def flush_prefix(self, group: str | None = "") -> str:
        return self._keys.flush_prefix(group, self._blog_id)

    def stats(self) -> dict[str, Any]:
        stats = self._observer.get_stats()
        stats["local_size"] = len(self._local)
        stats["blog_id"] = self._blog_id
        return stats

    # -------------------------------------------------------------------------
    # Group registration and scope
    # -------------------------------------------------------------------------

    def add_global_groups(self, groups: str | Iterable[str]) -> None:
        self._groups.add_global(groups)

    def add_non_persistent_groups(self, groups: str | Iterable[str]) -> None:
        self._groups.add_non_persistent(groups)

    def switch_to_blog(self, blog_id: int | str) -> None:
        """Change the tenant scope. The local memo is keyed by physical key, so it stays valid."""
        previous, self._blog_id = self._blog_id, str(blog_id)
        log_stage(logger, Stage.SCOPE, "Switched blog", level="debug", previous=previous, blog_id=self._blog_id)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, key: Any, value: Any, group: str | None = "", expire: int | None = None) -> bool:
        """Store only if the key is not already present."""
        group = normalize_group(group)
        physical_key = self.key(key, group)
        entry = self._local.get(physical_key)
        self._observer.record_operation("add", group, key)

        if self._groups.is_non_persistent(group):
            if entry is not None and not entry.is_miss:
                return False
            self._local.put(physical_key, CacheEntry(detach(value), False))
            return True

        if entry is not None and entry.found:
            return False

        stored = self._remote.add(physical_key, value, self._expiration(expire))
        if stored:
            self._local.put(physical_key, CacheEntry(detach(value), True))
        else:
            self._local.forget(physical_key)
        return stored

    def set(self, key: Any, value: Any, group: str | None = "", expire: int | None = None) -> bool:
        """Store unconditionally. The local entry is written even if the remote write fails."""
        group = normalize_group(group)
        physical_key = self.key(key, group)
        self._observer.record_operation("set", group, key)

        if self._groups.is_non_persistent(group):
            self._local.put(physical_key, CacheEntry(detach(value), False))
            return True

        stored = self._remote.set(physical_key, value, self._expiration(expire))
        self._local.put(physical_key, CacheEntry(detach(value), True))
        if not stored:
            log_stage(logger, Stage.WRITE, "Remote set failed", level="warning", group=group, cache_key=physical_key)
        return stored

    def replace(self, key: Any, value: Any, group: str | None = "", expire: int | None = None) -> bool:
        """Store only if the key is already present."""
        group = normalize_group(group)
        physical_key = self.key(key, group)
        self._observer.record_operation("replace", group, key)

        if self._groups.is_non_persistent(group):
            entry = self._local.get(physical_key)
            if entry is None or entry.is_miss:
                return False
            self._local.put(physical_key, CacheEntry(detach(value), False))
            return True

        stored = self._remote.replace(physical_key, value, self._expiration(expire))
        if stored:
            self._local.put(physical_key, CacheEntry(detach(value), True))
        else:
            self._local.forget(physical_key)
        return stored

    def delete(self, key: Any, group: str | None = "") -> bool:
        group = normalize_group(group)
        physical_key = self.key(key, group)
        self._observer.record_operation("delete", group, key)

        if self._groups.is_non_persistent(group):
            entry = self._local.get(physical_key)
            self._local.forget(physical_key)
            return entry is not None and not entry.is_miss

        deleted = self._remote.delete(physical_key)
        self._local.forget(physical_key)
        return deleted

    # -------------------------------------------------------------------------
    # Counters
    # -------------------------------------------------------------------------

    def incr(self, key: Any, offset: int = 1, group: str | None = "") -> int | bool:
        """Increment an integer value. Returns the new value, or False."""
        return self._adjust("incr", key, offset, group)

    def decr(self, key: Any, offset: int = 1, group: str | None = "") -> int | bool:
        """Decrement an integer value, flooring at zero. Returns the new value, or False."""
        return self._adjust("decr", key, offset, group)

    def _adjust(self, operation: str, key: Any, offset: int, group: str | None) -> int | bool:
        group = normalize_group(group)
        physical_key = self.key(key, group)
        self._observer.record_operation(operation, group, key)

        if not is_integer_like(offset):
            log_stage(
                logger, Stage.COUNTER, "Counter offset is not an integer", level="warning",
                operation=operation, offset_type=type(offset).__name__,
            )
            return False
        increment = (operation == "incr") == (offset >= 0)
        delta = abs(offset)

        entry = self._local.get(physical_key)

        if self._groups.is_non_persistent(group):
            if entry is None or entry.is_miss:
                return False
            if not is_integer_like(entry.value):
                self._warn_non_integer(operation, key, group, entry.value)
                return False
            value = entry.value + delta if increment else max(0, entry.value - delta)
            self._local.put(physical_key, CacheEntry(value, False))
            return value

        if entry is not None and entry.found and not is_integer_like(entry.value):
            self._warn_non_integer(operation, key, group, entry.value)
            return False

        if increment:
            value = self._remote.increment(physical_key, delta)
        else:
            value = self._remote.decrement(physical_key, delta)

        if value is None:
            stored = self._remote.get(physical_key)
            if stored is not MISSING and not is_integer_like(stored):
                self._warn_non_integer(operation, key, group, stored)
            return False

        self._local.put(physical_key, CacheEntry(value, True))
        return value

    def _warn_non_integer(self, operation: str, key: Any, group: str, value: Any) -> None:
        log_stage(
            logger, Stage.COUNTER, "Counter operation on non-integer value", level="warning",
            operation=operation, group=group, cache_key=str(key), value_type=type(value).__name__,
        )
        warnings.warn(
            f"Cannot {operation} non-integer value ({type(value).__name__}) "
            f"stored under {key!r} in group {group!r}",
            NonIntegerValueWarning,
            stacklevel=4,
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, key: Any, group: str | None = "", force: bool = False) -> Lookup:
        """
        Look a key up, local tier first.

        Args:
            key: Logical key
            group: Group name (default group when empty)
            force: Skip the local tier and re-read the remote (persistent groups only)

        Returns:
            Lookup(value, found); Lookup(False, False) on a miss
        """
        group = normalize_group(group)
        physical_key = self.key(key, group)

        if self._groups.is_non_persistent(group):
            entry = self._local.get(physical_key)
            if entry is None or entry.is_miss:
                self._local.put(physical_key, CacheEntry.miss())
                self._observer.record_operation("get", group, key, CacheTier.MISS)
                return Lookup(NOT_FOUND, False)
            self._observer.record_operation("get", group, key, CacheTier.LOCAL)
            return Lookup(detach(entry.value), False)

        if not force:
            entry = self._local.get(physical_key)
            if entry is not None:
                tier = CacheTier.MISS if entry.is_miss else CacheTier.LOCAL
                self._observer.record_operation("get", group, key, tier)
                return Lookup(_public(entry.value), entry.found)

        value = self._remote.get(physical_key)
        if value is MISSING:
            self._local.put(physical_key, CacheEntry.miss())
            self._observer.record_operation("get", group, key, CacheTier.MISS, remote_read=True)
            return Lookup(NOT_FOUND, False)

        self._local.put(physical_key, CacheEntry(value, True))
        self._observer.record_operation("get", group, key, CacheTier.REMOTE, remote_read=True)
        return Lookup(detach(value), True)

    def get_multiple(self, keys: Iterable[Any], group: str | None = "", force: bool = False) -> dict[Any, Any]:
        """
        Look up many keys in one group.

        Keys not memoized locally are fetched through the BatchExecutor.

        Returns:
            Mapping of every requested logical key to its value, False for misses
        """
        group = normalize_group(group)
        keys = list(keys)
        self._observer.record_operation("get_multiple", group, f"{len(keys)} keys")

        if self._groups.is_non_persistent(group):
            return {key: self.get(key, group).value for key in keys}

        results: dict[Any, Any] = {}
        pending: dict[str, list[Any]] = {}
        for key in keys:
            physical_key = self.key(key, group)
            entry = None if force else self._local.get(physical_key)
            if entry is not None:
                results[key] = _public(entry.value)
            else:
                pending.setdefault(physical_key, []).append(key)

        if pending:
            fetched = self._batch.multi_get(pending)
            for physical_key, value in fetched.items():
                if value is MISSING:
                    self._local.put(physical_key, CacheEntry.miss())
                else:
                    self._local.put(physical_key, CacheEntry(value, True))
                for key in pending[physical_key]:
                    results[key] = _public(value)

        return {key: results[key] for key in keys}

    def get_multi(self, groups: Mapping[str, Iterable[Any]]) -> dict[str, Any]:
        """
        Look up keys across several groups.

        Args:
            groups: Mapping of group name to logical keys

        Returns:
            Mapping of physical key to value, False for misses
        """
        results: dict[str, Any] = {}
        for group, keys in groups.items():
            for key, value in self.get_multiple(keys, group).items():
                results[self.key(key, group)] = value
        return results

    # -------------------------------------------------------------------------
    # Multi-key writes
    # -------------------------------------------------------------------------

    def add_multiple(self, items: Mapping[Any, Any], group: str | None = "", expire: int | None = None) -> dict[Any, bool]:
        return {key: self.add(key, value, group, expire) for key, value in items.items()}

    def set_multiple(self, items: Mapping[Any, Any], group: str | None = "", expire: int | None = None) -> dict[Any, bool]:
        return {key: self.set(key, value, group, expire) for key, value in items.items()}

    def delete_multiple(self, keys: Iterable[Any], group: str | None = "") -> dict[Any, bool]:
        return {key: self.delete(key, group) for key in keys}

    # -------------------------------------------------------------------------
    # Flush
    # -------------------------------------------------------------------------

    def flush(self) -> FlushResult:
        """
        Invalidate everything visible to this tenant.

        Rotates the tenant's and the global flush generation; nothing is
        deleted remotely.
        """
        blog = self._generations.rotate(self._blog_id)
        global_ = self._generations.rotate(GLOBAL_SCOPE)
        self._local.clear()

        result = FlushResult(blog=blog, global_=global_)
        log_stage(
            logger, Stage.FLUSH, "Cache flushed", level="info" if result.persisted else "warning",
            blog_id=self._blog_id,
            blog_generation=blog.generation,
            global_generation=global_.generation,
            persisted=result.persisted,
        )
        return result

    def flush_runtime(self) -> bool:
        """Forget everything memoized in this unit of work. The remote store is untouched."""
        self._local.clear()
        self._generations.forget()
        self._observer.reset_runtime()
        log_stage(logger, Stage.FLUSH, "Runtime cache flushed", level="debug")
        return True

    def close(self) -> bool:
        self._remote.close()
        return True

    def _expiration(self, expire: int | None) -> int:
        if expire is None:
            return self._default_expiration
        if not is_integer_like(expire) or expire < 0:
            return 0
        return expire


# =============================================================================
# FACTORY
# =============================================================================


def create_object_cache(
    remote: RemoteCacheClient | None = None,
    blog_id: int | str | None = None,
) -> CacheCoordinator:
    """
    Build a coordinator for a new unit of work from the global settings.

    Args:
        remote: Remote client to share across units of work; a Redis client
            is created from settings.remote when omitted
        blog_id: Initial tenant scope

    Returns:
        CacheCoordinator: Fresh coordinator with an empty local tier
    """
    try:
        settings = get_settings()
        cache_settings = settings.cache
    except ValidationError as e:
        raise ConfigurationError.from_exception(e, message="Invalid object cache settings")

    if remote is None:
        remote = RedisRemoteClient(settings.remote)
    return CacheCoordinator(remote, cache_settings, blog_id=blog_id)
