"""
Cache Module

Provides the two-tier object cache (per-unit-of-work local memo + remote store).
"""

from .coordinator import (
    CacheCoordinator,
    FlushResult,
    Lookup,
    create_object_cache,
)
from .flush_generations import RotationResult
from .memory_client import InMemoryRemoteClient
from .redis_client import RedisRemoteClient

__all__ = [
    "CacheCoordinator",
    "Lookup",
    "FlushResult",
    "RotationResult",
    "create_object_cache",
    "InMemoryRemoteClient",
    "RedisRemoteClient",
]
