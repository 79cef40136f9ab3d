"""
Object Cache

Two-tier object cache with memcached semantics: a per-unit-of-work local
memo in front of a shared remote store, with group scoping and lazy
mass invalidation through flush generations.

Usage:
------
```python
from object_cache import create_object_cache

cache = create_object_cache(blog_id=2)
cache.set("options", {"theme": "dark"}, group="site")
value, found = cache.get("options", group="site")
```
"""

from object_cache.core.exceptions import (
    CacheError,
    CacheValueError,
    ConfigurationError,
    NonIntegerValueWarning,
    ObjectCacheError,
)
from object_cache.core.interfaces import MISSING, RemoteCacheClient
from object_cache.infrastructure.cache import (
    CacheCoordinator,
    FlushResult,
    InMemoryRemoteClient,
    Lookup,
    RedisRemoteClient,
    RotationResult,
    create_object_cache,
)

__version__ = "1.0.0"

__all__ = [
    "CacheCoordinator",
    "Lookup",
    "FlushResult",
    "RotationResult",
    "create_object_cache",
    "RemoteCacheClient",
    "RedisRemoteClient",
    "InMemoryRemoteClient",
    "MISSING",
    "ObjectCacheError",
    "ConfigurationError",
    "CacheError",
    "CacheValueError",
    "NonIntegerValueWarning",
]
