"""
Core Layer

Configuration, exceptions, logging and collaborator protocols shared by
the cache infrastructure.

Usage:
------
```python
from object_cache.core import get_settings, get_logger, MISSING
```
"""

from object_cache.core.config import get_settings, reload_settings
from object_cache.core.exceptions import (
    CacheConnectionError,
    CacheError,
    CacheValueError,
    ConfigurationError,
    NonIntegerValueWarning,
    ObjectCacheError,
)
from object_cache.core.interfaces import MISSING, RemoteCacheClient
from object_cache.core.logging import get_logger, log_stage, setup_logging

__all__ = [
    # Config
    "get_settings",
    "reload_settings",
    # Exceptions
    "ObjectCacheError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheValueError",
    "NonIntegerValueWarning",
    # Interfaces
    "MISSING",
    "RemoteCacheClient",
    # Logging
    "get_logger",
    "log_stage",
    "setup_logging",
]
