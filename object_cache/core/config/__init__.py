"""
Configuration Module

Centralized, type-safe configuration for the object cache.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Key format, protocol limits and enums

Usage:
------
```python
from object_cache.core.config import get_settings
from object_cache.core.config.constants import DEFAULT_GROUP, RotationStatus

settings = get_settings()
batch_size = settings.cache.CACHE_MULTIGET_BATCH_SIZE
```

Environment Variables:
---------------------
```bash
# Remote store
REDIS_HOST=localhost
REDIS_PORT=6379

# Key construction
CACHE_KEY_SALT=prod-
CACHE_GLOBAL_GROUPS='["users", "site-options"]'
CACHE_NON_PERSISTENT_GROUPS='["themes"]'

# Logging
LOG_LEVEL=INFO
LOG_FORMAT=json
```

Testing:
-------
```python
import os
from object_cache.core.config import reload_settings

os.environ["CACHE_MULTIGET_BATCH_SIZE"] = "10"
settings = reload_settings()
```

Author: System Architect
Date: 2026-10-19
"""

from object_cache.core.config.constants import (
    DEFAULT_EXPIRATION,
    DEFAULT_GROUP,
    EXEMPT_FLUSH_MARKER,
    FLUSH_GROUP,
    FLUSH_NUMBER_KEY,
    GLOBAL_FLUSH_GROUP,
    GLOBAL_SCOPE,
    KEY_SEPARATOR,
    MAX_KEY_LENGTH,
    MULTIGET_BATCH_SIZE,
    TRUNCATION_MARKER,
    CacheTier,
    RotationStatus,
    Stage,
)
from object_cache.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    "CacheTier",
    "RotationStatus",
    # Groups and keys
    "DEFAULT_GROUP",
    "FLUSH_GROUP",
    "GLOBAL_FLUSH_GROUP",
    "FLUSH_NUMBER_KEY",
    "GLOBAL_SCOPE",
    "KEY_SEPARATOR",
    "EXEMPT_FLUSH_MARKER",
    "TRUNCATION_MARKER",
    "MAX_KEY_LENGTH",
    # Remote protocol
    "MULTIGET_BATCH_SIZE",
    "DEFAULT_EXPIRATION",
]
