"""
Exception Module

Structured exception hierarchy for the object cache.

Module Structure:
-----------------
- **base.py**: ObjectCacheError base class + ConfigurationError
- **cache.py**: Cache-related exceptions and the NonIntegerValueWarning category

Usage:
------
```python
from object_cache.core.exceptions import CacheValueError, NonIntegerValueWarning
```

Author: System Architect
Date: 2026-10-19
"""

from object_cache.core.exceptions.base import ConfigurationError, ObjectCacheError
from object_cache.core.exceptions.cache import (
    CacheConnectionError,
    CacheError,
    CacheValueError,
    NonIntegerValueWarning,
)

__all__ = [
    # Base
    "ObjectCacheError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheValueError",
    # Warnings
    "NonIntegerValueWarning",
]
