"""
Cache-Related Exceptions and Warnings

Author: System Architect
Date: 2026-10-19
"""

from object_cache.core.exceptions.base import ObjectCacheError


class CacheError(ObjectCacheError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the remote store.

    Common causes:
    - Server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    """
    pass


class CacheValueError(CacheError):
    """
    Raised when a value falls outside the storable types.

    Storable: None, bool, int, float, str, bytes, list/tuple and dict
    composed of those (bytes only at the top level).
    """
    pass


class NonIntegerValueWarning(RuntimeWarning):
    """
    Issued when incr/decr targets a stored value that is not an integer.

    The operation itself returns False; the warning lets the host tell a
    type violation apart from a plain miss.
    """
    pass
