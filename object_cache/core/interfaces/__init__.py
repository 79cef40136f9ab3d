"""
Interfaces Module

Protocols for the collaborators the object cache is injected with.

Usage:
------
```python
from object_cache.core.interfaces import MISSING, RemoteCacheClient

def warm(client: RemoteCacheClient, key: str) -> bool:
    return client.get(key) is not MISSING
```
"""

from object_cache.core.interfaces.remote import MISSING, RemoteCacheClient

__all__ = [
    "MISSING",
    "RemoteCacheClient",
]
