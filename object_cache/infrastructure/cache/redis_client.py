"""
Redis Remote Client with Connection Pooling

Implements the remote cache protocol (memcached semantics) on Redis.

Architecture:
    RedisRemoteClient (Public API)
        ├── ConnectionPool (connection reuse, built from RemoteCacheSettings)
        ├── Lua scripts (atomic incr/decr that refuse absent keys)
        └── health_check (ping latency and pool utilization)

Command mapping:
    add      -> SET NX
    replace  -> SET XX
    get_multi-> MGET
    incr     -> script: INCRBY only if the key exists and holds an integer
    decr     -> script: DECRBY, floored at zero with KEEPTTL
    flush_all-> FLUSHDB

Error Handling Strategy:
- Catch RedisError (and codec errors) per call
- Log with stage and key
- Translate to the no-throw contract: MISSING / None / False

Author: System Architect
Date: 2026-10-19
"""

import time
from collections.abc import Iterable
from typing import Any

import redis
from redis.connection import ConnectionPool
from redis.exceptions import RedisError

from object_cache.core.config.constants import Stage
from object_cache.core.config.settings import RemoteCacheSettings, get_settings
from object_cache.core.exceptions import CacheConnectionError, CacheValueError
from object_cache.core.interfaces import MISSING
from object_cache.core.logging.logger import get_logger, log_stage
from object_cache.infrastructure.cache import codec

logger = get_logger(__name__)

# KEYS[1] = key, ARGV[1] = delta. Returns nil for absent or non-integer values.
INCREMENT_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current or not string.match(current, '^%-?%d+$') then
    return false
end
return redis.call('INCRBY', KEYS[1], ARGV[1])
"""

DECREMENT_SCRIPT = """
local current = redis.call('GET', KEYS[1])
if not current or not string.match(current, '^%-?%d+$') then
    return false
end
local value = redis.call('DECRBY', KEYS[1], ARGV[1])
if value < 0 then
    redis.call('SET', KEYS[1], '0', 'KEEPTTL')
    return 0
end
return value
"""


def build_connection_pool(settings: RemoteCacheSettings) -> ConnectionPool:
    """
    Create the connection pool.

    decode_responses stays off: payloads are codec bytes, not text.
    """
    return ConnectionPool(
        host=settings.REDIS_HOST,
        port=settings.REDIS_PORT,
        db=settings.REDIS_DB,
        password=settings.REDIS_PASSWORD,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        socket_connect_timeout=settings.REDIS_SOCKET_CONNECT_TIMEOUT,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
        retry_on_timeout=True,
        decode_responses=False,
    )


class RedisRemoteClient:
    """
    Synchronous Redis-backed remote cache client.

    Usage:
        client = RedisRemoteClient()
        client.set("key", {"a": 1}, 3600)
        value = client.get("key")
        client.close()

    Args:
        settings: Connection settings (defaults to the global settings)
        client: Pre-built redis.Redis (e.g. a shared one, or a mock in tests)
    """

    def __init__(
        self,
        settings: RemoteCacheSettings | None = None,
        client: redis.Redis | None = None,
    ):
        self._settings = settings or get_settings().remote
        self._pool: ConnectionPool | None = None

        if client is None:
            self._pool = build_connection_pool(self._settings)
            client = redis.Redis(connection_pool=self._pool)
        self._redis = client

        # register_script is lazy; the first call loads the script with EVALSHA fallback
        self._increment = self._redis.register_script(INCREMENT_SCRIPT)
        self._decrement = self._redis.register_script(DECREMENT_SCRIPT)

        log_stage(
            logger, Stage.REMOTE, "Redis remote client initialized",
            host=self._settings.REDIS_HOST,
            port=self._settings.REDIS_PORT,
            max_connections=self._settings.REDIS_MAX_CONNECTIONS,
        )

    # -------------------------------------------------------------------------
    # Connection
    # -------------------------------------------------------------------------

    def ping(self) -> bool:
        try:
            return bool(self._redis.ping())
        except RedisError:
            return False

    def connect(self) -> None:
        """
        Verify the server is reachable.

        Raises:
            CacheConnectionError: If the server does not answer
        """
        try:
            self._redis.ping()
        except RedisError as e:
            log_stage(logger, Stage.REMOTE, "Failed to connect to Redis", level="error", error=str(e))
            raise CacheConnectionError.from_exception(
                e,
                message=f"Failed to connect to Redis: {e}",
                host=self._settings.REDIS_HOST,
                port=self._settings.REDIS_PORT,
            )

    def close(self) -> None:
        try:
            self._redis.close()
            if self._pool is not None:
                self._pool.disconnect()
        except RedisError as e:
            log_stage(logger, Stage.REMOTE, "Redis close failed", level="warning", error=str(e))
        log_stage(logger, Stage.REMOTE, "Redis remote client closed")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Any:
        try:
            payload = self._redis.get(key)
        except RedisError as e:
            self._log_failure("GET", key, e)
            return MISSING
        if payload is None:
            return MISSING
        return self._decode(key, payload)

    def get_multi(self, keys: Iterable[str]) -> dict[str, Any]:
        keys = list(keys)
        if not keys:
            return {}
        try:
            payloads = self._redis.mget(keys)
        except RedisError as e:
            self._log_failure("MGET", keys[0], e, batch=len(keys))
            return {}

        found = {}
        for key, payload in zip(keys, payloads):
            if payload is None:
                continue
            value = self._decode(key, payload)
            if value is not MISSING:
                found[key] = value
        return found

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, key: str, value: Any, expiration: int = 0) -> bool:
        return self._set(key, value, expiration, nx=True)

    def set(self, key: str, value: Any, expiration: int = 0) -> bool:
        return self._set(key, value, expiration)

    def replace(self, key: str, value: Any, expiration: int = 0) -> bool:
        return self._set(key, value, expiration, xx=True)

    def delete(self, key: str) -> bool:
        try:
            return self._redis.delete(key) > 0
        except RedisError as e:
            self._log_failure("DEL", key, e)
            return False

    def increment(self, key: str, delta: int = 1) -> int | None:
        return self._run_counter(self._increment, "INCR", key, delta)

    def decrement(self, key: str, delta: int = 1) -> int | None:
        return self._run_counter(self._decrement, "DECR", key, delta)

    def flush_all(self) -> bool:
        try:
            return bool(self._redis.flushdb())
        except RedisError as e:
            self._log_failure("FLUSHDB", "*", e)
            return False

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    def health_check(self) -> dict[str, Any]:
        """
        Check connectivity and pool utilization.

        Returns:
            Dict with status, ping latency and pool metrics
        """
        health = {
            "status": "healthy",
            "host": self._settings.REDIS_HOST,
            "port": self._settings.REDIS_PORT,
            "pool_size": 0,
            "pool_in_use": 0,
            "pool_utilization_pct": 0.0,
            "pool_warning": False,
            "ping_latency_ms": None,
        }

        try:
            start = time.perf_counter()
            self._redis.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)
            return health

        if self._pool is not None:
            in_use = len(getattr(self._pool, "_in_use_connections", ()))
            health["pool_size"] = self._pool.max_connections
            health["pool_in_use"] = in_use
            utilization = 100.0 * in_use / self._pool.max_connections
            health["pool_utilization_pct"] = round(utilization, 1)
            if utilization > 80:
                health["pool_warning"] = True
                logger.warning(
                    "Redis pool utilization high",
                    pool_utilization=utilization,
                    max_connections=self._pool.max_connections,
                )

        return health

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _set(self, key: str, value: Any, expiration: int, nx: bool = False, xx: bool = False) -> bool:
        try:
            payload = codec.encode(value)
        except CacheValueError as e:
            log_stage(logger, Stage.REMOTE, "Value rejected by codec", level="warning", key=key, error=e.message)
            return False
        try:
            result = self._redis.set(
                key, payload, ex=expiration if expiration and expiration > 0 else None, nx=nx, xx=xx
            )
        except RedisError as e:
            self._log_failure("SET", key, e)
            return False
        return result is not None and result is not False

    def _run_counter(self, script, command: str, key: str, delta: int) -> int | None:
        try:
            result = script(keys=[key], args=[int(delta)])
        except RedisError as e:
            self._log_failure(command, key, e)
            return None
        return None if result is None else int(result)

    def _decode(self, key: str, payload: bytes) -> Any:
        try:
            return codec.decode(payload)
        except CacheValueError as e:
            log_stage(logger, Stage.REMOTE, "Undecodable payload", level="warning", key=key, error=e.message)
            return MISSING

    def _log_failure(self, command: str, key: str, error: Exception, **kwargs) -> None:
        log_stage(
            logger, Stage.REMOTE, f"Redis {command} failed", level="error",
            key=key, error=str(error), **kwargs,
        )
