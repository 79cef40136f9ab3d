#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
object cache. All configuration is centralized here to ensure consistency
across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Author: System Architect
Date: 2026-10-19
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from object_cache.core.config.constants import (
    DEFAULT_EXPIRATION,
    MAX_KEY_LENGTH,
    MULTIGET_BATCH_SIZE,
    TRUNCATED_KEY_HEAD_LENGTH,
    TRUNCATION_MARKER,
)


class RemoteCacheSettings(BaseSettings):
    """
    Connection settings for the remote (Redis-backed) cache client.

    STAGE-0.1: Remote store connection configuration
    """

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=1.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=1.0, description="Connection timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ObjectCacheSettings(BaseSettings):
    """
    Key construction and batching configuration.

    STAGE-0.2: Cache policy configuration
    """

    CACHE_KEY_SALT: str = Field(default="", description="Prefix prepended to every physical key")
    CACHE_GLOBAL_PREFIX: str = Field(default="", description="Scope prefix for global groups")
    CACHE_DEFAULT_BLOG_ID: int | str = Field(default=1, description="Initial tenant scope")
    CACHE_DEFAULT_EXPIRATION: int = Field(
        default=DEFAULT_EXPIRATION, description="Expiration in seconds when none given (0 = never)"
    )
    CACHE_MULTIGET_BATCH_SIZE: int = Field(
        default=MULTIGET_BATCH_SIZE, description="Keys per remote multi-get round trip"
    )
    CACHE_MAX_KEY_LENGTH: int = Field(
        default=MAX_KEY_LENGTH, description="Remote protocol key length limit"
    )
    CACHE_GLOBAL_GROUPS: list[str] = Field(default=[], description="Groups shared across tenants")
    CACHE_NON_PERSISTENT_GROUPS: list[str] = Field(
        default=[], description="Groups that never reach the remote store"
    )

    @field_validator("CACHE_MULTIGET_BATCH_SIZE")
    @classmethod
    def validate_batch_size(cls, v):
        """Validate multi-get batch size."""
        if v < 1:
            raise ValueError("CACHE_MULTIGET_BATCH_SIZE must be at least 1")
        return v

    @field_validator("CACHE_MAX_KEY_LENGTH")
    @classmethod
    def validate_max_key_length(cls, v):
        """Truncated keys must still fit within the limit."""
        minimum = TRUNCATED_KEY_HEAD_LENGTH + len(TRUNCATION_MARKER) + 32
        if v < minimum:
            raise ValueError(f"CACHE_MAX_KEY_LENGTH must be at least {minimum}")
        return v

    @field_validator("CACHE_DEFAULT_EXPIRATION")
    @classmethod
    def validate_expiration(cls, v):
        """Validate default expiration."""
        if v < 0:
            raise ValueError("CACHE_DEFAULT_EXPIRATION must not be negative")
        return v

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from object_cache.core.config.settings import get_settings

        settings = get_settings()
        batch_size = settings.cache.CACHE_MULTIGET_BATCH_SIZE
        redis_host = settings.remote.REDIS_HOST
    """

    # Remote store settings
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: float = Field(default=1.0, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: float = Field(default=1.0, description="Connection timeout in seconds")

    # Object cache settings
    CACHE_KEY_SALT: str = Field(default="", description="Prefix prepended to every physical key")
    CACHE_GLOBAL_PREFIX: str = Field(default="", description="Scope prefix for global groups")
    CACHE_DEFAULT_BLOG_ID: int | str = Field(default=1, description="Initial tenant scope")
    CACHE_DEFAULT_EXPIRATION: int = Field(default=DEFAULT_EXPIRATION, description="Default expiration")
    CACHE_MULTIGET_BATCH_SIZE: int = Field(default=MULTIGET_BATCH_SIZE, description="Multi-get chunk size")
    CACHE_MAX_KEY_LENGTH: int = Field(default=MAX_KEY_LENGTH, description="Remote key length limit")
    CACHE_GLOBAL_GROUPS: list[str] = Field(default=[], description="Groups shared across tenants")
    CACHE_NON_PERSISTENT_GROUPS: list[str] = Field(default=[], description="Local-only groups")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    # Nested configuration objects
    @property
    def remote(self) -> "RemoteCacheSettings":
        """Get remote store settings."""
        return RemoteCacheSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
        )

    @property
    def cache(self) -> "ObjectCacheSettings":
        """Get object cache settings (validated on access)."""
        return ObjectCacheSettings(
            CACHE_KEY_SALT=self.CACHE_KEY_SALT,
            CACHE_GLOBAL_PREFIX=self.CACHE_GLOBAL_PREFIX,
            CACHE_DEFAULT_BLOG_ID=self.CACHE_DEFAULT_BLOG_ID,
            CACHE_DEFAULT_EXPIRATION=self.CACHE_DEFAULT_EXPIRATION,
            CACHE_MULTIGET_BATCH_SIZE=self.CACHE_MULTIGET_BATCH_SIZE,
            CACHE_MAX_KEY_LENGTH=self.CACHE_MAX_KEY_LENGTH,
            CACHE_GLOBAL_GROUPS=self.CACHE_GLOBAL_GROUPS,
            CACHE_NON_PERSISTENT_GROUPS=self.CACHE_NON_PERSISTENT_GROUPS,
        )

    @property
    def logging(self) -> "LoggingSettings":
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
