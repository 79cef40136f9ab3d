"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the object cache.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for key formats and protocol limits
- Type-safe enums for tiers and rotation outcomes
- Easy to update and track changes

Author: System Architect
Date: 2026-10-19
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Cache processing stages used as the ``stage`` field of log events.

    Format: OC.{SEQUENCE}_{DESCRIPTIVE_NAME}
    """

    INITIALIZATION = "OC.0_INITIALIZATION"
    LOCAL_LOOKUP = "OC.2_LOCAL_LOOKUP"
    REMOTE_LOOKUP = "OC.3_REMOTE_LOOKUP"
    WRITE = "OC.4_WRITE"
    DELETE = "OC.5_DELETE"
    COUNTER = "OC.6_COUNTER"
    BATCH = "OC.7_BATCH"
    FLUSH = "OC.8_FLUSH"
    SCOPE = "OC.9_SCOPE_SWITCH"
    REMOTE = "OC.R_REMOTE_CLIENT"


# ============================================================================
# Cache Tiers
# ============================================================================


class CacheTier(str, Enum):
    """
    Cache tiers.

    LOCAL: Per-unit-of-work in-memory memo
    REMOTE: Shared memcached-compatible store
    MISS: Neither tier had the key
    """

    LOCAL = "local"
    REMOTE = "remote"
    MISS = "miss"


# ============================================================================
# Flush Generation Rotation
# ============================================================================


class RotationStatus(str, Enum):
    """
    Outcome of rotating a scope's flush generation.

    PERSISTED: New generation written to the remote store
    LOCAL_ONLY: Remote write failed; only this unit of work sees it
    """

    PERSISTED = "persisted"
    LOCAL_ONLY = "local_only"


# ============================================================================
# Groups and Key Format
# ============================================================================

DEFAULT_GROUP = "default"

# Bookkeeping groups. Keys in these groups are never generation-prefixed.
FLUSH_GROUP = "WP_Flush"
GLOBAL_FLUSH_GROUP = "WP_Flush_Global"
FLUSH_NUMBER_KEY = "flush_number"

# Scope identifier used for the global flush generation memo
GLOBAL_SCOPE = "__global__"

KEY_SEPARATOR = ":"
EXEMPT_FLUSH_MARKER = "_"
TRUNCATION_MARKER = ":truncated:"

# memcached refuses keys longer than 250 bytes
MAX_KEY_LENGTH = 250
TRUNCATED_KEY_HEAD_LENGTH = 200

# ============================================================================
# Remote Protocol Limits
# ============================================================================

MULTIGET_BATCH_SIZE = 1000  # Keys per remote multi-get round trip
DEFAULT_EXPIRATION = 0  # Seconds; 0 means no expiry

# ============================================================================
# Codec Tags
# ============================================================================

CODEC_TAG_JSON = b"j:"
CODEC_TAG_BYTES = b"b:"
CODEC_TAG_NONE = b"n:"
