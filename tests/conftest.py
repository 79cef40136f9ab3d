"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures import CacheTestFactory, FakeClock  # noqa: E402

NON_PERSISTENT_GROUP = "do-not-persist-me"


# ============================================================================
# Remote Store Fixtures
# ============================================================================


@pytest.fixture
def remote():
    """Fresh in-memory remote store."""
    from object_cache.infrastructure.cache.memory_client import InMemoryRemoteClient

    return InMemoryRemoteClient()


@pytest.fixture
def failing_remote():
    """Remote client mock whose every call fails."""
    return CacheTestFactory.failing_remote()


# ============================================================================
# Coordinator Fixtures
# ============================================================================


@pytest.fixture
def clock():
    """Deterministic clock driving flush generations."""
    return FakeClock()


@pytest.fixture
def cache(remote, clock):
    """
    Coordinator over the in-memory remote, scoped to blog 1.

    One non-persistent group is registered, mirroring a typical host setup.
    """
    coordinator = CacheTestFactory.coordinator(remote=remote, blog_id=1, clock=clock)
    coordinator.add_non_persistent_groups(NON_PERSISTENT_GROUP)
    return coordinator


@pytest.fixture
def non_persistent_group():
    return NON_PERSISTENT_GROUP


@pytest.fixture
def reader(remote, clock):
    """A second unit of work sharing the same remote store."""
    return CacheTestFactory.coordinator(remote=remote, blog_id=1, clock=clock)
