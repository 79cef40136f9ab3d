"""
Unit Tests for CacheCoordinator

Tests the cache primitives against an in-memory remote store. A second
coordinator over the same store (the ``reader`` fixture) stands in for
another unit of work.
"""

import os
from unittest.mock import patch

import pytest

from object_cache.core.config.settings import ObjectCacheSettings, reload_settings
from object_cache.core.exceptions import ConfigurationError, NonIntegerValueWarning
from object_cache.infrastructure.cache.coordinator import (
    CacheCoordinator,
    Lookup,
    create_object_cache,
)
from tests.test_fixtures import CacheTestFactory

NON_INTEGERS = ["non-numeric", "5", 1.5, [1], {"a": 1}, True, None]


@pytest.mark.unit
class TestConstruction:
    def test_groups_from_settings(self, remote):
        """Test that configured groups are registered."""
        cache = CacheTestFactory.coordinator(
            remote=remote, CACHE_GLOBAL_GROUPS=["users"], CACHE_NON_PERSISTENT_GROUPS=["counts"]
        )

        assert "users" in cache.global_groups
        assert cache.non_persistent_groups == ["counts"]

    def test_default_blog_from_settings(self, remote):
        """Test that the initial blog comes from settings."""
        cache = CacheCoordinator(remote, ObjectCacheSettings(CACHE_DEFAULT_BLOG_ID=5))
        assert cache.blog_prefix == "5"

    def test_salt_and_global_prefix(self, remote):
        """Test that the salt and global prefix shape physical keys."""
        cache = CacheTestFactory.coordinator(
            remote=remote, CACHE_KEY_SALT="s-", CACHE_GLOBAL_PREFIX="net", CACHE_GLOBAL_GROUPS=["users"]
        )

        assert cache.key("k", "posts").startswith("s-1:")
        assert cache.key("k", "users").startswith("s-net:")
        assert cache.global_prefix == "net"

    def test_invalid_batch_size_is_configuration_error(self, remote):
        """Test that a bad batch size raises ConfigurationError."""
        settings = ObjectCacheSettings.model_construct(CACHE_MULTIGET_BATCH_SIZE=0)

        with pytest.raises(ConfigurationError):
            CacheCoordinator(remote, settings)

    def test_invalid_environment_is_configuration_error(self, remote):
        """Test that invalid environment settings raise ConfigurationError."""
        try:
            with patch.dict(os.environ, {"CACHE_MULTIGET_BATCH_SIZE": "0"}):
                reload_settings()
                with pytest.raises(ConfigurationError):
                    CacheCoordinator(remote)
        finally:
            reload_settings()

    def test_factory_uses_given_remote(self, remote):
        """Test that the factory wires in the given remote."""
        cache = create_object_cache(remote, blog_id=3)

        assert isinstance(cache, CacheCoordinator)
        assert cache.blog_prefix == "3"

    def test_factory_builds_redis_client_by_default(self):
        """Test that the factory builds a Redis client when none is given."""
        with patch("object_cache.infrastructure.cache.coordinator.RedisRemoteClient") as redis_cls:
            create_object_cache()

        redis_cls.assert_called_once()

    def test_close(self, failing_remote):
        """Test that close closes the remote and always succeeds."""
        cache = CacheTestFactory.coordinator(remote=failing_remote)

        assert cache.close() is True
        failing_remote.close.assert_called_once()


@pytest.mark.unit
class TestAdd:
    def test_add_and_get(self, cache):
        """Test that an added value can be read back."""
        assert cache.add("key", "val") is True
        assert cache.get("key") == Lookup("val", True)

    def test_second_add_fails(self, cache):
        """Test that add refuses an existing key."""
        cache.add("key", "val")

        assert cache.add("key", "val2") is False
        assert cache.get("key").value == "val"

    def test_add_fails_when_another_unit_stored_it(self, cache, reader):
        """Test that add sees values stored by another unit of work."""
        reader.add("key", "theirs")

        assert cache.add("key", "mine") is False
        assert cache.key("key") not in cache.local
        assert cache.get("key") == Lookup("theirs", True)

    def test_add_after_memoized_miss(self, cache):
        """Test that a memoized miss does not block add."""
        assert cache.get("key") == Lookup(False, False)
        assert cache.add("key", 1) is True

    @pytest.mark.parametrize(
        "value", [0, "", False, None, [], {}, 3.25, "text", b"\x00raw", {"nested": [1, {"a": None}]}]
    )
    def test_stored_values_distinguishable_from_miss(self, cache, reader, value):
        """Test that falsy stored values report found=True."""
        cache.add("key", value)

        assert cache.get("key") == Lookup(value, True)
        assert reader.get("key") == Lookup(value, True)

    def test_add_remote_failure(self, failing_remote):
        """Test that add fails when the remote fails."""
        cache = CacheTestFactory.coordinator(remote=failing_remote)

        assert cache.add("key", 1) is False
        assert len(cache.local) == 0

    def test_add_with_expiration(self, cache, remote):
        """Test that the expiration reaches the remote."""
        with patch.object(remote, "add", wraps=remote.add) as add:
            cache.add("key", 1, expire=30)

        assert add.call_args.args[2] == 30


@pytest.mark.unit
class TestSet:
    def test_set_and_get(self, cache):
        """Test that a set value can be read back."""
        assert cache.set("key", "val") is True
        assert cache.get("key") == Lookup("val", True)

    def test_set_overwrites(self, cache):
        """Test that set replaces an existing value."""
        cache.set("key", 1)
        cache.set("key", 2)
        assert cache.get("key").value == 2

    def test_set_visible_to_other_units(self, cache, reader):
        """Test that set is visible to another unit of work."""
        cache.set("key", {"a": 1})
        assert reader.get("key") == Lookup({"a": 1}, True)

    def test_remote_failure_still_memoizes_locally(self, failing_remote):
        """Test that a failed set is still visible locally."""
        cache = CacheTestFactory.coordinator(remote=failing_remote)

        assert cache.set("key", "val") is False
        assert cache.get("key") == Lookup("val", True)

    def test_default_expiration_from_settings(self, remote):
        """Test that the configured default expiration is used."""
        cache = CacheTestFactory.coordinator(remote=remote, CACHE_DEFAULT_EXPIRATION=120)

        with patch.object(remote, "set", wraps=remote.set) as remote_set:
            cache.set("key", 1)

        assert remote_set.call_args.args[2] == 120

    @pytest.mark.parametrize("expire", [-5, "10", 2.5])
    def test_invalid_expiration_means_no_expiry(self, cache, remote, expire):
        """Test that negative or non-integer expirations mean never."""
        with patch.object(remote, "set", wraps=remote.set) as remote_set:
            cache.set("key", 1, expire=expire)

        assert remote_set.call_args.args[2] == 0


@pytest.mark.unit
class TestReplace:
    def test_replace_missing_fails(self, cache):
        """Test that replace fails for an unknown key."""
        assert cache.replace("key", "val") is False
        assert cache.get("key") == Lookup(False, False)

    def test_replace_existing(self, cache):
        """Test that replace updates a stored value."""
        cache.add("key", "val")

        assert cache.replace("key", "new") is True
        assert cache.get("key") == Lookup("new", True)

    def test_replace_value_stored_by_another_unit(self, cache, reader):
        """Test that replace sees values stored by another unit of work."""
        reader.set("key", 1)
        assert cache.replace("key", 2) is True
        assert reader.get("key", force=True).value == 2

    def test_failed_replace_forgets_local_entry(self, cache, remote):
        """Test that a failed replace drops the local entry."""
        cache.set("key", 1)
        remote.delete(cache.key("key"))

        assert cache.replace("key", 2) is False
        assert cache.key("key") not in cache.local
        assert cache.get("key") == Lookup(False, False)


@pytest.mark.unit
class TestGet:
    def test_miss(self, cache):
        """Test that a miss returns False with found=False."""
        assert cache.get("nope") == Lookup(False, False)

    def test_miss_is_memoized(self, cache, remote):
        """Test that a repeated miss does not hit the remote."""
        cache.get("nope")
        remote.calls.clear()

        assert cache.get("nope") == Lookup(False, False)
        assert remote.calls == []

    def test_local_hit_skips_remote(self, cache, remote):
        """Test that a local hit never reaches the remote."""
        cache.set("key", 1)
        remote.calls.clear()

        cache.get("key")

        assert remote.calls == []

    def test_remote_hit_populates_local(self, cache, reader, remote):
        """Test that a remote hit is memoized."""
        reader.set("key", 1)

        assert cache.get("key") == Lookup(1, True)
        remote.calls.clear()
        cache.get("key")
        assert remote.calls == []

    def test_force_rereads_remote(self, cache, reader):
        """Test that force bypasses the local tier."""
        cache.set("key", 1)
        reader.set("key", 2)

        assert cache.get("key").value == 1
        assert cache.get("key", force=True) == Lookup(2, True)
        assert cache.get("key").value == 2

    def test_lookup_unpacks(self, cache):
        """Test that Lookup unpacks into value and found."""
        cache.set("key", "v")
        value, found = cache.get("key")
        assert (value, found) == ("v", True)

    def test_callers_get_detached_copies(self, cache):
        """Test that mutating a returned value does not touch the cache."""
        value = {"list": [1]}
        cache.set("key", value)
        value["list"].append(2)

        fetched = cache.get("key").value
        fetched["list"].append(3)

        assert cache.get("key").value == {"list": [1]}

    def test_empty_group_is_default_group(self, cache):
        """Test that an empty group is the default group."""
        cache.set("key", 1)

        assert cache.get("key", "default").value == 1
        assert cache.key("key") == cache.key("key", "default")

    def test_groups_are_separate(self, cache):
        """Test that the same key in two groups holds two values."""
        cache.set("key", 1, "g1")
        assert cache.get("key", "g2") == Lookup(False, False)

    def test_integer_keys(self, cache):
        """Test that integer keys work like strings."""
        cache.set(42, "answer")
        assert cache.get("42").value == "answer"

    def test_remote_read_failure_is_miss(self, cache, reader, remote):
        """Test that a failing remote read is a miss."""
        reader.set("key", 1)
        remote.fail_reads = True

        assert cache.get("key") == Lookup(False, False)


@pytest.mark.unit
class TestDelete:
    def test_delete_existing(self, cache, reader):
        """Test that delete removes a stored value."""
        cache.set("key", 1)

        assert cache.delete("key") is True
        assert cache.get("key") == Lookup(False, False)
        assert reader.get("key") == Lookup(False, False)

    def test_delete_missing(self, cache):
        """Test that deleting an unknown key fails."""
        assert cache.delete("key") is False

    def test_delete_forgets_memoized_miss(self, cache):
        """Test that delete clears a memoized miss."""
        cache.get("key")
        cache.delete("key")
        assert cache.key("key") not in cache.local


@pytest.mark.unit
class TestIncrDecr:
    def test_incr_scenarios(self, cache):
        """Test incr on stored and unknown keys."""
        cache.add("key", 1)
        assert cache.incr("key") == 2

        cache.add("key2", 1)
        assert cache.incr("key2", 5) == 6

        assert cache.incr("key3") is False

    def test_decr(self, cache):
        """Test that decr subtracts and floors at zero."""
        cache.set("key", 10)

        assert cache.decr("key", 3) == 7
        assert cache.decr("key", 100) == 0
        assert cache.get("key").value == 0

    def test_decr_missing(self, cache):
        """Test that decr fails for an unknown key."""
        assert cache.decr("key") is False

    def test_result_memoized_and_shared(self, cache, reader, remote):
        """Test that counter results are memoized and stored remotely."""
        cache.set("key", 1)
        cache.incr("key")
        remote.calls.clear()

        assert cache.get("key") == Lookup(2, True)
        assert remote.calls == []
        assert reader.get("key").value == 2

    def test_negative_offset(self, cache):
        """Test that a negative offset reverses the direction."""
        cache.set("key", 5)

        assert cache.incr("key", -2) == 3
        assert cache.decr("key", -4) == 7

    def test_incr_on_negative_value_matches_non_persistent(self, cache, non_persistent_group):
        """Test that persistent and non-persistent counters agree on negative values."""
        cache.set("count", -5)
        cache.set("count", -5, non_persistent_group)

        assert cache.incr("count", 1) == -4
        assert cache.incr("count", 1, non_persistent_group) == -4
        assert cache.decr("count", 1) == 0
        assert cache.decr("count", 1, non_persistent_group) == 0

    def test_non_integer_offset(self, cache):
        """Test that a non-integer offset is refused."""
        cache.set("key", 5)

        assert cache.incr("key", "2") is False
        assert cache.get("key").value == 5

    @pytest.mark.parametrize("value", NON_INTEGERS)
    def test_incr_non_integer_warns(self, cache, value):
        """Test that incr on a non-integer value warns and fails."""
        cache.add("key", value)

        with pytest.warns(NonIntegerValueWarning):
            assert cache.incr("key") is False
        assert cache.get("key").value == value

    @pytest.mark.parametrize("value", NON_INTEGERS)
    def test_decr_non_integer_warns(self, cache, value):
        """Test that decr on a non-integer value warns and fails."""
        cache.add("key", value)

        with pytest.warns(NonIntegerValueWarning):
            assert cache.decr("key") is False

    def test_non_integer_known_only_remotely(self, cache, reader):
        """Test the warning when only the remote holds the non-integer value."""
        reader.set("key", "text")

        with pytest.warns(NonIntegerValueWarning):
            assert cache.incr("key") is False

    def test_remote_failure(self, failing_remote):
        """Test that counters fail when the remote fails."""
        cache = CacheTestFactory.coordinator(remote=failing_remote)
        assert cache.incr("key") is False


@pytest.mark.unit
class TestMultiple:
    def test_get_multiple_reports_every_key(self, cache):
        """Test that get_multiple returns a value for every key."""
        cache.set("a", 1)
        cache.set("b", None)

        assert cache.get_multiple(["a", "b", "c"]) == {"a": 1, "b": None, "c": False}

    def test_get_multiple_uses_one_round_trip(self, cache, reader, remote):
        """Test that uncached keys are fetched in one call."""
        reader.set_multiple({"a": 1, "b": 2, "c": 3})
        cache.key("warm-up")
        remote.calls.clear()

        assert cache.get_multiple(["a", "b", "c", "d"]) == {"a": 1, "b": 2, "c": 3, "d": False}
        assert remote.calls == ["get_multi"]

    def test_get_multiple_chunks_4000_keys(self, cache, reader, remote):
        """Test that 4000 keys are fetched in chunks with exact values."""
        keys = [f"mget_{i}" for i in range(4000)]
        reader.set_multiple({key: i for i, key in enumerate(keys) if i % 10 == 0})
        remote.calls.clear()

        results = cache.get_multiple(keys)

        expected = {key: (i if i % 10 == 0 else False) for i, key in enumerate(keys)}
        assert results == expected
        assert list(results) == keys
        assert remote.calls.count("get_multi") == 4

    def test_get_multiple_respects_local_entries(self, cache, remote):
        """Test that memoized keys are not fetched again."""
        cache.set("a", 1)
        remote.calls.clear()

        assert cache.get_multiple(["a"]) == {"a": 1}
        assert "get_multi" not in remote.calls

    def test_get_multiple_memoizes(self, cache, reader, remote):
        """Test that fetched values and misses are memoized."""
        reader.set("a", 1)
        cache.get_multiple(["a", "b"])
        remote.calls.clear()

        assert cache.get("a") == Lookup(1, True)
        assert cache.get("b") == Lookup(False, False)
        assert remote.calls == []

    def test_get_multiple_force(self, cache, reader):
        """Test that force refetches every key."""
        cache.set("a", 1)
        reader.set("a", 2)

        assert cache.get_multiple(["a"], force=True) == {"a": 2}

    def test_get_multiple_keys_mapping_to_same_physical_key(self, cache):
        """Test that keys with the same physical key share a value."""
        cache.set("5", "five")
        assert cache.get_multiple([5, "5"]) == {5: "five", "5": "five"}

    def test_add_multiple(self, cache):
        """Test per-key results of add_multiple."""
        cache.add("a", 0)
        assert cache.add_multiple({"a": 1, "b": 2}) == {"a": False, "b": True}

    def test_set_multiple(self, cache):
        """Test per-key results of set_multiple."""
        assert cache.set_multiple({"a": 1, "b": 2}, "posts") == {"a": True, "b": True}
        assert cache.get_multiple(["a", "b"], "posts") == {"a": 1, "b": 2}

    def test_delete_multiple(self, cache):
        """Test per-key results of delete_multiple."""
        cache.set("a", 1)
        assert cache.delete_multiple(["a", "b"]) == {"a": True, "b": False}

    def test_get_multi_across_groups(self, cache):
        """Test that get_multi is keyed by physical key."""
        cache.set("a", 1, "posts")
        cache.set("b", 2, "terms")

        results = cache.get_multi({"posts": ["a", "x"], "terms": ["b"]})

        assert results == {
            cache.key("a", "posts"): 1,
            cache.key("x", "posts"): False,
            cache.key("b", "terms"): 2,
        }


@pytest.mark.unit
class TestScopes:
    def test_switch_to_blog_isolates_tenants(self, cache):
        """Test that switching blogs switches key scope."""
        cache.set("key", "blog-1")
        cache.switch_to_blog(2)

        assert cache.blog_prefix == "2"
        assert cache.get("key") == Lookup(False, False)

        cache.set("key", "blog-2")
        cache.switch_to_blog(1)
        assert cache.get("key").value == "blog-1"

    def test_global_groups_shared_across_blogs(self, cache):
        """Test that global groups ignore the active blog."""
        cache.add_global_groups(["users"])
        cache.set("admin", {"id": 1}, "users")
        cache.switch_to_blog(2)

        assert cache.get("admin", "users") == Lookup({"id": 1}, True)

    def test_global_groups_shared_across_units(self, cache, reader):
        """Test that global groups are shared between units of work."""
        cache.add_global_groups("users")
        reader.add_global_groups("users")
        reader.switch_to_blog(9)

        cache.set("admin", 1, "users")
        assert reader.get("admin", "users").value == 1

    def test_key_changes_with_blog(self, cache):
        """Test that key() reflects the active blog."""
        before = cache.key("key")
        cache.switch_to_blog(2)
        assert cache.key("key") != before


@pytest.mark.unit
class TestLargeKeys:
    def test_all_primitives_with_1000_character_key(self, cache, remote):
        """Test every primitive with a 1000-character key."""
        key = "a" * 1000

        assert cache.add(key, 1) is True
        assert cache.get(key) == Lookup(1, True)
        assert cache.replace(key, 2) is True
        assert cache.incr(key) == 3
        assert cache.decr(key) == 2
        assert cache.get_multiple([key]) == {key: 2}
        assert all(len(physical) <= 250 for physical in remote.keys())
        assert cache.delete(key) is True
        assert cache.get(key) == Lookup(False, False)
