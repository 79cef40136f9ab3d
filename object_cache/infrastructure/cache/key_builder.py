"""
Physical key construction.

Layout:
    {salt}{scope prefix}:{generation}:{group}:{logical key}

- scope prefix: the global prefix for global groups, else the tenant (blog) id
- generation: the scope's flush generation, or "_" for the bookkeeping groups
- every component is percent-escaped, so ":" and whitespace never leak
  across field boundaries and distinct inputs never collide
- keys over the protocol limit keep a readable head and end in an MD5 digest
"""

import hashlib
from urllib.parse import quote

from object_cache.core.config.constants import (
    EXEMPT_FLUSH_MARKER,
    FLUSH_GROUP,
    FLUSH_NUMBER_KEY,
    GLOBAL_FLUSH_GROUP,
    GLOBAL_SCOPE,
    KEY_SEPARATOR,
    MAX_KEY_LENGTH,
    TRUNCATED_KEY_HEAD_LENGTH,
    TRUNCATION_MARKER,
)
from object_cache.core.exceptions import ConfigurationError
from object_cache.infrastructure.cache.flush_generations import FlushGenerationStore
from object_cache.infrastructure.cache.group_policy import GroupPolicy, normalize_group

# Printable ASCII punctuation that is safe inside a key component.
# Excludes ":" (the separator) and "%" (the escape character).
_SAFE_PUNCTUATION = "!\"#$&'()*+,-./;<=>?@[\\]^_`{|}~"


def escape_component(value: str) -> str:
    return quote(str(value), safe=_SAFE_PUNCTUATION)


def build_physical_key(
    salt: str,
    scope_prefix: str,
    generation: str,
    group: str,
    logical_key: str,
    max_key_length: int = MAX_KEY_LENGTH,
) -> str:
    """Assemble and, if needed, shorten a physical key. Pure function."""
    key = escape_component(salt) + KEY_SEPARATOR.join(
        (
            escape_component(scope_prefix),
            generation,
            escape_component(group),
            escape_component(logical_key),
        )
    )
    if len(key) > max_key_length:
        digest = hashlib.md5(key.encode("ascii")).hexdigest()
        key = f"{key[:TRUNCATED_KEY_HEAD_LENGTH]}{TRUNCATION_MARKER}{digest}"
    return key


class KeyBuilder:
    """
    Resolves (logical key, group, scope) to the physical remote key.

    Resolution asks the FlushGenerationStore for the relevant scope's
    generation; that lookup is the only side effect and is memoized.
    """

    def __init__(
        self,
        policy: GroupPolicy,
        key_salt: str = "",
        global_prefix: str = "",
        max_key_length: int = MAX_KEY_LENGTH,
    ):
        self._policy = policy
        self._salt = key_salt
        self._global_prefix = global_prefix
        self._max_key_length = max_key_length
        self._generations: FlushGenerationStore | None = None

    def bind(self, generations: FlushGenerationStore) -> None:
        """Attach the generation store (built after this builder, which supplies its keys)."""
        self._generations = generations

    @property
    def global_prefix(self) -> str:
        return self._global_prefix

    def scope_prefix(self, group: str, scope: str) -> str:
        return self._global_prefix if self._policy.is_global(group) else str(scope)

    def generation_scope(self, group: str, scope: str) -> str:
        """Which generation applies: the shared global one, or the tenant's."""
        return GLOBAL_SCOPE if self._policy.is_global(group) else str(scope)

    def flush_prefix(self, group: str, scope: str) -> str:
        """Generation segment plus separator, e.g. "1697712000000000:" or "_:"."""
        group = normalize_group(group)
        if GroupPolicy.is_flush_group(group):
            return EXEMPT_FLUSH_MARKER + KEY_SEPARATOR
        if self._generations is None:
            raise ConfigurationError("KeyBuilder used before a FlushGenerationStore was bound")
        generation = self._generations.current_generation(self.generation_scope(group, scope))
        return f"{generation}{KEY_SEPARATOR}"

    def resolve(self, logical_key: str, group: str | None, scope: str) -> str:
        group = normalize_group(group)
        generation = self.flush_prefix(group, scope)[: -len(KEY_SEPARATOR)]
        return build_physical_key(
            self._salt,
            self.scope_prefix(group, scope),
            generation,
            group,
            str(logical_key),
            self._max_key_length,
        )

    def bookkeeping_key(self, scope: str) -> str:
        """Physical key under which a scope's flush generation is stored."""
        if scope == GLOBAL_SCOPE:
            prefix, group = self._global_prefix, GLOBAL_FLUSH_GROUP
        else:
            prefix, group = str(scope), FLUSH_GROUP
        return build_physical_key(
            self._salt, prefix, EXEMPT_FLUSH_MARKER, group, FLUSH_NUMBER_KEY, self._max_key_length
        )
