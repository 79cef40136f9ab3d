"""
Group classification.

A group is global (shared across tenants, one flush generation for all),
non-persistent (never leaves the local tier), both, or neither (the
default: persistent and tenant-scoped). Registration is additive and
idempotent; there is no removal.
"""

from collections.abc import Iterable

from object_cache.core.config.constants import DEFAULT_GROUP, FLUSH_GROUP, GLOBAL_FLUSH_GROUP
from object_cache.core.logging.logger import get_logger

logger = get_logger(__name__)


def normalize_group(group: str | None) -> str:
    """Empty or missing group names map to the default group."""
    if not group:
        return DEFAULT_GROUP
    return str(group)


def _as_names(groups: str | Iterable[str]) -> list[str]:
    if isinstance(groups, str):
        return [groups]
    return [str(group) for group in groups]


class GroupPolicy:
    """
    Global and non-persistent group registries for one coordinator.

    The global flush group is registered from construction so that the
    global flush generation itself lives outside any tenant scope.
    """

    def __init__(
        self,
        global_groups: Iterable[str] = (),
        non_persistent_groups: Iterable[str] = (),
    ):
        # dicts keep insertion order for introspection
        self._global: dict[str, None] = {GLOBAL_FLUSH_GROUP: None}
        self._non_persistent: dict[str, None] = {}
        self.add_global(global_groups)
        self.add_non_persistent(non_persistent_groups)

    @property
    def global_groups(self) -> list[str]:
        return list(self._global)

    @property
    def non_persistent_groups(self) -> list[str]:
        return list(self._non_persistent)

    def add_global(self, groups: str | Iterable[str]) -> None:
        """Register one group name or several as global."""
        for name in _as_names(groups):
            self._global.setdefault(name, None)
        logger.debug("Global groups updated", count=len(self._global))

    def add_non_persistent(self, groups: str | Iterable[str]) -> None:
        """Register one group name or several as local-only."""
        for name in _as_names(groups):
            self._non_persistent.setdefault(name, None)
        logger.debug("Non-persistent groups updated", count=len(self._non_persistent))

    def is_global(self, group: str) -> bool:
        return group in self._global

    def is_non_persistent(self, group: str) -> bool:
        return group in self._non_persistent

    def is_persistent(self, group: str) -> bool:
        return group not in self._non_persistent

    @staticmethod
    def is_flush_group(group: str) -> bool:
        """Bookkeeping groups are exempt from generation prefixing."""
        return group in (FLUSH_GROUP, GLOBAL_FLUSH_GROUP)
