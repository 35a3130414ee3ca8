"""Alias registry for one dataset.

An alias is a mutable name bound to exactly one literal version. The
binding is a lookup by version identifier, so removing the version leaves
the alias dangling rather than removing it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping

from tidydata_client.errors import (
    DanglingAliasError,
    DuplicateAliasError,
    UnknownAliasError,
    UnknownVersionError,
)
from tidydata_client.logging_config import get_logger

logger = get_logger(__name__)


def resolve_alias(
    dataset: str,
    aliases: Mapping[str, str],
    version_exists: Callable[[str], bool],
    alias: str,
) -> str:
    """Return the literal version an alias points at.

    Args:
        dataset: Dataset name, used for error context.
        aliases: Alias name to version identifier mapping.
        version_exists: Predicate telling whether a version is still present.
        alias: Alias to resolve.

    Raises:
        UnknownAliasError: If the alias is absent.
        DanglingAliasError: If the target version no longer exists.
    """
    try:
        version = aliases[alias]
    except KeyError:
        raise UnknownAliasError(dataset, alias) from None
    if not version_exists(version):
        raise DanglingAliasError(dataset, alias, version)
    return version


class AliasRegistry:
    """Maps alias names to versions within a single dataset.

    Every operation runs under ``lock``. Pass the lock that guards the
    rest of the dataset so alias changes serialize with other mutations
    of the same dataset.
    """

    def __init__(
        self,
        dataset: str,
        version_exists: Callable[[str], bool],
        aliases: dict[str, str] | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self._dataset = dataset
        self._version_exists = version_exists
        self._aliases: dict[str, str] = aliases if aliases is not None else {}
        self._lock = lock if lock is not None else threading.RLock()

    def add(self, version: str, alias: str) -> None:
        """Bind a new alias to an existing version.

        Raises:
            DuplicateAliasError: If the alias already exists.
            UnknownVersionError: If the version does not exist.
        """
        with self._lock:
            if alias in self._aliases:
                raise DuplicateAliasError(self._dataset, alias)
            if not self._version_exists(version):
                raise UnknownVersionError(self._dataset, version)
            self._aliases[alias] = version
        logger.info("alias_added", dataset=self._dataset, alias=alias, version=version)

    def rename(self, old_alias: str, new_alias: str) -> None:
        """Rename an alias, keeping its target.

        Renaming an alias to itself succeeds without changes.

        Raises:
            UnknownAliasError: If ``old_alias`` is absent.
            DuplicateAliasError: If ``new_alias`` is used by another alias.
        """
        with self._lock:
            if old_alias not in self._aliases:
                raise UnknownAliasError(self._dataset, old_alias)
            if old_alias == new_alias:
                return
            if new_alias in self._aliases:
                raise DuplicateAliasError(self._dataset, new_alias)
            self._aliases[new_alias] = self._aliases.pop(old_alias)
        logger.info(
            "alias_renamed", dataset=self._dataset, alias=old_alias, new_alias=new_alias
        )

    def remove(self, alias: str) -> None:
        """Delete an alias. The version it pointed at is untouched.

        Raises:
            UnknownAliasError: If the alias is absent.
        """
        with self._lock:
            if alias not in self._aliases:
                raise UnknownAliasError(self._dataset, alias)
            del self._aliases[alias]
        logger.info("alias_removed", dataset=self._dataset, alias=alias)

    def resolve(self, alias: str) -> str:
        """Return the literal version for ``alias``."""
        with self._lock:
            return resolve_alias(self._dataset, self._aliases, self._version_exists, alias)

    def aliases_for(self, version: str) -> list[str]:
        """Return the sorted aliases that point at ``version``."""
        with self._lock:
            return sorted(name for name, target in self._aliases.items() if target == version)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the whole mapping."""
        with self._lock:
            return dict(self._aliases)

    def __contains__(self, alias: object) -> bool:
        with self._lock:
            return alias in self._aliases

    def __len__(self) -> int:
        with self._lock:
            return len(self._aliases)


__all__ = ["AliasRegistry", "resolve_alias"]
