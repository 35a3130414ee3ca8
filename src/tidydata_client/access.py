"""Access gate evaluated on every resolution."""

from __future__ import annotations

from collections.abc import Iterable
from fnmatch import fnmatchcase
from typing import Protocol

from tidydata_client.errors import AccessDeniedError
from tidydata_client.logging_config import get_logger
from tidydata_client.models import AccessRule

logger = get_logger(__name__)


class AccessPolicy(Protocol):
    """Decides whether a fully resolved request is allowed."""

    def evaluate(
        self,
        identity: str,
        dataset: str,
        version: str,
        tableset: str,
        filters: frozenset[str],
    ) -> str | None:
        """Return ``None`` to grant, or a reason string to deny."""
        ...


class AllowAllPolicy:
    """Grants every request. Used when no rules are configured."""

    def evaluate(
        self,
        identity: str,
        dataset: str,
        version: str,
        tableset: str,
        filters: frozenset[str],
    ) -> str | None:
        return None


class RuleBasedPolicy:
    """Grants a request when any rule matches it.

    A rule matches when its principal, dataset and one of its tableset
    patterns match, and every filter it requires is part of the request.
    Requests matched by nothing are denied.
    """

    def __init__(self, rules: Iterable[AccessRule]) -> None:
        self._rules = list(rules)

    def evaluate(
        self,
        identity: str,
        dataset: str,
        version: str,
        tableset: str,
        filters: frozenset[str],
    ) -> str | None:
        missing_by_rule: list[list[str]] = []
        for rule in self._rules:
            if not fnmatchcase(identity, rule.principal):
                continue
            if not fnmatchcase(dataset, rule.dataset):
                continue
            if not any(fnmatchcase(tableset, pattern) for pattern in rule.tablesets):
                continue
            missing = sorted(set(rule.required_filters) - filters)
            if not missing:
                return None
            missing_by_rule.append(missing)

        if missing_by_rule:
            fewest = min(missing_by_rule, key=len)
            return f"tableset {tableset} requires filters: {', '.join(fewest)}"
        return "no access rule grants this request"


class AccessGate:
    """Evaluates an access policy, raising on denial."""

    def __init__(self, policy: AccessPolicy | None = None) -> None:
        self._policy: AccessPolicy = policy if policy is not None else AllowAllPolicy()

    @classmethod
    def from_rules(cls, rules: Iterable[AccessRule]) -> AccessGate:
        """Build a gate from rules; an empty rule list grants everything."""
        rule_list = list(rules)
        if not rule_list:
            return cls(AllowAllPolicy())
        return cls(RuleBasedPolicy(rule_list))

    def check(
        self,
        identity: str,
        dataset: str,
        version: str,
        tableset: str,
        filters: Iterable[str] = (),
    ) -> None:
        """Check access for a literal version and composed filter set.

        Raises:
            AccessDeniedError: If the policy denies the request.
        """
        filter_set = frozenset(filters)
        reason = self._policy.evaluate(identity, dataset, version, tableset, filter_set)
        if reason is not None:
            logger.info(
                "access_denied",
                identity=identity,
                dataset=dataset,
                version=version,
                tableset=tableset,
                reason=reason,
            )
            raise AccessDeniedError(identity, dataset, version, tableset, reason)


__all__ = ["AccessGate", "AccessPolicy", "AllowAllPolicy", "RuleBasedPolicy"]
