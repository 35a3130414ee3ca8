"""Tests for the access gate and policies."""

from __future__ import annotations

import pytest

from tidydata_client.access import AccessGate, AllowAllPolicy, RuleBasedPolicy
from tidydata_client.errors import AccessDeniedError
from tidydata_client.models import AccessRule


class _CountingPolicy:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str, str, frozenset[str]]] = []

    def evaluate(
        self,
        identity: str,
        dataset: str,
        version: str,
        tableset: str,
        filters: frozenset[str],
    ) -> str | None:
        self.calls.append((identity, dataset, version, tableset, filters))
        return None


@pytest.fixture()
def rules() -> list[AccessRule]:
    return [
        AccessRule(principal="root:staff:*", dataset="clinical"),
        AccessRule(
            principal="root:partner:*",
            dataset="clinical",
            tablesets=["core"],
            required_filters=["consented"],
        ),
    ]


class TestRuleBasedPolicy:
    def test_staff_granted_everything(self, rules: list[AccessRule]) -> None:
        gate = AccessGate(RuleBasedPolicy(rules))
        gate.check("root:staff:alice", "clinical", "v1", "core")
        gate.check("root:staff:alice", "clinical", "v1", "raw")

    def test_partner_needs_required_filter(self, rules: list[AccessRule]) -> None:
        gate = AccessGate(RuleBasedPolicy(rules))
        with pytest.raises(AccessDeniedError) as excinfo:
            gate.check("root:partner:bob", "clinical", "v1", "core", ["adults"])
        assert "consented" in excinfo.value.reason
        gate.check("root:partner:bob", "clinical", "v1", "core", ["adults", "consented"])

    def test_partner_denied_other_tablesets(self, rules: list[AccessRule]) -> None:
        gate = AccessGate(RuleBasedPolicy(rules))
        with pytest.raises(AccessDeniedError) as excinfo:
            gate.check("root:partner:bob", "clinical", "v1", "raw", ["consented"])
        assert excinfo.value.reason == "no access rule grants this request"

    def test_unknown_principal_denied(self, rules: list[AccessRule]) -> None:
        gate = AccessGate(RuleBasedPolicy(rules))
        with pytest.raises(AccessDeniedError) as excinfo:
            gate.check("root:guest", "clinical", "v1", "core")
        assert excinfo.value.identity == "root:guest"
        assert excinfo.value.kind == "AccessDenied"


class TestAccessGate:
    def test_default_gate_allows(self) -> None:
        AccessGate().check("anyone", "d", "v", "t")

    def test_from_empty_rules_allows(self) -> None:
        AccessGate.from_rules([]).check("anyone", "d", "v", "t")

    def test_from_rules_denies_unmatched(self, rules: list[AccessRule]) -> None:
        with pytest.raises(AccessDeniedError):
            AccessGate.from_rules(rules).check("anyone", "clinical", "v1", "core")

    def test_policy_evaluated_every_call(self) -> None:
        policy = _CountingPolicy()
        gate = AccessGate(policy)
        gate.check("alice", "clinical", "v1", "core", ["b", "a", "a"])
        gate.check("alice", "clinical", "v1", "core", ["b", "a", "a"])
        assert len(policy.calls) == 2
        assert policy.calls[0][4] == frozenset({"a", "b"})

    def test_allow_all_policy(self) -> None:
        assert AllowAllPolicy().evaluate("x", "d", "v", "t", frozenset()) is None
