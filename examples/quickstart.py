"""Quickstart examples for tidydata-client.

Demonstrates version resolution, alias management, the publish lifecycle
and filtered fetches against an in-memory catalog (no files required).

Run this file directly to verify your installation:

    python examples/quickstart.py

Each demo function is self-contained and prints its own output.
"""

from __future__ import annotations

from tidydata_client import (
    AccessGate,
    AccessRule,
    CatalogClient,
    CatalogError,
    DatasetSnapshot,
    InMemoryCatalog,
    RuleBasedPolicy,
    VersionRecord,
    VersionState,
)
from tidydata_client.models import FilterInfo, TableInfo, TablesetInfo


def _build_catalog() -> InMemoryCatalog:
    core = TablesetInfo(
        name="core",
        description="Core clinical tables.",
        tables=[TableInfo(name="patients", num_rows=1200), TableInfo(name="samples", num_rows=4800)],
    )
    filters = [
        FilterInfo(name="adults", description="Aged 18 or over.", query_string="age >= 18"),
        FilterInfo(name="consented", description="Research consent on file.", query_string="consent = 'Y'"),
    ]
    clinical = DatasetSnapshot(
        name="clinical",
        description="Clinical study data.",
        versions=[
            VersionRecord(
                version="2024-01",
                state=VersionState.published,
                data_location="s3://tidydata/clinical/2024-01",
                tablesets=[core],
                filters=filters,
            ),
            VersionRecord(
                version="2024-02",
                state=VersionState.generating,
                data_location="s3://tidydata/clinical/2024-02",
                tablesets=[core],
                filters=filters,
            ),
        ],
        aliases={"latest": "2024-01"},
    )
    return InMemoryCatalog([clinical])


# ---------------------------------------------------------------------------
# Demo 1: Resolve an alias to a literal version
# ---------------------------------------------------------------------------


def demo_resolution() -> None:
    """Show that resolution always returns the literal version."""
    print("=" * 60)
    print("DEMO 1: Resolve 'latest'")
    print("=" * 60)

    client = CatalogClient(_build_catalog())
    ref = client.resolve("clinical", "latest", "core", identity="root:staff:alice")
    print(f"  latest -> {ref.version} at {ref.data_location}")

    result = client.get_data("clinical", "latest", "core", ["adults", "consented"], ["adults"])
    print(f"  artifact: {result.path}")
    print()


# ---------------------------------------------------------------------------
# Demo 2: Publish a new version and move the alias
# ---------------------------------------------------------------------------


def demo_publish() -> None:
    """Walk a version through its lifecycle and repoint users at it."""
    print("=" * 60)
    print("DEMO 2: Publish lifecycle")
    print("=" * 60)

    client = CatalogClient(_build_catalog())
    client.update_version_state("clinical", "2024-02", VersionState.tested)
    client.update_version_state("clinical", "2024-02", VersionState.published)

    client.update_version_alias("clinical", "latest", "previous")
    client.add_version_alias("clinical", "2024-02", "latest")

    for item in client.list_aliased_versions("clinical"):
        print(f"  {item.alias:<10} {item.version:<8} {item.state.value}")

    try:
        client.update_version_state("clinical", "2024-02", VersionState.tested)
    except CatalogError as exc:
        print(f"  [{exc.kind}] {exc}")
    print()


# ---------------------------------------------------------------------------
# Demo 3: Access rules that require filters
# ---------------------------------------------------------------------------


def demo_access() -> None:
    """Partners may only read consented data."""
    print("=" * 60)
    print("DEMO 3: Access rules")
    print("=" * 60)

    rules = [
        AccessRule(principal="root:staff:*"),
        AccessRule(principal="root:partner:*", required_filters=["consented"]),
    ]
    client = CatalogClient(_build_catalog(), gate=AccessGate(RuleBasedPolicy(rules)))

    for filters in ([], ["consented"]):
        try:
            client.check_access("root:partner:bob", "clinical", "latest", "core", filters)
            print(f"  filters={filters}: granted")
        except CatalogError as exc:
            print(f"  filters={filters}: {exc}")
    print()


if __name__ == "__main__":
    demo_resolution()
    demo_publish()
    demo_access()
