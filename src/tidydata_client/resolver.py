"""Catalog resolver: turns user-facing identifiers into a resolved reference.

Resolution of ``(dataset, version-or-alias, tableset, filters,
materialize, identity)`` proceeds in a fixed order:

1. fetch the dataset snapshot (unknown datasets fail here);
2. pick the literal version: an exact version identifier wins, otherwise
   the string is resolved as an alias;
3. refuse versions in the Failed state;
4. check the tableset exists in the version;
5. compose filters against the version's known filters;
6. consult the access gate with the literal version and composed filters.

The resolver only reads snapshots; it never mutates the catalog.
"""

from __future__ import annotations

from collections.abc import Sequence

from tidydata_client.access import AccessGate
from tidydata_client.aliases import resolve_alias
from tidydata_client.composer import compose
from tidydata_client.errors import (
    DanglingAliasError,
    UnknownAliasError,
    UnknownTablesetError,
    UnknownVersionOrAliasError,
    VersionFailedError,
)
from tidydata_client.logging_config import get_logger
from tidydata_client.models import (
    DatasetSnapshot,
    ResolvedRef,
    ResolvedRequest,
    VersionRecord,
    VersionState,
)
from tidydata_client.source import CatalogSource

logger = get_logger(__name__)


class CatalogResolver:
    """Resolves requests against the current snapshot of a catalog source."""

    def __init__(self, source: CatalogSource, gate: AccessGate | None = None) -> None:
        self._source = source
        self._gate = gate if gate is not None else AccessGate()

    @staticmethod
    def resolve_version(snapshot: DatasetSnapshot, version_or_alias: str) -> VersionRecord:
        """Find the version record a version string or alias designates.

        Raises:
            UnknownVersionOrAliasError: If the string names neither.
            DanglingAliasError: If it is an alias whose version is gone.
        """
        record = snapshot.get_version(version_or_alias)
        if record is not None:
            return record
        try:
            literal = resolve_alias(
                snapshot.name,
                snapshot.aliases,
                lambda version: snapshot.get_version(version) is not None,
                version_or_alias,
            )
        except UnknownAliasError:
            raise UnknownVersionOrAliasError(snapshot.name, version_or_alias) from None
        resolved = snapshot.get_version(literal)
        if resolved is None:
            raise DanglingAliasError(snapshot.name, version_or_alias, literal)
        return resolved

    def resolve_in(
        self,
        snapshot: DatasetSnapshot,
        version_or_alias: str,
        tableset: str,
        filters: Sequence[str] = (),
        materialize: Sequence[str] = (),
        identity: str = "",
    ) -> ResolvedRequest:
        """Run resolution steps 2 to 6 against an already fetched snapshot."""
        record = self.resolve_version(snapshot, version_or_alias)
        if record.state is VersionState.failed:
            raise VersionFailedError(snapshot.name, record.version)
        if record.get_tableset(tableset) is None:
            raise UnknownTablesetError(snapshot.name, record.version, tableset)

        fetch_spec = compose(
            record.filter_names(),
            filters,
            materialize,
            dataset=snapshot.name,
            version=record.version,
            tableset=tableset,
        )
        self._gate.check(
            identity, snapshot.name, record.version, tableset, fetch_spec.filters
        )
        logger.debug(
            "request_resolved",
            dataset=snapshot.name,
            requested=version_or_alias,
            version=record.version,
            tableset=tableset,
            filters=sorted(fetch_spec.filters),
            materialize=sorted(fetch_spec.materialize),
        )
        return ResolvedRequest(
            ref=ResolvedRef(data_location=record.data_location, version=record.version),
            fetch_spec=fetch_spec,
        )

    def plan(
        self,
        dataset: str,
        version_or_alias: str,
        tableset: str,
        filters: Sequence[str] = (),
        materialize: Sequence[str] = (),
        identity: str = "",
    ) -> ResolvedRequest:
        """Resolve a request and keep the composed fetch specification."""
        snapshot = self._source.fetch_dataset_snapshot(dataset)
        return self.resolve_in(snapshot, version_or_alias, tableset, filters, materialize, identity)

    def resolve(
        self,
        dataset: str,
        version_or_alias: str,
        tableset: str,
        filters: Sequence[str] = (),
        materialize: Sequence[str] = (),
        identity: str = "",
    ) -> ResolvedRef:
        """Resolve a request to its data location and literal version.

        Raises:
            UnknownDatasetError, UnknownVersionOrAliasError, DanglingAliasError,
            VersionFailedError, UnknownTablesetError, UnknownFilterError,
            MaterializeNotFilteredError, AccessDeniedError, TransportError.
        """
        return self.plan(dataset, version_or_alias, tableset, filters, materialize, identity).ref


__all__ = ["CatalogResolver"]
