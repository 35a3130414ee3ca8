"""Catalog client: the operations exposed to the command layer."""

from __future__ import annotations

from collections.abc import Sequence

from tidydata_client.access import AccessGate
from tidydata_client.config import ClientConfig
from tidydata_client.errors import (
    UnknownColumnError,
    UnknownFilterError,
    UnknownTableError,
    UnknownTablesetError,
    VersionFailedError,
)
from tidydata_client.fetch import FetchExecutor, LocatorFetchExecutor
from tidydata_client.logging_config import get_logger
from tidydata_client.models import (
    AliasedVersion,
    ColumnInfo,
    DatasetSnapshot,
    FetchResult,
    FilterInfo,
    ResolvedRef,
    TableInfo,
    TablesetInfo,
    VersionRecord,
    VersionState,
)
from tidydata_client.resolver import CatalogResolver
from tidydata_client.source import CatalogSource, FileCatalogSource
from tidydata_client.states import meets_minimum, validate_transition

logger = get_logger(__name__)


class CatalogClient:
    """Lists, describes, administers and resolves catalog entries.

    The client keeps no state of its own between calls: every operation
    reads a fresh snapshot from its source, and access is evaluated on
    every resolution.
    """

    def __init__(
        self,
        source: CatalogSource,
        gate: AccessGate | None = None,
        executor: FetchExecutor | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        self._source = source
        self._config = config if config is not None else ClientConfig()
        self._gate = gate if gate is not None else AccessGate.from_rules(source.access_rules)
        self._executor: FetchExecutor = executor if executor is not None else LocatorFetchExecutor()
        self._resolver = CatalogResolver(source, self._gate)

    @classmethod
    def from_config(cls, config: ClientConfig) -> CatalogClient:
        """Build a client for the catalog at ``config.address``.

        Raises:
            TransportError: If the catalog cannot be loaded.
        """
        return cls(FileCatalogSource.load(config.address), config=config)

    @property
    def config(self) -> ClientConfig:
        return self._config

    def _snapshot(self, dataset: str) -> DatasetSnapshot:
        return self._source.fetch_dataset_snapshot(dataset)

    def _version(self, dataset: str, version_or_alias: str) -> tuple[DatasetSnapshot, VersionRecord]:
        snapshot = self._snapshot(dataset)
        return snapshot, self._resolver.resolve_version(snapshot, version_or_alias)

    def _tableset(self, dataset: str, version_or_alias: str, tableset: str) -> TablesetInfo:
        _, record = self._version(dataset, version_or_alias)
        info = record.get_tableset(tableset)
        if info is None:
            raise UnknownTablesetError(dataset, record.version, tableset)
        return info

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_datasets(self) -> list[str]:
        return self._source.list_datasets()

    def list_versions(
        self, dataset: str, min_state: VersionState = VersionState.generating
    ) -> list[VersionRecord]:
        """Return versions at or beyond ``min_state``, sorted by identifier.

        Failed versions never meet a minimum and are always excluded.
        """
        snapshot = self._snapshot(dataset)
        versions = [
            record for record in snapshot.versions if meets_minimum(record.state, min_state)
        ]
        return sorted(versions, key=lambda record: record.version)

    def list_aliased_versions(
        self, dataset: str, min_state: VersionState | None = None
    ) -> list[AliasedVersion]:
        """Return every alias with the version it points at, sorted by alias.

        Dangling aliases are skipped. When ``min_state`` is given only
        versions meeting it are returned.
        """
        snapshot = self._snapshot(dataset)
        result: list[AliasedVersion] = []
        for alias, version in sorted(snapshot.aliases.items()):
            record = snapshot.get_version(version)
            if record is None:
                logger.warning("dangling_alias_skipped", dataset=dataset, alias=alias, version=version)
                continue
            if min_state is not None and not meets_minimum(record.state, min_state):
                continue
            result.append(
                AliasedVersion(
                    alias=alias,
                    version=record.version,
                    state=record.state,
                    description=record.description,
                )
            )
        return result

    def list_tablesets(self, dataset: str, version: str) -> list[str]:
        _, record = self._version(dataset, version)
        return [tableset.name for tableset in record.tablesets]

    def list_tables(self, dataset: str, version: str, tableset: str) -> list[str]:
        return [table.name for table in self._tableset(dataset, version, tableset).tables]

    def list_filters(self, dataset: str, version: str) -> list[str]:
        _, record = self._version(dataset, version)
        return sorted(record.filter_names())

    def list_aliases(self, dataset: str, version: str) -> list[str]:
        """Return the aliases that point at ``version``, sorted."""
        snapshot, record = self._version(dataset, version)
        return sorted(
            alias for alias, target in snapshot.aliases.items() if target == record.version
        )

    def list_snapshots(self, dataset: str, version: str) -> list[str]:
        _, record = self._version(dataset, version)
        return list(record.snapshots)

    # ------------------------------------------------------------------
    # Describing
    # ------------------------------------------------------------------

    def describe_dataset(self, dataset: str) -> str:
        return self._snapshot(dataset).description

    def describe_version(self, dataset: str, version: str) -> str:
        _, record = self._version(dataset, version)
        return record.description

    def describe_tableset(self, dataset: str, version: str, tableset: str) -> str:
        return self._tableset(dataset, version, tableset).description

    def describe_filter(self, dataset: str, version: str, filter_name: str) -> FilterInfo:
        _, record = self._version(dataset, version)
        info = record.get_filter(filter_name)
        if info is None:
            raise UnknownFilterError(filter_name)
        return info

    def describe_table(self, dataset: str, version: str, tableset: str, table: str) -> TableInfo:
        _, record = self._version(dataset, version)
        tableset_info = record.get_tableset(tableset)
        if tableset_info is None:
            raise UnknownTablesetError(dataset, record.version, tableset)
        info = tableset_info.get_table(table)
        if info is None:
            raise UnknownTableError(dataset, record.version, table)
        return info

    def describe_column(self, dataset: str, version: str, table: str, column: str) -> ColumnInfo:
        """Describe a column of the first table named ``table`` in the version.

        Tablesets are searched in catalog order.
        """
        _, record = self._version(dataset, version)
        for tableset in record.tablesets:
            table_info = tableset.get_table(table)
            if table_info is None:
                continue
            column_info = table_info.get_column(column)
            if column_info is None:
                raise UnknownColumnError(table, column)
            return column_info
        raise UnknownTableError(dataset, record.version, table)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def add_version(
        self,
        dataset: str,
        version: str,
        data_location: str | None = None,
        description: str = "",
    ) -> VersionRecord:
        """Register a new version in the Generating state.

        Args:
            dataset: Target dataset.
            version: New version identifier.
            data_location: Where the data lives; defaults to
                ``s3://<data_bucket>/<version>``.
            description: Initial description.
        """
        location = data_location or self._config.default_data_location(version)
        return self._source.add_version(dataset, version, location, description)

    def update_version_state(self, dataset: str, version: str, state: VersionState) -> VersionRecord:
        """Move a literal version forward in its lifecycle.

        Raises:
            UnknownVersionError: If the version does not exist.
            InvalidTransitionError: If the move is backward, a no-op or
                leaves Failed.
        """
        snapshot = self._snapshot(dataset)
        record = snapshot.get_version(version)
        if record is not None:
            validate_transition(version, record.state, state)
        return self._source.update_version_state(dataset, version, state)

    def update_version_description(self, dataset: str, version: str, description: str) -> VersionRecord:
        return self._source.update_version_description(dataset, version, description)

    def add_version_alias(self, dataset: str, version: str, alias: str) -> None:
        self._source.add_alias(dataset, version, alias)

    def update_version_alias(self, dataset: str, alias: str, new_alias: str) -> None:
        self._source.rename_alias(dataset, alias, new_alias)

    def remove_version_alias(self, dataset: str, alias: str) -> None:
        self._source.remove_alias(dataset, alias)

    # ------------------------------------------------------------------
    # Resolution and data access
    # ------------------------------------------------------------------

    def get_version_for(self, dataset: str, version_or_alias: str) -> str:
        """Return the literal version designated by a version or alias."""
        _, record = self._version(dataset, version_or_alias)
        return record.version

    def check_access(
        self,
        identity: str,
        dataset: str,
        version: str,
        tableset: str,
        filters: Sequence[str] = (),
    ) -> None:
        """Check that ``identity`` may read the request, raising if not.

        The check runs on the literal version and the composed filter set.
        """
        self._resolver.plan(dataset, version, tableset, filters, (), identity)

    def resolve(
        self,
        dataset: str,
        version_or_alias: str,
        tableset: str,
        filters: Sequence[str] = (),
        materialize: Sequence[str] = (),
        identity: str = "",
    ) -> ResolvedRef:
        return self._resolver.resolve(
            dataset, version_or_alias, tableset, filters, materialize, identity
        )

    def get_data(
        self,
        dataset: str,
        version_or_alias: str,
        tableset: str,
        filters: Sequence[str] = (),
        materialize: Sequence[str] = (),
        identity: str = "",
    ) -> FetchResult:
        """Resolve a request and hand it to the fetch executor."""
        request = self._resolver.plan(
            dataset, version_or_alias, tableset, filters, materialize, identity
        )
        path = self._executor.fetch(request.ref, request.fetch_spec)
        logger.info("data_fetched", dataset=dataset, version=request.ref.version, path=path)
        return FetchResult(path=path, version=request.ref.version)

    def get_preprocessed_data(self, dataset: str, version_or_alias: str) -> FetchResult:
        """Return the preprocessed artifact of a version.

        Raises:
            VersionFailedError: If the version has failed.
            PreprocessedDataUnavailableError: If no artifact was built.
        """
        _, record = self._version(dataset, version_or_alias)
        if record.state is VersionState.failed:
            raise VersionFailedError(dataset, record.version)
        path = self._source.fetch_preprocessed_location(dataset, record.version)
        return FetchResult(path=path, version=record.version)

    def release_notes_url(self, dataset: str, version_or_alias: str) -> str:
        version = self.get_version_for(dataset, version_or_alias)
        return self._config.release_notes_url.format(dataset=dataset, version=version)


__all__ = ["CatalogClient"]
