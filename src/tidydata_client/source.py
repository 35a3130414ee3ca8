"""Catalog sources: where dataset snapshots come from and mutations go to.

``InMemoryCatalog`` keeps one lock per dataset. Snapshot reads and every
mutation of a dataset run inside that lock, so readers never see a
half-applied change.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol, TypeVar

from pydantic import ValidationError

from tidydata_client.aliases import AliasRegistry
from tidydata_client.errors import (
    DuplicateDatasetError,
    DuplicateVersionError,
    PreprocessedDataUnavailableError,
    TransportError,
    UnknownDatasetError,
    UnknownVersionError,
)
from tidydata_client.logging_config import get_logger
from tidydata_client.models import (
    AccessRule,
    CatalogDocument,
    DatasetSnapshot,
    VersionRecord,
    VersionState,
)
from tidydata_client.states import validate_transition

logger = get_logger(__name__)

T = TypeVar("T")


class CatalogSource(Protocol):
    """Backend the client reads snapshots from and sends mutations to."""

    @property
    def access_rules(self) -> list[AccessRule]: ...

    def list_datasets(self) -> list[str]: ...

    def fetch_dataset_snapshot(self, dataset: str) -> DatasetSnapshot: ...

    def fetch_preprocessed_location(self, dataset: str, version: str) -> str: ...

    def add_version(
        self, dataset: str, version: str, data_location: str, description: str = ""
    ) -> VersionRecord: ...

    def update_version_state(
        self, dataset: str, version: str, state: VersionState
    ) -> VersionRecord: ...

    def update_version_description(
        self, dataset: str, version: str, description: str
    ) -> VersionRecord: ...

    def add_alias(self, dataset: str, version: str, alias: str) -> None: ...

    def rename_alias(self, dataset: str, alias: str, new_alias: str) -> None: ...

    def remove_alias(self, dataset: str, alias: str) -> None: ...


class _DatasetEntry:
    """A stored dataset, its lock and its alias registry."""

    def __init__(self, record: DatasetSnapshot) -> None:
        self.record = record
        self.lock = threading.RLock()
        self.aliases = AliasRegistry(
            record.name,
            version_exists=lambda version: record.get_version(version) is not None,
            aliases=record.aliases,
            lock=self.lock,
        )

    def version(self, version: str) -> VersionRecord:
        record = self.record.get_version(version)
        if record is None:
            raise UnknownVersionError(self.record.name, version)
        return record


class InMemoryCatalog:
    """Catalog state held in process memory."""

    def __init__(
        self,
        datasets: Iterable[DatasetSnapshot] = (),
        access_rules: Iterable[AccessRule] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _DatasetEntry] = {}
        self._access_rules = list(access_rules)
        for dataset in datasets:
            if dataset.name in self._entries:
                raise DuplicateDatasetError(dataset.name)
            self._entries[dataset.name] = _DatasetEntry(dataset.model_copy(deep=True))

    @classmethod
    def from_document(cls, document: CatalogDocument) -> InMemoryCatalog:
        return cls(document.datasets, document.access_rules)

    @property
    def access_rules(self) -> list[AccessRule]:
        return [rule.model_copy() for rule in self._access_rules]

    def _entry(self, dataset: str) -> _DatasetEntry:
        with self._lock:
            try:
                return self._entries[dataset]
            except KeyError:
                raise UnknownDatasetError(dataset) from None

    def list_datasets(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)

    def fetch_dataset_snapshot(self, dataset: str) -> DatasetSnapshot:
        """Return a deep copy of a dataset taken under its lock.

        Raises:
            UnknownDatasetError: If the dataset does not exist.
        """
        entry = self._entry(dataset)
        with entry.lock:
            return entry.record.model_copy(deep=True)

    def fetch_preprocessed_location(self, dataset: str, version: str) -> str:
        entry = self._entry(dataset)
        with entry.lock:
            location = entry.version(version).preprocessed_location
        if location is None:
            raise PreprocessedDataUnavailableError(dataset, version)
        return location

    def add_dataset(self, dataset: str, description: str = "") -> None:
        with self._lock:
            if dataset in self._entries:
                raise DuplicateDatasetError(dataset)
            self._entries[dataset] = _DatasetEntry(
                DatasetSnapshot(name=dataset, description=description)
            )
        logger.info("dataset_added", dataset=dataset)

    def add_version(
        self, dataset: str, version: str, data_location: str, description: str = ""
    ) -> VersionRecord:
        """Add a version in the Generating state.

        Raises:
            UnknownDatasetError: If the dataset does not exist.
            DuplicateVersionError: If the version identifier is taken.
        """
        entry = self._entry(dataset)
        with entry.lock:
            if entry.record.get_version(version) is not None:
                raise DuplicateVersionError(dataset, version)
            record = VersionRecord(
                version=version,
                state=VersionState.generating,
                description=description,
                data_location=data_location,
            )
            entry.record.versions.append(record)
            created = record.model_copy(deep=True)
        logger.info("version_added", dataset=dataset, version=version, location=data_location)
        return created

    def update_version_state(
        self, dataset: str, version: str, state: VersionState
    ) -> VersionRecord:
        """Move a version to ``state`` if the lifecycle allows it.

        Raises:
            InvalidTransitionError: If the move is not strictly forward or
                leaves Failed; the stored state is unchanged.
        """
        entry = self._entry(dataset)
        with entry.lock:
            record = entry.version(version)
            previous = record.state
            validate_transition(version, previous, state)
            record.state = state
            updated = record.model_copy(deep=True)
        logger.info(
            "version_state_updated",
            dataset=dataset,
            version=version,
            previous=previous.value,
            state=state.value,
        )
        return updated

    def update_version_description(
        self, dataset: str, version: str, description: str
    ) -> VersionRecord:
        entry = self._entry(dataset)
        with entry.lock:
            record = entry.version(version)
            record.description = description
            updated = record.model_copy(deep=True)
        logger.info("version_description_updated", dataset=dataset, version=version)
        return updated

    def remove_version(self, dataset: str, version: str) -> None:
        """Delete a version. Aliases that pointed at it are left dangling."""
        entry = self._entry(dataset)
        with entry.lock:
            record = entry.version(version)
            entry.record.versions.remove(record)
        logger.info("version_removed", dataset=dataset, version=version)

    def add_alias(self, dataset: str, version: str, alias: str) -> None:
        self._entry(dataset).aliases.add(version, alias)

    def rename_alias(self, dataset: str, alias: str, new_alias: str) -> None:
        self._entry(dataset).aliases.rename(alias, new_alias)

    def remove_alias(self, dataset: str, alias: str) -> None:
        self._entry(dataset).aliases.remove(alias)

    def to_document(self) -> CatalogDocument:
        datasets = [self.fetch_dataset_snapshot(name) for name in self.list_datasets()]
        return CatalogDocument(datasets=datasets, access_rules=self.access_rules)


class FileCatalogSource(InMemoryCatalog):
    """An in-memory catalog loaded from, and persisted to, a JSON document.

    Mutations are serialized across the whole catalog: each one is applied,
    written atomically and only then released. When the write fails the
    in-memory change is rolled back before ``TransportError`` propagates.
    """

    def __init__(
        self,
        path: Path,
        datasets: Iterable[DatasetSnapshot] = (),
        access_rules: Iterable[AccessRule] = (),
    ) -> None:
        super().__init__(datasets, access_rules)
        self.path = path
        self._write_lock = threading.Lock()

    @classmethod
    def load(cls, path: str | Path) -> FileCatalogSource:
        """Read a catalog document.

        Raises:
            TransportError: If the file cannot be read or is not a valid
                catalog document.
        """
        file_path = Path(path)
        try:
            raw_text = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TransportError(f"Cannot read catalog {file_path}: {exc}", str(file_path)) from exc
        try:
            document = CatalogDocument.model_validate_json(raw_text)
        except ValidationError as exc:
            raise TransportError(f"Invalid catalog {file_path}: {exc}", str(file_path)) from exc
        logger.debug("catalog_loaded", path=str(file_path), datasets=len(document.datasets))
        return cls(file_path, document.datasets, document.access_rules)

    def _write(self, document: CatalogDocument) -> None:
        payload = document.model_dump(mode="json")
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _commit(self, mutate: Callable[[], T]) -> T:
        with self._write_lock:
            before = self.to_document()
            result = mutate()
            try:
                self._write(self.to_document())
            except OSError as exc:
                self._restore(before)
                logger.error("catalog_write_failed", path=str(self.path), error=str(exc))
                raise TransportError(
                    f"Cannot write catalog {self.path}: {exc}", str(self.path)
                ) from exc
            return result

    def _restore(self, document: CatalogDocument) -> None:
        entries = {dataset.name: _DatasetEntry(dataset) for dataset in document.datasets}
        with self._lock:
            self._entries = entries

    def add_dataset(self, dataset: str, description: str = "") -> None:
        self._commit(lambda: super(FileCatalogSource, self).add_dataset(dataset, description))

    def add_version(
        self, dataset: str, version: str, data_location: str, description: str = ""
    ) -> VersionRecord:
        return self._commit(
            lambda: super(FileCatalogSource, self).add_version(
                dataset, version, data_location, description
            )
        )

    def update_version_state(
        self, dataset: str, version: str, state: VersionState
    ) -> VersionRecord:
        return self._commit(
            lambda: super(FileCatalogSource, self).update_version_state(dataset, version, state)
        )

    def update_version_description(
        self, dataset: str, version: str, description: str
    ) -> VersionRecord:
        return self._commit(
            lambda: super(FileCatalogSource, self).update_version_description(
                dataset, version, description
            )
        )

    def remove_version(self, dataset: str, version: str) -> None:
        self._commit(lambda: super(FileCatalogSource, self).remove_version(dataset, version))

    def add_alias(self, dataset: str, version: str, alias: str) -> None:
        self._commit(lambda: super(FileCatalogSource, self).add_alias(dataset, version, alias))

    def rename_alias(self, dataset: str, alias: str, new_alias: str) -> None:
        self._commit(
            lambda: super(FileCatalogSource, self).rename_alias(dataset, alias, new_alias)
        )

    def remove_alias(self, dataset: str, alias: str) -> None:
        self._commit(lambda: super(FileCatalogSource, self).remove_alias(dataset, alias))


__all__ = ["CatalogSource", "FileCatalogSource", "InMemoryCatalog"]
