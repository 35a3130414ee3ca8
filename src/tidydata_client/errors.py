"""Error kinds raised by the catalog core.

Each class carries a ``kind`` string naming the failure and attributes
holding the offending values, so the command layer can render a precise
message or branch on the failure without parsing text.
"""

from __future__ import annotations

from collections.abc import Iterable


class CatalogError(Exception):
    """Base exception for every catalog failure."""

    kind = "CatalogError"


class TransportError(CatalogError):
    """Raised when the catalog source cannot produce a snapshot."""

    kind = "TransportError"

    def __init__(self, message: str, address: str | None = None) -> None:
        self.address = address
        super().__init__(message)


class UnknownDatasetError(CatalogError, LookupError):
    """Raised when a dataset name is not present in the catalog."""

    kind = "UnknownDataset"

    def __init__(self, dataset: str) -> None:
        self.dataset = dataset
        super().__init__(f"Dataset '{dataset}' not found.")


class DuplicateDatasetError(CatalogError, ValueError):
    """Raised when adding a dataset whose name is already taken."""

    kind = "DuplicateDataset"

    def __init__(self, dataset: str) -> None:
        self.dataset = dataset
        super().__init__(f"Dataset '{dataset}' already exists.")


class UnknownVersionError(CatalogError, LookupError):
    """Raised when a literal version does not exist in a dataset."""

    kind = "UnknownVersion"

    def __init__(self, dataset: str, version: str) -> None:
        self.dataset = dataset
        self.version = version
        super().__init__(f"Version '{version}' not found in dataset '{dataset}'.")


class DuplicateVersionError(CatalogError, ValueError):
    """Raised when adding a version identifier that already exists."""

    kind = "DuplicateVersion"

    def __init__(self, dataset: str, version: str) -> None:
        self.dataset = dataset
        self.version = version
        super().__init__(f"Version '{version}' already exists in dataset '{dataset}'.")


class UnknownVersionOrAliasError(CatalogError, LookupError):
    """Raised when a string names neither a version nor an alias."""

    kind = "UnknownVersionOrAlias"

    def __init__(self, dataset: str, version_or_alias: str, message: str | None = None) -> None:
        self.dataset = dataset
        self.version_or_alias = version_or_alias
        super().__init__(
            message
            or f"'{version_or_alias}' is neither a version nor an alias of dataset '{dataset}'."
        )


class UnknownAliasError(CatalogError, LookupError):
    """Raised when an alias does not exist in a dataset."""

    kind = "UnknownAlias"

    def __init__(self, dataset: str, alias: str) -> None:
        self.dataset = dataset
        self.alias = alias
        super().__init__(f"Alias '{alias}' not found in dataset '{dataset}'.")


class DanglingAliasError(UnknownVersionOrAliasError):
    """Raised when an alias points at a version that has been removed."""

    kind = "DanglingAlias"

    def __init__(self, dataset: str, alias: str, version: str) -> None:
        self.alias = alias
        self.version = version
        super().__init__(
            dataset,
            alias,
            f"Alias '{alias}' of dataset '{dataset}' points at missing version '{version}'.",
        )


class DuplicateAliasError(CatalogError, ValueError):
    """Raised when an alias name is already used in a dataset."""

    kind = "DuplicateAlias"

    def __init__(self, dataset: str, alias: str) -> None:
        self.dataset = dataset
        self.alias = alias
        super().__init__(f"Alias '{alias}' already exists in dataset '{dataset}'.")


class UnknownTablesetError(CatalogError, LookupError):
    """Raised when a tableset is not part of a resolved version."""

    kind = "UnknownTableset"

    def __init__(self, dataset: str, version: str, tableset: str) -> None:
        self.dataset = dataset
        self.version = version
        self.tableset = tableset
        super().__init__(
            f"Tableset '{tableset}' not found in dataset '{dataset}' version '{version}'."
        )


class UnknownTableError(CatalogError, LookupError):
    """Raised when a table cannot be found in a version."""

    kind = "UnknownTable"

    def __init__(self, dataset: str, version: str, table: str) -> None:
        self.dataset = dataset
        self.version = version
        self.table = table
        super().__init__(f"Table '{table}' not found in dataset '{dataset}' version '{version}'.")


class UnknownColumnError(CatalogError, LookupError):
    """Raised when a column is not part of a table."""

    kind = "UnknownColumn"

    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(f"Column '{column}' not found in table '{table}'.")


class UnknownFilterError(CatalogError, LookupError):
    """Raised when a filter name is not known for the target version."""

    kind = "UnknownFilter"

    def __init__(self, filter_name: str) -> None:
        self.filter_name = filter_name
        super().__init__(f"Filter '{filter_name}' is not available for this version.")


class MaterializeNotFilteredError(CatalogError, ValueError):
    """Raised when a filter is materialized without being requested as a filter."""

    kind = "MaterializeNotFiltered"

    def __init__(self, filter_names: Iterable[str]) -> None:
        self.filter_names = sorted(filter_names)
        super().__init__(
            "Filters requested for materialization must also be requested as filters: "
            + ", ".join(self.filter_names)
        )


class InvalidStateNameError(CatalogError, ValueError):
    """Raised when text does not name a version state."""

    kind = "InvalidStateName"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(
            f"Invalid version state '{text}': expected one of "
            "Generating, Tested, Published, Failed."
        )


class InvalidTransitionError(CatalogError, ValueError):
    """Raised when a state change would move backward or leave Failed."""

    kind = "InvalidTransition"

    def __init__(self, version: str, current: str, target: str) -> None:
        self.version = version
        self.current = current
        self.target = target
        super().__init__(f"Version '{version}' cannot move from {current} to {target}.")


class VersionFailedError(CatalogError):
    """Raised when data access targets a version in the Failed state."""

    kind = "VersionFailed"

    def __init__(self, dataset: str, version: str) -> None:
        self.dataset = dataset
        self.version = version
        super().__init__(f"Version '{version}' of dataset '{dataset}' has failed.")


class PreprocessedDataUnavailableError(CatalogError, LookupError):
    """Raised when a version has no preprocessed artifact."""

    kind = "PreprocessedDataUnavailable"

    def __init__(self, dataset: str, version: str) -> None:
        self.dataset = dataset
        self.version = version
        super().__init__(
            f"No preprocessed data for dataset '{dataset}' version '{version}'."
        )


class AccessDeniedError(CatalogError):
    """Raised when the access policy refuses a fully resolved request."""

    kind = "AccessDenied"

    def __init__(self, identity: str, dataset: str, version: str, tableset: str, reason: str) -> None:
        self.identity = identity
        self.dataset = dataset
        self.version = version
        self.tableset = tableset
        self.reason = reason
        super().__init__(
            f"{identity} does not have access to {dataset} {version} {tableset}: {reason}"
        )


__all__ = [
    "AccessDeniedError",
    "CatalogError",
    "DanglingAliasError",
    "DuplicateAliasError",
    "DuplicateDatasetError",
    "DuplicateVersionError",
    "InvalidStateNameError",
    "InvalidTransitionError",
    "MaterializeNotFilteredError",
    "PreprocessedDataUnavailableError",
    "TransportError",
    "UnknownAliasError",
    "UnknownColumnError",
    "UnknownDatasetError",
    "UnknownFilterError",
    "UnknownTableError",
    "UnknownTablesetError",
    "UnknownVersionError",
    "UnknownVersionOrAliasError",
    "VersionFailedError",
]
