"""Pydantic models for tidydata-client."""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VersionState(str, enum.Enum):
    """Lifecycle state of a dataset version."""

    generating = "Generating"
    tested = "Tested"
    published = "Published"
    failed = "Failed"


class ColumnInfo(BaseModel):
    """A column of a table, with its description and derivation rule."""

    name: str = Field(..., description="Column name.")
    description: str = Field(default="", description="Human-readable description.")
    rule: str = Field(default="", description="Rule used to derive the column, if any.")


class TableInfo(BaseModel):
    """A table inside a tableset."""

    name: str = Field(..., description="Table name.")
    num_rows: int = Field(default=0, ge=0, description="Number of rows in the table.")
    columns: list[ColumnInfo] = Field(default_factory=list, description="Table columns.")

    def get_column(self, name: str) -> ColumnInfo | None:
        return next((column for column in self.columns if column.name == name), None)


class TablesetInfo(BaseModel):
    """A named grouping of tables within one version."""

    name: str = Field(..., description="Tableset name.")
    description: str = Field(default="", description="Human-readable description.")
    tables: list[TableInfo] = Field(default_factory=list, description="Included tables.")

    def get_table(self, name: str) -> TableInfo | None:
        return next((table for table in self.tables if table.name == name), None)


class FilterInfo(BaseModel):
    """A named predicate usable to subset a version's data at fetch time."""

    name: str = Field(..., description="Filter name.")
    description: str = Field(default="", description="Human-readable description.")
    query_string: str = Field(default="", description="Query the filter applies.")


class VersionRecord(BaseModel):
    """One immutable snapshot of a dataset plus its mutable state and description."""

    version: str = Field(..., min_length=1, description="Version identifier.")
    state: VersionState = Field(
        default=VersionState.generating, description="Lifecycle state."
    )
    description: str = Field(default="", description="Free-text description.")
    data_location: str = Field(..., description="Opaque reference to the underlying data.")
    preprocessed_location: str | None = Field(
        default=None, description="Location of the preprocessed artifact, if built."
    )
    snapshots: list[str] = Field(
        default_factory=list, description="Clinical data snapshots included in the version."
    )
    tablesets: list[TablesetInfo] = Field(default_factory=list)
    filters: list[FilterInfo] = Field(default_factory=list)

    def get_tableset(self, name: str) -> TablesetInfo | None:
        return next((tableset for tableset in self.tablesets if tableset.name == name), None)

    def get_filter(self, name: str) -> FilterInfo | None:
        return next((info for info in self.filters if info.name == name), None)

    def filter_names(self) -> frozenset[str]:
        return frozenset(info.name for info in self.filters)


class DatasetSnapshot(BaseModel):
    """A dataset with its versions and aliases, as seen at one instant."""

    name: str = Field(..., min_length=1, description="Unique dataset name.")
    description: str = Field(default="", description="Human-readable description.")
    versions: list[VersionRecord] = Field(default_factory=list)
    aliases: dict[str, str] = Field(
        default_factory=dict, description="Alias name to literal version identifier."
    )

    @model_validator(mode="after")
    def check_unique_versions(self) -> DatasetSnapshot:
        seen: set[str] = set()
        for record in self.versions:
            if record.version in seen:
                raise ValueError(
                    f"Version '{record.version}' appears twice in dataset '{self.name}'."
                )
            seen.add(record.version)
        return self

    def get_version(self, version: str) -> VersionRecord | None:
        return next((record for record in self.versions if record.version == version), None)


class AccessRule(BaseModel):
    """A grant evaluated by the rule-based access policy.

    All pattern fields use shell-style wildcards (``fnmatch``).
    """

    principal: str = Field(default="*", description="Pattern matched against the caller.")
    dataset: str = Field(default="*", description="Pattern matched against the dataset.")
    tablesets: list[str] = Field(
        default_factory=lambda: ["*"], description="Patterns matched against the tableset."
    )
    required_filters: list[str] = Field(
        default_factory=list,
        description="Filters that must be part of the request for the grant to apply.",
    )


class CatalogDocument(BaseModel):
    """The serialized form of a whole catalog."""

    datasets: list[DatasetSnapshot] = Field(default_factory=list)
    access_rules: list[AccessRule] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_datasets(self) -> CatalogDocument:
        names = [dataset.name for dataset in self.datasets]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate dataset names: {', '.join(duplicates)}")
        return self


class AliasedVersion(BaseModel):
    """An alias joined with the version it points at."""

    alias: str
    version: str
    state: VersionState
    description: str = ""


class FetchSpec(BaseModel):
    """Everything the fetch executor needs to read one tableset."""

    model_config = ConfigDict(frozen=True)

    dataset: str
    version: str = Field(..., description="Literal, never an alias.")
    tableset: str
    filters: frozenset[str] = Field(default_factory=frozenset)
    materialize: frozenset[str] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def check_materialize_subset(self) -> FetchSpec:
        missing = self.materialize - self.filters
        if missing:
            raise ValueError(
                "materialize must be a subset of filters; not filtered: "
                + ", ".join(sorted(missing))
            )
        return self


class ResolvedRef(BaseModel):
    """Data location and literal version produced by a successful resolution."""

    model_config = ConfigDict(frozen=True)

    data_location: str
    version: str


class ResolvedRequest(BaseModel):
    """A resolved reference together with the fetch specification composed for it."""

    model_config = ConfigDict(frozen=True)

    ref: ResolvedRef
    fetch_spec: FetchSpec


class FetchResult(BaseModel):
    """Result of a data or preprocessed-data fetch."""

    path: str = Field(..., description="Locator of the fetched artifact.")
    version: str = Field(..., description="Literal version the artifact belongs to.")


__all__ = [
    "AccessRule",
    "AliasedVersion",
    "CatalogDocument",
    "ColumnInfo",
    "DatasetSnapshot",
    "FetchResult",
    "FetchSpec",
    "FilterInfo",
    "ResolvedRef",
    "ResolvedRequest",
    "TableInfo",
    "TablesetInfo",
    "VersionRecord",
    "VersionState",
]
