"""Plain-text rendering of catalog listings for the command line."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from tidydata_client.models import AliasedVersion, ColumnInfo, FilterInfo, TableInfo, VersionRecord


def format_names(title: str, names: Sequence[str]) -> str:
    """Render a heading followed by one name per line."""
    return "\n".join([title, *names])


def format_versions(versions: Sequence[VersionRecord]) -> str:
    lines = ["versions:"]
    lines.extend(f"{record.version}: {record.state.value}" for record in versions)
    return "\n".join(lines)


def format_aliased_versions(versions: Sequence[AliasedVersion]) -> str:
    """Render aliased versions as a table with one row per alias."""
    if not versions:
        return "No aliased versions found."
    frame = pd.DataFrame(
        {
            "alias": [item.alias for item in versions],
            "version": [item.version for item in versions],
            "publish_state": [item.state.value for item in versions],
            "description": [item.description for item in versions],
        }
    )
    return frame.to_string(index=False)


def format_aliases(dataset: str, version: str, aliases: Sequence[str]) -> str:
    if not aliases:
        return f"No aliases found for dataset {dataset} and version {version}"
    return "\n".join([f"Aliases for version {version}", *aliases])


def format_filter(info: FilterInfo) -> str:
    return "\n".join(["Query String:", info.query_string, "Description:", info.description])


def format_table(tableset: str, info: TableInfo) -> str:
    lines = [
        f"Table {info.name} in tableset {tableset}:",
        f"Number of rows: {info.num_rows}",
        "Columns:",
    ]
    lines.extend(column.name for column in info.columns)
    return "\n".join(lines)


def format_column(info: ColumnInfo) -> str:
    lines = [f"Column {info.name}:", f"Description: {info.description}"]
    if info.rule:
        lines.extend(["Rule:", info.rule])
    return "\n".join(lines)


def format_path_and_version(path: str, version: str) -> str:
    return f"{path}\n{version}"


__all__ = [
    "format_aliased_versions",
    "format_aliases",
    "format_column",
    "format_filter",
    "format_names",
    "format_path_and_version",
    "format_table",
    "format_versions",
]
