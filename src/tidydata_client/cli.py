"""CLI entry point for tidydata-client."""

from __future__ import annotations

import functools
import getpass
import shutil
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from tidydata_client import __version__
from tidydata_client.client import CatalogClient
from tidydata_client.composer import split_names
from tidydata_client.config import ClientConfig
from tidydata_client.errors import CatalogError
from tidydata_client.formatting import (
    format_aliased_versions,
    format_aliases,
    format_column,
    format_filter,
    format_names,
    format_path_and_version,
    format_table,
    format_versions,
)
from tidydata_client.logging_config import configure_logging
from tidydata_client.states import parse_state


def _reports_catalog_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Print catalog errors to stderr and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except CatalogError as exc:
            click.echo(str(exc), err=True)
            sys.exit(1)

    return wrapper


def _client(ctx: click.Context) -> CatalogClient:
    return CatalogClient.from_config(ctx.find_object(ClientConfig))


def _identity(ctx: click.Context, explicit: str | None) -> str:
    config = ctx.find_object(ClientConfig)
    return explicit or config.identity or getpass.getuser()


def _copy_output(path: str, output: str) -> None:
    source = Path(path)
    if not source.is_file():
        click.echo(f"Cannot write {output}: {path} is not a local file.", err=True)
        sys.exit(1)
    try:
        shutil.copyfile(source, output)
    except OSError as exc:
        click.echo(f"Error writing {output}: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--address",
    default=None,
    help="Catalog endpoint to communicate with. Defaults to $TIDYDATA_ADDRESS.",
)
@click.option("--log-level", default=None, help="Minimum log level written to stderr.")
@click.pass_context
def main(ctx: click.Context, address: str | None, log_level: str | None) -> None:
    """Query datasets from a tidydata catalog."""
    overrides = {
        key: value
        for key, value in {"address": address, "log_level": log_level}.items()
        if value is not None
    }
    try:
        config = ClientConfig(**overrides)
    except ValidationError as exc:
        click.echo(f"Invalid configuration: {exc}", err=True)
        sys.exit(1)
    configure_logging(config.log_level)
    ctx.obj = config


# ---------------------------------------------------------------------------
# Data access
# ---------------------------------------------------------------------------


@main.command("tidyset")
@click.argument("dataset")
@click.argument("version")
@click.argument("tableset")
@click.option("--filters", default="", help="Filters to use in a comma-separated string.")
@click.option(
    "--materialize", default="", help="Filters to materialize in a comma-separated string."
)
@click.option("-o", "output", default=None, help="Path to copy the fetched artifact to.")
@click.pass_context
@_reports_catalog_errors
def tidyset_command(
    ctx: click.Context,
    dataset: str,
    version: str,
    tableset: str,
    filters: str,
    materialize: str,
    output: str | None,
) -> None:
    """Query for the tidyset of a dataset, version, tableset and filters.

    Prints the artifact path followed by the literal version.

    Example: tidydata-client tidyset clinical latest patients --filters adults
    """
    result = _client(ctx).get_data(
        dataset,
        version,
        tableset,
        split_names(filters),
        split_names(materialize),
        _identity(ctx, None),
    )
    if output:
        _copy_output(result.path, output)
    click.echo(format_path_and_version(result.path, result.version))


@main.command("preprocessed-data")
@click.argument("dataset")
@click.argument("version")
@click.option("-o", "output", default=None, help="Path to copy the fetched artifact to.")
@click.pass_context
@_reports_catalog_errors
def preprocessed_data_command(
    ctx: click.Context, dataset: str, version: str, output: str | None
) -> None:
    """Fetch preprocessed data for a dataset and version.

    Example: tidydata-client preprocessed-data clinical v1
    """
    result = _client(ctx).get_preprocessed_data(dataset, version)
    if output:
        _copy_output(result.path, output)
    click.echo(format_path_and_version(result.path, result.version))


@main.command("release-notes")
@click.argument("dataset")
@click.argument("version")
@click.pass_context
@_reports_catalog_errors
def release_notes_command(ctx: click.Context, dataset: str, version: str) -> None:
    """Print the release notes URL for a dataset and version."""
    click.echo(_client(ctx).release_notes_url(dataset, version))


@main.command("check-access")
@click.argument("dataset")
@click.argument("version")
@click.argument("tableset")
@click.option("--filters", default="", help="Filters to use in a comma-separated string.")
@click.option(
    "--identity",
    default=None,
    help="Identity to check access for, if not the user making the request.",
)
@click.pass_context
@_reports_catalog_errors
def check_access_command(
    ctx: click.Context,
    dataset: str,
    version: str,
    tableset: str,
    filters: str,
    identity: str | None,
) -> None:
    """Check whether an identity has access to a request.

    Example: tidydata-client check-access clinical v1 patients --identity alice
    """
    principal = _identity(ctx, identity)
    _client(ctx).check_access(principal, dataset, version, tableset, split_names(filters))
    click.echo(f"{principal} has access to {dataset} {version} {tableset}")


# ---------------------------------------------------------------------------
# Version administration
# ---------------------------------------------------------------------------


@main.group("version")
def version_group() -> None:
    """Publish and fail versions, and manage aliases. Admin only."""


@version_group.command("add")
@click.argument("dataset")
@click.argument("version")
@click.option(
    "--location",
    default=None,
    help="Data location of the version. Defaults to s3://<data bucket>/<version>.",
)
@click.option("--description", default="", help="Initial version description.")
@click.pass_context
@_reports_catalog_errors
def add_version_command(
    ctx: click.Context, dataset: str, version: str, location: str | None, description: str
) -> None:
    """Add a new version in the Generating state."""
    record = _client(ctx).add_version(dataset, version, location, description)
    click.echo(
        f"Version '{record.version}' added to dataset '{dataset}'"
        f" ({record.state.value}, {record.data_location})."
    )


@version_group.command("update")
@click.argument("dataset")
@click.argument("version")
@click.argument("state")
@click.pass_context
@_reports_catalog_errors
def update_state_command(ctx: click.Context, dataset: str, version: str, state: str) -> None:
    """Update the publish state of an existing version.

    Example: tidydata-client version update clinical v2 Published
    """
    record = _client(ctx).update_version_state(dataset, version, parse_state(state))
    click.echo(f"Version '{record.version}' of dataset '{dataset}' is now {record.state.value}.")


@version_group.command("update-description")
@click.argument("dataset")
@click.argument("version")
@click.argument("description")
@click.pass_context
@_reports_catalog_errors
def update_description_command(
    ctx: click.Context, dataset: str, version: str, description: str
) -> None:
    """Update the description of a dataset version."""
    _client(ctx).update_version_description(dataset, version, description)
    click.echo(f"Description of version '{version}' of dataset '{dataset}' updated.")


@version_group.command("add-alias")
@click.argument("dataset")
@click.argument("version")
@click.argument("alias")
@click.pass_context
@_reports_catalog_errors
def add_alias_command(ctx: click.Context, dataset: str, version: str, alias: str) -> None:
    """Add an alias pointing at a version."""
    _client(ctx).add_version_alias(dataset, version, alias)
    click.echo(f"Alias '{alias}' now points at version '{version}' of dataset '{dataset}'.")


@version_group.command("update-alias")
@click.argument("dataset")
@click.argument("alias")
@click.argument("new_alias")
@click.pass_context
@_reports_catalog_errors
def update_alias_command(ctx: click.Context, dataset: str, alias: str, new_alias: str) -> None:
    """Rename an alias."""
    _client(ctx).update_version_alias(dataset, alias, new_alias)
    click.echo(f"Alias '{alias}' of dataset '{dataset}' renamed to '{new_alias}'.")


@version_group.command("remove-alias")
@click.argument("dataset")
@click.argument("alias")
@click.pass_context
@_reports_catalog_errors
def remove_alias_command(ctx: click.Context, dataset: str, alias: str) -> None:
    """Remove an alias."""
    _client(ctx).remove_version_alias(dataset, alias)
    click.echo(f"Alias '{alias}' removed from dataset '{dataset}'.")


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


@main.group("list")
def list_group() -> None:
    """List available datasets, versions, filters and tablesets."""


@list_group.command("datasets")
@click.pass_context
@_reports_catalog_errors
def list_datasets_command(ctx: click.Context) -> None:
    """List all available datasets."""
    click.echo(format_names("Datasets:", _client(ctx).list_datasets()))


@list_group.command("versions")
@click.argument("dataset")
@click.option(
    "--with-alias/--without-alias",
    default=True,
    show_default=True,
    help="Only show versions that have aliases.",
)
@click.option(
    "--publish-state", default="Tested", show_default=True, help="Minimum publish state."
)
@click.pass_context
@_reports_catalog_errors
def list_versions_command(
    ctx: click.Context, dataset: str, with_alias: bool, publish_state: str
) -> None:
    """List available versions of a dataset.

    Example: tidydata-client list versions clinical --publish-state Published
    """
    min_state = parse_state(publish_state)
    client = _client(ctx)
    if with_alias:
        click.echo(format_aliased_versions(client.list_aliased_versions(dataset, min_state)))
    else:
        click.echo(format_versions(client.list_versions(dataset, min_state)))


@list_group.command("tablesets")
@click.argument("dataset")
@click.argument("version")
@click.pass_context
@_reports_catalog_errors
def list_tablesets_command(ctx: click.Context, dataset: str, version: str) -> None:
    """List the tablesets of a version."""
    click.echo(format_names("Tablesets:", _client(ctx).list_tablesets(dataset, version)))


@list_group.command("filters")
@click.argument("dataset")
@click.argument("version")
@click.pass_context
@_reports_catalog_errors
def list_filters_command(ctx: click.Context, dataset: str, version: str) -> None:
    """List the filters of a version."""
    click.echo(format_names("Name", _client(ctx).list_filters(dataset, version)))


@list_group.command("aliases")
@click.argument("dataset")
@click.argument("version")
@click.pass_context
@_reports_catalog_errors
def list_aliases_command(ctx: click.Context, dataset: str, version: str) -> None:
    """List the aliases pointing at a version."""
    aliases = _client(ctx).list_aliases(dataset, version)
    click.echo(format_aliases(dataset, version, aliases))


@list_group.command("tables")
@click.argument("dataset")
@click.argument("version")
@click.argument("tableset")
@click.pass_context
@_reports_catalog_errors
def list_tables_command(ctx: click.Context, dataset: str, version: str, tableset: str) -> None:
    """List the tables included in a tableset."""
    tables = _client(ctx).list_tables(dataset, version, tableset)
    click.echo(format_names("Included tables:", tables))


@list_group.command("snapshots")
@click.argument("dataset")
@click.argument("version")
@click.pass_context
@_reports_catalog_errors
def list_snapshots_command(ctx: click.Context, dataset: str, version: str) -> None:
    """List the clinical data snapshots of a version."""
    for snapshot in _client(ctx).list_snapshots(dataset, version):
        click.echo(snapshot)


# ---------------------------------------------------------------------------
# Describing
# ---------------------------------------------------------------------------


@main.group("describe")
def describe_group() -> None:
    """Describe datasets, versions, tablesets, filters, tables and columns."""


@describe_group.command("dataset")
@click.argument("dataset")
@click.pass_context
@_reports_catalog_errors
def describe_dataset_command(ctx: click.Context, dataset: str) -> None:
    """Describe a dataset."""
    click.echo(_client(ctx).describe_dataset(dataset))


@describe_group.command("version")
@click.argument("dataset")
@click.argument("version")
@click.pass_context
@_reports_catalog_errors
def describe_version_command(ctx: click.Context, dataset: str, version: str) -> None:
    """Describe a version of a dataset."""
    click.echo(_client(ctx).describe_version(dataset, version))


@describe_group.command("tableset")
@click.argument("dataset")
@click.argument("version")
@click.argument("tableset")
@click.pass_context
@_reports_catalog_errors
def describe_tableset_command(
    ctx: click.Context, dataset: str, version: str, tableset: str
) -> None:
    """Describe a tableset of a dataset version."""
    click.echo(_client(ctx).describe_tableset(dataset, version, tableset))


@describe_group.command("filter")
@click.argument("dataset")
@click.argument("version")
@click.argument("filter_name", metavar="FILTER")
@click.pass_context
@_reports_catalog_errors
def describe_filter_command(
    ctx: click.Context, dataset: str, version: str, filter_name: str
) -> None:
    """Describe a filter of a dataset version."""
    click.echo(format_filter(_client(ctx).describe_filter(dataset, version, filter_name)))


@describe_group.command("table")
@click.argument("dataset")
@click.argument("version")
@click.argument("tableset")
@click.argument("table")
@click.pass_context
@_reports_catalog_errors
def describe_table_command(
    ctx: click.Context, dataset: str, version: str, tableset: str, table: str
) -> None:
    """Describe a table of a tableset."""
    info = _client(ctx).describe_table(dataset, version, tableset, table)
    click.echo(format_table(tableset, info))


@describe_group.command("column")
@click.argument("dataset")
@click.argument("version")
@click.argument("table")
@click.argument("column")
@click.pass_context
@_reports_catalog_errors
def describe_column_command(
    ctx: click.Context, dataset: str, version: str, table: str, column: str
) -> None:
    """Describe a column of a table in a dataset version."""
    click.echo(format_column(_client(ctx).describe_column(dataset, version, table, column)))


if __name__ == "__main__":
    main()
