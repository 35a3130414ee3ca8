"""Tests for tidydata-client CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from tidydata_client.cli import main
from tidydata_client.models import CatalogDocument, VersionState


@pytest.fixture()
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    monkeypatch.setenv("TIDYDATA_IDENTITY", "root:staff:tester")
    return CliRunner()


def _invoke(runner: CliRunner, catalog_file: Path, *args: str) -> Result:
    return runner.invoke(main, ["--address", str(catalog_file), *args])


def _reload(catalog_file: Path) -> CatalogDocument:
    return CatalogDocument.model_validate_json(catalog_file.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# --version and configuration
# ---------------------------------------------------------------------------


def test_cli_version(runner: CliRunner) -> None:
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_missing_catalog_reports_transport_error(runner: CliRunner, tmp_path: Path) -> None:
    result = _invoke(runner, tmp_path / "absent.json", "list", "datasets")
    assert result.exit_code == 1
    assert "Cannot read catalog" in result.output


def test_invalid_log_level(runner: CliRunner, catalog_file: Path) -> None:
    result = runner.invoke(
        main, ["--address", str(catalog_file), "--log-level", "chatty", "list", "datasets"]
    )
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_address_from_environment(
    runner: CliRunner, catalog_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TIDYDATA_ADDRESS", str(catalog_file))
    result = runner.invoke(main, ["list", "datasets"])
    assert result.exit_code == 0, result.output
    assert "clinical" in result.output


# ---------------------------------------------------------------------------
# tidyset / preprocessed-data / release-notes / check-access
# ---------------------------------------------------------------------------


def test_tidyset_prints_path_and_version(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(
        runner, catalog_file, "tidyset", "clinical", "latest", "core",
        "--filters", "adults,consented", "--materialize", "adults",
    )
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines[-2] == "s3://tidydata/clinical/v1/core?filters=adults,consented&materialize=adults"
    assert lines[-1] == "v1"


def test_tidyset_failed_version(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "tidyset", "clinical", "v2", "core")
    assert result.exit_code == 1
    assert "has failed" in result.output


def test_tidyset_materialize_without_filter(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(
        runner, catalog_file, "tidyset", "clinical", "v1", "core", "--materialize", "adults"
    )
    assert result.exit_code == 1
    assert "must also be requested as filters" in result.output


def test_tidyset_copy_of_remote_artifact_fails(
    runner: CliRunner, catalog_file: Path, tmp_path: Path
) -> None:
    result = _invoke(
        runner, catalog_file, "tidyset", "clinical", "v1", "core", "-o", str(tmp_path / "out.db")
    )
    assert result.exit_code == 1
    assert "is not a local file" in result.output


def test_preprocessed_data_copies_local_artifact(
    runner: CliRunner, tmp_path: Path, catalog_payload: dict[str, object]
) -> None:
    artifact = tmp_path / "preprocessed.db"
    artifact.write_bytes(b"tidy")
    payload = json.loads(json.dumps(catalog_payload))
    payload["datasets"][0]["versions"][0]["preprocessed_location"] = str(artifact)
    catalog_file = tmp_path / "catalog.json"
    catalog_file.write_text(json.dumps(payload), encoding="utf-8")
    output = tmp_path / "copy.db"

    result = _invoke(
        runner, catalog_file, "preprocessed-data", "clinical", "stable", "-o", str(output)
    )
    assert result.exit_code == 0, result.output
    assert output.read_bytes() == b"tidy"
    assert result.output.strip().splitlines()[-1] == "v1"


def test_release_notes(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "release-notes", "clinical", "candidate")
    assert result.exit_code == 0, result.output
    assert "clinical/v3" in result.output


def test_check_access_granted(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "check-access", "clinical", "v1", "core")
    assert result.exit_code == 0, result.output
    assert "root:staff:tester has access to clinical v1 core" in result.output


def test_check_access_denied(
    runner: CliRunner, tmp_path: Path, catalog_payload: dict[str, object]
) -> None:
    payload = dict(catalog_payload)
    payload["access_rules"] = [{"principal": "root:partner:*", "required_filters": ["consented"]}]
    catalog_file = tmp_path / "catalog.json"
    catalog_file.write_text(json.dumps(payload), encoding="utf-8")

    denied = _invoke(
        runner, catalog_file, "check-access", "clinical", "v1", "core", "--identity", "root:partner:bob"
    )
    assert denied.exit_code == 1
    assert "requires filters: consented" in denied.output

    granted = _invoke(
        runner, catalog_file, "check-access", "clinical", "v1", "core",
        "--identity", "root:partner:bob", "--filters", "consented",
    )
    assert granted.exit_code == 0, granted.output


# ---------------------------------------------------------------------------
# version administration
# ---------------------------------------------------------------------------


def test_version_add_and_publish(runner: CliRunner, catalog_file: Path) -> None:
    added = _invoke(runner, catalog_file, "version", "add", "genomics", "g1")
    assert added.exit_code == 0, added.output
    assert "s3://tidydata/g1" in added.output

    updated = _invoke(runner, catalog_file, "version", "update", "genomics", "g1", "Tested")
    assert updated.exit_code == 0, updated.output

    genomics = next(d for d in _reload(catalog_file).datasets if d.name == "genomics")
    assert genomics.get_version("g1").state is VersionState.tested


def test_version_update_rejects_backward_move(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "version", "update", "clinical", "v1", "Tested")
    assert result.exit_code == 1
    assert "cannot move from Published to Tested" in result.output


def test_version_update_rejects_bad_state_name(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "version", "update", "clinical", "v4", "tested")
    assert result.exit_code == 1
    assert "Invalid version state 'tested'" in result.output


def test_version_update_description(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(
        runner, catalog_file, "version", "update-description", "clinical", "v3", "Ready."
    )
    assert result.exit_code == 0, result.output
    clinical = next(d for d in _reload(catalog_file).datasets if d.name == "clinical")
    assert clinical.get_version("v3").description == "Ready."


def test_alias_commands(runner: CliRunner, catalog_file: Path) -> None:
    assert _invoke(runner, catalog_file, "version", "add-alias", "clinical", "v3", "next").exit_code == 0
    assert _invoke(runner, catalog_file, "version", "update-alias", "clinical", "next", "rc2").exit_code == 0
    assert _invoke(runner, catalog_file, "version", "remove-alias", "clinical", "candidate").exit_code == 0

    aliases = next(d for d in _reload(catalog_file).datasets if d.name == "clinical").aliases
    assert aliases["rc2"] == "v3"
    assert "next" not in aliases
    assert "candidate" not in aliases


def test_add_duplicate_alias(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "version", "add-alias", "clinical", "v3", "latest")
    assert result.exit_code == 1
    assert "already exists" in result.output


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


def test_list_datasets(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "list", "datasets")
    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[:3] == ["Datasets:", "clinical", "genomics"]


def test_list_versions_with_aliases(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "list", "versions", "clinical")
    assert result.exit_code == 0, result.output
    assert "candidate" in result.output
    assert "latest" in result.output
    assert "broken" not in result.output


def test_list_versions_without_aliases(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(
        runner, catalog_file, "list", "versions", "clinical", "--without-alias",
        "--publish-state", "Generating",
    )
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["versions:", "v1: Published", "v3: Tested", "v4: Generating"]


def test_list_tablesets_filters_tables(runner: CliRunner, catalog_file: Path) -> None:
    tablesets = _invoke(runner, catalog_file, "list", "tablesets", "clinical", "v1")
    assert "core" in tablesets.output
    filters = _invoke(runner, catalog_file, "list", "filters", "clinical", "v1")
    assert filters.output.splitlines() == ["Name", "adults", "consented"]
    tables = _invoke(runner, catalog_file, "list", "tables", "clinical", "v1", "core")
    assert tables.output.splitlines() == ["Included tables:", "patients", "samples"]


def test_list_aliases(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "list", "aliases", "clinical", "v4")
    assert "No aliases found for dataset clinical and version v4" in result.output
    result = _invoke(runner, catalog_file, "list", "aliases", "clinical", "v1")
    assert result.output.splitlines() == ["Aliases for version v1", "latest", "stable"]


def test_list_snapshots(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "list", "snapshots", "clinical", "v1")
    assert result.output.splitlines() == ["snap-2024-01", "snap-2024-02"]


# ---------------------------------------------------------------------------
# describe
# ---------------------------------------------------------------------------


def test_describe_dataset_and_version(runner: CliRunner, catalog_file: Path) -> None:
    assert "Clinical study data." in _invoke(runner, catalog_file, "describe", "dataset", "clinical").output
    assert "First release." in _invoke(runner, catalog_file, "describe", "version", "clinical", "latest").output
    assert "Core tables." in _invoke(
        runner, catalog_file, "describe", "tableset", "clinical", "v1", "core"
    ).output


def test_describe_filter(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "describe", "filter", "clinical", "v1", "adults")
    assert result.output.splitlines() == [
        "Query String:",
        "age_at_draw >= 18",
        "Description:",
        "Patients aged 18 or over.",
    ]


def test_describe_table_and_column(runner: CliRunner, catalog_file: Path) -> None:
    table = _invoke(runner, catalog_file, "describe", "table", "clinical", "v1", "core", "patients")
    assert "Number of rows: 1200" in table.output
    column = _invoke(runner, catalog_file, "describe", "column", "clinical", "v1", "patients", "age_at_draw")
    assert "Rule:" in column.output


def test_describe_unknown_dataset(runner: CliRunner, catalog_file: Path) -> None:
    result = _invoke(runner, catalog_file, "describe", "dataset", "proteomics")
    assert result.exit_code == 1
    assert "Dataset 'proteomics' not found." in result.output
