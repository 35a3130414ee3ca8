"""Shared test fixtures for tidydata-client."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tidydata_client.client import CatalogClient
from tidydata_client.models import CatalogDocument
from tidydata_client.source import InMemoryCatalog


def _catalog_payload() -> dict[str, object]:
    patients = {
        "name": "patients",
        "num_rows": 1200,
        "columns": [
            {"name": "patient_id", "description": "Stable patient identifier."},
            {
                "name": "age_at_draw",
                "description": "Age in years at blood draw.",
                "rule": "floor((draw_date - birth_date) / 365.25)",
            },
        ],
    }
    samples = {"name": "samples", "num_rows": 4800, "columns": [{"name": "sample_id"}]}
    filters = [
        {"name": "adults", "description": "Patients aged 18 or over.", "query_string": "age_at_draw >= 18"},
        {"name": "consented", "description": "Research consent on file.", "query_string": "consent = 'Y'"},
    ]
    return {
        "datasets": [
            {
                "name": "clinical",
                "description": "Clinical study data.",
                "versions": [
                    {
                        "version": "v1",
                        "state": "Published",
                        "description": "First release.",
                        "data_location": "s3://tidydata/clinical/v1",
                        "preprocessed_location": "s3://tidydata/clinical/v1/preprocessed.db",
                        "snapshots": ["snap-2024-01", "snap-2024-02"],
                        "tablesets": [
                            {"name": "core", "description": "Core tables.", "tables": [patients, samples]},
                        ],
                        "filters": filters,
                    },
                    {
                        "version": "v2",
                        "state": "Failed",
                        "description": "Broken build.",
                        "data_location": "s3://tidydata/clinical/v2",
                        "tablesets": [{"name": "core", "tables": [patients]}],
                        "filters": filters,
                    },
                    {
                        "version": "v3",
                        "state": "Tested",
                        "description": "Release candidate.",
                        "data_location": "s3://tidydata/clinical/v3",
                        "tablesets": [{"name": "core", "tables": [patients]}],
                        "filters": filters,
                    },
                    {
                        "version": "v4",
                        "state": "Generating",
                        "data_location": "s3://tidydata/clinical/v4",
                    },
                ],
                "aliases": {"latest": "v1", "stable": "v1", "broken": "v2", "candidate": "v3"},
            },
            {"name": "genomics", "description": "Sequencing results."},
        ],
    }


@pytest.fixture()
def catalog_payload() -> dict[str, object]:
    """A catalog document as plain JSON-compatible data."""
    return _catalog_payload()


@pytest.fixture()
def catalog_document(catalog_payload: dict[str, object]) -> CatalogDocument:
    return CatalogDocument.model_validate(catalog_payload)


@pytest.fixture()
def catalog(catalog_document: CatalogDocument) -> InMemoryCatalog:
    """An in-memory catalog with a published, failed, tested and generating version."""
    return InMemoryCatalog.from_document(catalog_document)


@pytest.fixture()
def client(catalog: InMemoryCatalog) -> CatalogClient:
    return CatalogClient(catalog)


@pytest.fixture()
def catalog_file(tmp_path: Path, catalog_payload: dict[str, object]) -> Path:
    """A catalog document written to disk."""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(catalog_payload), encoding="utf-8")
    return path
