"""Fetch executors turn a resolved request into an artifact locator."""

from __future__ import annotations

from typing import Protocol
from urllib.parse import urlencode

from tidydata_client.models import FetchSpec, ResolvedRef


class FetchExecutor(Protocol):
    """Reads or materializes the data a resolved request designates."""

    def fetch(self, ref: ResolvedRef, spec: FetchSpec) -> str:
        """Return the locator of the fetched artifact."""
        ...


class LocatorFetchExecutor:
    """Builds the tableset locator under the version's data location.

    Filters and materialized filters are carried as query parameters in
    sorted order, so equal requests always produce equal locators.
    """

    def fetch(self, ref: ResolvedRef, spec: FetchSpec) -> str:
        locator = f"{ref.data_location.rstrip('/')}/{spec.tableset}"
        params: list[tuple[str, str]] = []
        if spec.filters:
            params.append(("filters", ",".join(sorted(spec.filters))))
        if spec.materialize:
            params.append(("materialize", ",".join(sorted(spec.materialize))))
        if params:
            locator = f"{locator}?{urlencode(params, safe=',')}"
        return locator


__all__ = ["FetchExecutor", "LocatorFetchExecutor"]
