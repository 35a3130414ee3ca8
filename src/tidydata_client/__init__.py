"""tidydata-client: catalog client for versioned tabular datasets."""

from tidydata_client.access import AccessGate, AllowAllPolicy, RuleBasedPolicy
from tidydata_client.aliases import AliasRegistry
from tidydata_client.client import CatalogClient
from tidydata_client.composer import compose
from tidydata_client.config import ClientConfig
from tidydata_client.errors import CatalogError, TransportError
from tidydata_client.models import (
    AccessRule,
    AliasedVersion,
    CatalogDocument,
    DatasetSnapshot,
    FetchResult,
    FetchSpec,
    ResolvedRef,
    VersionRecord,
    VersionState,
)
from tidydata_client.resolver import CatalogResolver
from tidydata_client.source import FileCatalogSource, InMemoryCatalog
from tidydata_client.states import compare_state, meets_minimum, parse_state

__version__ = "0.1.0"

__all__ = [
    "AccessGate",
    "AccessRule",
    "AliasRegistry",
    "AliasedVersion",
    "AllowAllPolicy",
    "CatalogClient",
    "CatalogDocument",
    "CatalogError",
    "CatalogResolver",
    "ClientConfig",
    "DatasetSnapshot",
    "FetchResult",
    "FetchSpec",
    "FileCatalogSource",
    "InMemoryCatalog",
    "ResolvedRef",
    "RuleBasedPolicy",
    "TransportError",
    "VersionRecord",
    "VersionState",
    "compare_state",
    "compose",
    "meets_minimum",
    "parse_state",
]
