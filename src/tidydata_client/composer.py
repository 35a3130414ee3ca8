"""Filter and materialize composition."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from tidydata_client.errors import MaterializeNotFilteredError, UnknownFilterError
from tidydata_client.models import FetchSpec


def split_names(raw: str | None) -> list[str]:
    """Split a comma-separated list of names, dropping empty segments.

    Example: ``split_names("a, b,,c")`` returns ``["a", "b", "c"]``.
    """
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def compose(
    all_filters: Iterable[str],
    requested_filters: Sequence[str] = (),
    requested_materialize: Sequence[str] = (),
    *,
    dataset: str,
    version: str,
    tableset: str,
) -> FetchSpec:
    """Validate requested filters and build the fetch specification.

    Duplicate names collapse to one. Checks run in this order:

    1. materialize requested while no filter is requested;
    2. every requested name, filters first, must be in ``all_filters``;
    3. every materialized name must also be a requested filter.

    Args:
        all_filters: Filters known for the target dataset version.
        requested_filters: Filters to apply, in request order.
        requested_materialize: Filters to materialize, in request order.
        dataset: Target dataset.
        version: Literal target version.
        tableset: Target tableset.

    Returns:
        A ``FetchSpec`` whose ``materialize`` is a subset of ``filters``.

    Raises:
        MaterializeNotFilteredError: For checks 1 and 3.
        UnknownFilterError: For check 2, naming the first offending filter.
    """
    known = frozenset(all_filters)
    filters = frozenset(requested_filters)
    materialize = frozenset(requested_materialize)

    if materialize and not filters:
        raise MaterializeNotFilteredError(materialize)

    for name in [*requested_filters, *requested_materialize]:
        if name not in known:
            raise UnknownFilterError(name)

    not_filtered = materialize - filters
    if not_filtered:
        raise MaterializeNotFilteredError(not_filtered)

    return FetchSpec(
        dataset=dataset,
        version=version,
        tableset=tableset,
        filters=filters,
        materialize=materialize,
    )


__all__ = ["compose", "split_names"]
