"""Version lifecycle ordering and transition rules.

States are totally ordered ``Generating < Tested < Published``. ``Failed``
is terminal and incomparable to every state, itself included, so it never
satisfies an "at least X" query.
"""

from __future__ import annotations

import enum

from tidydata_client.errors import InvalidStateNameError, InvalidTransitionError
from tidydata_client.models import VersionState

_RANK: dict[VersionState, int] = {
    VersionState.generating: 0,
    VersionState.tested: 1,
    VersionState.published: 2,
}


class StateComparison(str, enum.Enum):
    """Outcome of comparing two version states."""

    less = "less"
    equal = "equal"
    greater = "greater"
    incomparable = "incomparable"


def compare_state(a: VersionState, b: VersionState) -> StateComparison:
    """Compare two states under the lifecycle order.

    Args:
        a: Left-hand state.
        b: Right-hand state.

    Returns:
        ``incomparable`` when either side is ``Failed``, otherwise the
        position of ``a`` relative to ``b``.
    """
    if a is VersionState.failed or b is VersionState.failed:
        return StateComparison.incomparable
    difference = _RANK[a] - _RANK[b]
    if difference < 0:
        return StateComparison.less
    if difference > 0:
        return StateComparison.greater
    return StateComparison.equal


def meets_minimum(state: VersionState, minimum: VersionState) -> bool:
    """Return True if ``state`` is not Failed and at least ``minimum``."""
    return compare_state(state, minimum) in (StateComparison.equal, StateComparison.greater)


def parse_state(text: str) -> VersionState:
    """Parse a canonical state name.

    Matching is exact and case-sensitive against
    ``Generating``, ``Tested``, ``Published`` and ``Failed``.

    Raises:
        InvalidStateNameError: If ``text`` names no state.
    """
    try:
        return VersionState(text)
    except ValueError:
        raise InvalidStateNameError(text) from None


def validate_transition(version: str, current: VersionState, target: VersionState) -> None:
    """Check that ``current -> target`` is a legal lifecycle move.

    Legal moves go strictly forward through Generating, Tested and
    Published, or from any of those into Failed.

    Args:
        version: Version identifier, used for the error message.
        current: State stored today.
        target: Requested state.

    Raises:
        InvalidTransitionError: If the move is backward, a no-op, or
            leaves Failed.
    """
    if current is VersionState.failed:
        raise InvalidTransitionError(version, current.value, target.value)
    if target is VersionState.failed:
        return
    if compare_state(target, current) is not StateComparison.greater:
        raise InvalidTransitionError(version, current.value, target.value)


__all__ = [
    "StateComparison",
    "compare_state",
    "meets_minimum",
    "parse_state",
    "validate_transition",
]
