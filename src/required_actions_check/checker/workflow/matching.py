from __future__ import annotations

from collections.abc import Callable
from enum import Enum

ActionMatcher = Callable[[str, str], bool]


class MatchStrategy(str, Enum):
    """How a required action name is compared with a step's `uses`."""

    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"


def exact_match(name: str, uses: str) -> bool:
    # `actions/checkout` matches `actions/checkout` and `actions/checkout@v4`.
    return uses == name or uses.startswith(f"{name}@")


def prefix_match(name: str, uses: str) -> bool:
    return uses.startswith(name)


def substring_match(name: str, uses: str) -> bool:
    # Also matches unrelated actions whose name contains `name`.
    return name in uses


_MATCHERS: dict[MatchStrategy, ActionMatcher] = {
    MatchStrategy.EXACT: exact_match,
    MatchStrategy.PREFIX: prefix_match,
    MatchStrategy.SUBSTRING: substring_match,
}


def matcher_for(strategy: MatchStrategy | str) -> ActionMatcher:
    return _MATCHERS[MatchStrategy(strategy)]
