"""
Filters Module - Black Box Interface

Purpose: Decide which request paths get a session
Interface: Always(bool), Matches(pattern), match(), parse_path_filter()
Hidden: Regular expression handling

A filter is either an unconditional decision or a pattern searched in the path.
"""

import re
from dataclasses import dataclass
from typing import Pattern, Union

STATIC_ASSET_PATTERN = r"\.(css|js|jpg|png|gif|svg|txt|pdf|xls|doc|docx|zip|tar|gz|xml)$"


@dataclass(frozen=True)
class Always:
    """Unconditional filter."""
    value: bool

    def matches(self, path: str) -> bool:
        return self.value


@dataclass(frozen=True)
class Matches:
    """Regular expression filter, searched anywhere in the path."""
    pattern: Pattern[str]

    def __init__(self, pattern: Union[str, Pattern[str]]):
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        object.__setattr__(self, "pattern", pattern)

    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None


PathFilter = Union[Always, Matches]


def match(path_filter: PathFilter, path: str) -> bool:
    """Evaluate a path filter against a request path."""
    return path_filter.matches(path)


def parse_path_filter(value: str) -> PathFilter:
    """
    Build a filter from a configuration string.

    "true" and "false" (any case) become Always; anything else is compiled
    as a regular expression.

    Raises:
        ValueError: If the expression does not compile
    """
    normalized = value.strip().lower()
    if normalized in ("true", "false"):
        return Always(normalized == "true")
    try:
        return Matches(value)
    except re.error as e:
        raise ValueError(f"Invalid path filter pattern {value!r}: {e}") from e


def default_enable() -> PathFilter:
    return Always(True)


def default_disable() -> PathFilter:
    return Matches(STATIC_ASSET_PATTERN)


__all__ = [
    "Always",
    "Matches",
    "PathFilter",
    "STATIC_ASSET_PATTERN",
    "match",
    "parse_path_filter",
    "default_enable",
    "default_disable",
]
