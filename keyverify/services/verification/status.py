"""Outcome states for verification steps and the rules for combining them."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum


class Status(StrEnum):
    """Closed set of check outcomes, ordered by severity for aggregation."""

    UNKNOWN = "unknown"
    SUCCESS = "success"
    WARNING = "warning"
    FAILURE = "failure"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    @property
    def marker(self) -> str:
        return _MARKERS[self]


_SEVERITY: dict[Status, int] = {
    Status.UNKNOWN: 0,
    Status.SUCCESS: 1,
    Status.WARNING: 2,
    Status.FAILURE: 3,
}

_MARKERS: dict[Status, str] = {
    Status.UNKNOWN: "❔",
    Status.SUCCESS: "✅",
    Status.WARNING: "⚠️",
    Status.FAILURE: "❌",
}


def worse(a: Status, b: Status) -> Status:
    """Return the more severe of two statuses (Failure > Warning > Success > Unknown)."""
    return a if a.severity >= b.severity else b


def aggregate(statuses: Iterable[Status]) -> Status:
    """Fold statuses into the worst one; an empty or all-unknown input is vacuously successful."""
    result = Status.UNKNOWN
    for status in statuses:
        result = worse(result, status)
    if result is Status.UNKNOWN:
        return Status.SUCCESS
    return result
