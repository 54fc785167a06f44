"""Clock helpers shared by validators and collaborators."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import UTC, datetime

MonotonicClock = Callable[[], float]


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class DeadlineExceeded(TimeoutError):
    """Raised when an operation starts after the run deadline has passed."""


class Deadline:
    """Overall time budget for one verification run.

    Collaborators that block (subprocesses, network calls) take their timeout
    from ``remaining()`` so the whole run stays inside the caller's budget.
    """

    def __init__(self, *, seconds: float, clock: MonotonicClock = time.monotonic) -> None:
        if seconds <= 0:
            msg = "Deadline seconds must be positive."
            raise ValueError(msg)
        self._clock = clock
        self._budget = float(seconds)
        self._expires_at = clock() + self._budget

    @property
    def budget_seconds(self) -> float:
        return self._budget

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self._expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def timeout_for(self, operation: str) -> float:
        """Return the remaining budget, raising if nothing is left for ``operation``."""
        remaining = self.remaining()
        if remaining <= 0.0:
            raise DeadlineExceeded(f"deadline of {self._budget:g}s exceeded before {operation}")
        return remaining
