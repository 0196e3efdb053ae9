"""Query windows for the live tail.

``WindowTracker`` owns the lower bound of the next window. Everything strictly
before the bound has already been emitted; the next window always starts at
the bound, so consecutive windows never overlap and never skip time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..core.timestamps import EPSILON_NS, format_rfc3339


@dataclass(frozen=True, slots=True)
class TimeWindow:
    """Half-open interval ``[start, end)`` in nanoseconds."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(
                f"Window start must precede its end (start={self.start}, end={self.end})"
            )

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp < self.end

    def __str__(self) -> str:
        return f"[{format_rfc3339(self.start)}, {format_rfc3339(self.end)})"


@dataclass(frozen=True, slots=True)
class Event:
    """A single matched record returned by a dataset query."""

    timestamp: int
    payload: Any


class WindowTracker:
    def __init__(self, bound: int, epsilon: int = EPSILON_NS) -> None:
        if epsilon <= 0:
            raise ValueError("epsilon must be positive")
        self._bound = bound
        self._epsilon = epsilon
        self._last_now: Optional[int] = None

    @classmethod
    def starting_at(cls, now: int, epsilon: int = EPSILON_NS) -> "WindowTracker":
        """Create a tracker whose first window ends at ``now``."""
        return cls(now - epsilon, epsilon)

    @property
    def bound(self) -> int:
        return self._bound

    @property
    def epsilon(self) -> int:
        return self._epsilon

    def next(self, now: int) -> TimeWindow:
        """Return the window ``[bound, now)``.

        ``now`` never moves backwards between calls. If the bound is already
        at or past ``now`` (events stamped ahead of the local clock) the
        window shrinks to ``[bound, bound + epsilon)``.
        """
        if self._last_now is not None and now < self._last_now:
            now = self._last_now
        self._last_now = now
        return TimeWindow(self._bound, max(now, self._bound + self._epsilon))

    def advance(self, latest_seen: Optional[int]) -> None:
        """Move the bound strictly past ``latest_seen``.

        ``None`` means the window returned nothing and the bound stays put so
        the next window covers the same start again.
        """
        if latest_seen is None:
            return
        self._bound = max(self._bound, latest_seen + self._epsilon)


__all__ = ["Event", "TimeWindow", "WindowTracker"]
