"""The live tail poll loop.

One query is in flight at a time. Each tick the loop asks the
:class:`WindowTracker` for the next window, runs the query bounded by the tick
interval, forwards the returned events to the :class:`EventEmitter` and then
waits for either the next tick or a stop request.

A query that runs past its deadline, or that is cancelled on its own, only
costs a tick: the bound stays where it was and the next window covers the same
start plus the new time. Any other query error stops the loop and propagates
unchanged to the caller.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional, Sequence

from ..core.constants import STREAMING_DURATION_SECONDS
from ..core.timestamps import now_ns
from .emitter import EventEmitter
from .window import Event, TimeWindow, WindowTracker

logger = logging.getLogger(__name__)

QueryFn = Callable[[TimeWindow, float], Awaitable[Sequence[Event]]]


class RecoverableQueryError(Exception):
    """A per-tick query failure that does not end the tail."""


class QueryDeadlineExceeded(RecoverableQueryError):
    """The query did not complete within its deadline."""


class QueryCancelled(RecoverableQueryError):
    """The query was cancelled independently of the poll loop."""


class PollState(Enum):
    IDLE = "idle"
    QUERYING = "querying"
    EMITTING = "emitting"
    WAITING = "waiting"
    STOPPED = "stopped"


_ALLOWED_TRANSITIONS: Dict[PollState, set[PollState]] = {
    PollState.IDLE: {PollState.QUERYING, PollState.STOPPED},
    PollState.QUERYING: {PollState.EMITTING, PollState.WAITING, PollState.STOPPED},
    PollState.EMITTING: {PollState.WAITING, PollState.STOPPED},
    PollState.WAITING: {PollState.QUERYING, PollState.STOPPED},
    PollState.STOPPED: set(),
}


@dataclass(slots=True)
class PollStats:
    polls: int = 0
    recoverable_failures: int = 0
    events_forwarded: int = 0


class PollLoop:
    def __init__(
        self,
        query: QueryFn,
        emitter: EventEmitter,
        *,
        interval: float = STREAMING_DURATION_SECONDS,
        tracker: Optional[WindowTracker] = None,
        clock: Callable[[], int] = now_ns,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._query = query
        self._emitter = emitter
        self._interval = interval
        self._tracker = tracker
        self._clock = clock
        self._stop_event = stop_event or asyncio.Event()
        self._state = PollState.IDLE
        self._next_tick: Optional[float] = None
        self.stats = PollStats()

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def tracker(self) -> Optional[WindowTracker]:
        return self._tracker

    def stop(self) -> None:
        """Ask the loop to finish at the next wait boundary."""
        self._stop_event.set()

    async def run(self) -> None:
        """Tail until stopped. Fatal query errors propagate to the caller."""
        if self._state is not PollState.IDLE:
            raise RuntimeError("PollLoop.run() can only be called once")
        if self._tracker is None:
            self._tracker = WindowTracker.starting_at(self._clock())

        loop = asyncio.get_running_loop()
        self._next_tick = loop.time() + self._interval
        try:
            while True:
                self._transition(PollState.QUERYING)
                events = await self._poll_once()

                if events is not None:
                    self._transition(PollState.EMITTING)
                    for event in events:
                        self._emitter.emit(event)
                    self.stats.events_forwarded += len(events)

                self._transition(PollState.WAITING)
                if not await self._wait_for_tick():
                    logger.debug("Stop requested; ending live tail")
                    return
        finally:
            self._state = PollState.STOPPED

    async def _poll_once(self) -> Optional[Sequence[Event]]:
        window = self._tracker.next(self._clock())
        self.stats.polls += 1
        try:
            events = await asyncio.wait_for(
                self._query(window, self._interval), timeout=self._interval
            )
        except (TimeoutError, RecoverableQueryError) as e:
            self.stats.recoverable_failures += 1
            logger.debug("No results for window %s this tick: %r", window, e)
            return None
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            self.stats.recoverable_failures += 1
            logger.debug("Query for window %s was cancelled", window)
            return None

        events = list(events)
        if events:
            self._tracker.advance(max(e.timestamp for e in events))
        logger.debug(
            "Window %s returned %d event(s); next bound %d",
            window,
            len(events),
            self._tracker.bound,
        )
        return events

    async def _wait_for_tick(self) -> bool:
        """Wait for the next tick. Returns False once a stop is requested."""
        if self._stop_event.is_set():
            return False

        loop = asyncio.get_running_loop()
        delay = max(0.0, self._next_tick - loop.time())
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
        except TimeoutError:
            pass
        if self._stop_event.is_set():
            return False

        # Ticks stay on the start + k*interval grid. The overdue tick fires
        # immediately and any further missed ones are dropped.
        missed = max(0, math.floor((loop.time() - self._next_tick) / self._interval))
        self._next_tick += (missed + 1) * self._interval
        return True

    def _transition(self, new_state: PollState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Illegal poll state transition {self._state.value} -> {new_state.value}"
            )
        logger.debug("Poll state %s -> %s", self._state.value, new_state.value)
        self._state = new_state


__all__ = [
    "PollLoop",
    "PollState",
    "PollStats",
    "QueryCancelled",
    "QueryDeadlineExceeded",
    "QueryFn",
    "RecoverableQueryError",
]
