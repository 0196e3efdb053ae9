"""Live tail engine: windows, the poll loop and event output."""

from ..core.timestamps import EPSILON_NS
from .emitter import EventEmitter, OutputMode
from .poller import (
    PollLoop,
    PollState,
    PollStats,
    QueryCancelled,
    QueryDeadlineExceeded,
    RecoverableQueryError,
)
from .source import DatasetQuerySource
from .window import Event, TimeWindow, WindowTracker

__all__ = [
    "DatasetQuerySource",
    "EPSILON_NS",
    "Event",
    "EventEmitter",
    "OutputMode",
    "PollLoop",
    "PollState",
    "PollStats",
    "QueryCancelled",
    "QueryDeadlineExceeded",
    "RecoverableQueryError",
    "TimeWindow",
    "WindowTracker",
]
