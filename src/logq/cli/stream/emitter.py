"""Writes live tail events to the output sink, one line per event."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, TextIO

from rich.console import Console
from rich.highlighter import JSONHighlighter
from rich.text import Text

from ..core.constants import FORMAT_JSON, FORMAT_TABLE
from ..core.timestamps import format_human
from .window import Event

logger = logging.getLogger(__name__)


class OutputMode(Enum):
    STRUCTURED = FORMAT_JSON
    HUMAN_READABLE = FORMAT_TABLE

    @classmethod
    def parse(cls, name: str) -> "OutputMode":
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Invalid format '{name}'. Must be one of: {valid}") from None


def encode_payload(payload: Any) -> str:
    """Compact JSON for a single record. Raises on values JSON cannot carry."""
    return json.dumps(
        payload, ensure_ascii=False, allow_nan=False, separators=(",", ":")
    )


class EventEmitter:
    """Serializes events to ``sink`` in the order ``emit`` is called.

    A record that cannot be serialized is logged and dropped; it never stops
    the stream.
    """

    def __init__(self, sink: TextIO, mode: OutputMode, color: bool = False) -> None:
        self.sink = sink
        self.mode = mode
        self.color = color
        self.emitted = 0
        self.dropped = 0
        self._console = None
        self._highlighter = None
        if color:
            self._console = Console(
                file=sink,
                force_terminal=True,
                soft_wrap=True,
                highlight=False,
            )
            self._highlighter = JSONHighlighter()

    def emit(self, event: Event) -> None:
        try:
            body = encode_payload(event.payload)
        except (TypeError, ValueError) as e:
            self.dropped += 1
            logger.warning(
                "Dropping event at %d that could not be serialized: %s",
                event.timestamp,
                e,
            )
            return

        if self._console is not None:
            self._emit_rich(event, body)
        else:
            self._emit_plain(event, body)
        self.emitted += 1

    def _emit_plain(self, event: Event, body: str) -> None:
        if self.mode is OutputMode.HUMAN_READABLE:
            line = f"{format_human(event.timestamp)}\t{body}"
        else:
            line = body
        self.sink.write(line + "\n")
        self.sink.flush()

    def _emit_rich(self, event: Event, body: str) -> None:
        line = Text()
        if self.mode is OutputMode.HUMAN_READABLE:
            line.append(format_human(event.timestamp), style="dim")
            line.append("\t")
        line.append_text(self._highlighter(Text(body)))
        self._console.print(line)
        self.sink.flush()


__all__ = ["EventEmitter", "OutputMode", "encode_payload"]
