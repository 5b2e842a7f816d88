"""Structured trace sinks for pipeline diagnostics.

The orchestrator reports what it saw (anchors, bar bounds, pixel samples,
fill ratios, final values) as named events with keyword fields.  Sinks
decide what to do with them:

* :class:`NullTrace`   : drop everything (default).
* :class:`ListTrace`   : keep events in memory (tests, notebooks).
* :class:`LoggingTrace`: one ``key=value`` debug line per event.

Any object with a matching ``emit`` method satisfies :class:`TraceSink`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol


class TraceSink(Protocol):
    """Structural subtype for anything that accepts trace events."""

    def emit(self, event: str, **fields: Any) -> None:
        """Record *event* with its structured *fields*."""
        ...


class NullTrace:
    """Sink that ignores every event."""

    def emit(self, event: str, **fields: Any) -> None:
        return None


@dataclass(slots=True)
class TraceEvent:
    event: str
    fields: dict[str, Any]


@dataclass(slots=True)
class ListTrace:
    """Sink collecting events in order."""

    events: list[TraceEvent] = field(default_factory=list)

    def emit(self, event: str, **fields: Any) -> None:
        self.events.append(TraceEvent(event=event, fields=dict(fields)))

    def named(self, event: str) -> list[TraceEvent]:
        """Return every recorded event called *event*."""
        return [item for item in self.events if item.event == event]


class LoggingTrace:
    """Sink writing each event as a structured log line."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG) -> None:
        self._logger = logger or logging.getLogger("iv_scanner.trace")
        self._level = level

    def emit(self, event: str, **fields: Any) -> None:
        if not self._logger.isEnabledFor(self._level):
            return
        payload = " ".join(f"{key}={value!r}" for key, value in sorted(fields.items()))
        self._logger.log(self._level, "%s %s", event, payload)
