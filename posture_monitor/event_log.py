# posture_monitor/event_log.py
"""
Event sinks: where completed SessionEvents are handed off.

Anything with an emit(event) method can be used as a sink. The engine
calls it once per event and never retries.

MemorySink    keeps events in a list (tests, embedding in a UI)
JsonEventLog  persists events to a JSON file and summarises them
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from .labels import PostureLabel, SESSION_LABELS
from .session import SessionEvent

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    def emit(self, event: SessionEvent) -> None:
        ...


class MemorySink:
    def __init__(self):
        self.events: List[SessionEvent] = []

    def emit(self, event: SessionEvent) -> None:
        self.events.append(event)


class JsonEventLog:
    """
    Persists events to a JSON list on disk.

    Previous events are loaded on start-up so the log survives restarts.
    Each emit() rewrites the file; a failed write is logged and the event
    stays in memory.
    """

    def __init__(self, path: str | Path = 'posture_events.json', autosave: bool = True):
        self.path     = Path(path)
        self.autosave = autosave
        self.events: List[SessionEvent] = self._load()

    def _load(self) -> List[SessionEvent]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning('Could not read event log %s: %s', self.path, exc)
            return []
        if not isinstance(data, list):
            logger.warning('Event log %s does not hold a list, starting empty', self.path)
            return []

        events = []
        for entry in data:
            try:
                events.append(SessionEvent.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning('Skipping malformed event entry %r: %s', entry, exc)
        return events

    def emit(self, event: SessionEvent) -> None:
        self.events.append(event)
        if self.autosave:
            self.save()

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump([e.to_dict() for e in self.events], f, indent=2, ensure_ascii=False)
        except OSError as exc:
            logger.error('Could not write event log %s: %s', self.path, exc)

    def clear(self) -> None:
        self.events = []
        self.save()

    def summary(self) -> dict:
        return summarize(self.events)


def summarize(events: Iterable[SessionEvent]) -> dict:
    """
    Totals per posture plus the fall count.

        {"total_events": 3, "fall_count": 1, "last_event": "08:45",
         "postures": {"sitting": {"count": 2, "total_seconds": 620.0}, ...}}
    """
    events = list(events)
    postures = {
        label.value: {'count': 0, 'total_seconds': 0.0}
        for label in SESSION_LABELS
    }
    for e in events:
        bucket = postures[e.type.value]
        bucket['count']         += 1
        bucket['total_seconds'] += e.duration_seconds

    last: Optional[SessionEvent] = events[-1] if events else None
    return {
        'total_events': len(events),
        'fall_count':   sum(1 for e in events if e.type is PostureLabel.FALLING),
        'last_event':   last.timestamp if last else None,
        'postures':     postures,
    }
