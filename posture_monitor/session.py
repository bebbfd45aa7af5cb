# posture_monitor/session.py
"""
Completed-session tracking.

The tracker holds the confirmed posture and when it started. On every
confirmed change it closes the previous session and, if that session
lasted longer than min_session_s, returns a SessionEvent describing it.
Events are retrospective ("was sitting for 5m"); callers that need the
live state read the tracker or the fall gate directly.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .labels import PostureLabel, SESSION_LABELS

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    """'4m 5s', or '1h 4m 5s' once an hour is reached."""
    total = int(seconds)
    hrs, rem  = divmod(total, 3600)
    mins, sec = divmod(rem, 60)
    text = f'{mins}m {sec}s'
    return f'{hrs}h {text}' if hrs > 0 else text


@dataclass(frozen=True)
class SessionEvent:
    """
    One completed posture session.

    type             posture that just ended
    started_at       when that posture began (simulated time in demo mode)
    duration_seconds how long it lasted
    is_critical      True iff the ended posture was FALLING
    """
    type:             PostureLabel
    started_at:       datetime
    duration_seconds: float
    is_critical:      bool
    id:               str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def timestamp(self) -> str:
        return self.started_at.strftime('%H:%M')

    @property
    def duration_text(self) -> str:
        return format_duration(self.duration_seconds)

    def to_dict(self) -> dict:
        return {
            'id':               self.id,
            'type':             self.type.value,
            'timestamp':        self.timestamp,
            'started_at':       self.started_at.isoformat(),
            'duration_seconds': round(self.duration_seconds, 3),
            'duration':         self.duration_text,
            'is_critical':      self.is_critical,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionEvent':
        return cls(
            id               = data['id'],
            type             = PostureLabel(data['type']),
            started_at       = datetime.fromisoformat(data['started_at']),
            duration_seconds = float(data['duration_seconds']),
            is_critical      = bool(data['is_critical']),
        )


class PostureSessionTracker:
    """
    Usage
    -----
        tracker = PostureSessionTracker(started_at=now)
        event = tracker.on_stable_label(PostureLabel.SITTING, now)
        if event:
            sink.emit(event)
    """

    def __init__(
        self,
        started_at: datetime,
        min_session_s: float = 2.0,
        initial: PostureLabel = PostureLabel.STANDING,
    ):
        if initial not in SESSION_LABELS:
            raise ValueError(f'Invalid initial posture: {initial!r}')
        self._posture    = initial
        self._started_at = started_at
        self._min_session_s = min_session_s

    @property
    def current_posture(self) -> PostureLabel:
        return self._posture

    @property
    def started_at(self) -> datetime:
        return self._started_at

    def elapsed(self, now: datetime) -> float:
        """Seconds spent in the current posture so far."""
        return (now - self._started_at).total_seconds()

    def on_stable_label(self, label: PostureLabel, now: datetime) -> Optional[SessionEvent]:
        if label not in SESSION_LABELS:
            raise ValueError(f'Cannot track posture {label!r}')
        if label is self._posture:
            return None

        ended    = self._posture
        duration = self.elapsed(now)
        event    = None

        if duration > self._min_session_s:
            event = SessionEvent(
                type             = ended,
                started_at       = self._started_at,
                duration_seconds = duration,
                is_critical      = ended is PostureLabel.FALLING,
            )
        else:
            logger.debug('Dropped %s session of %.2fs (below %.1fs)',
                         ended.value, duration, self._min_session_s)

        logger.debug('Posture %s -> %s at %s', ended.value, label.value, now.isoformat())
        self._posture    = label
        self._started_at = now
        return event


class SittingReminder:
    """
    Fires once when the person has been sitting continuously for
    threshold_s, then stays quiet until they get up again.
    """

    def __init__(self, threshold_s: float = 45 * 60):
        self.threshold_s = threshold_s
        self._sitting_since: Optional[datetime] = None
        self._notified = False

    def update(self, posture: PostureLabel, now: datetime) -> bool:
        if posture is not PostureLabel.SITTING:
            self._sitting_since = None
            self._notified      = False
            return False

        if self._sitting_since is None:
            self._sitting_since = now

        if not self._notified and (now - self._sitting_since).total_seconds() >= self.threshold_s:
            self._notified = True
            return True
        return False

    def sitting_seconds(self, now: datetime) -> float:
        if self._sitting_since is None:
            return 0.0
        return (now - self._sitting_since).total_seconds()
