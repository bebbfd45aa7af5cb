# posture_monitor/demo.py
"""
Scripted demo sessions.

Without a video the monitor runs a fixed script instead of pose
inference: the person stands, adopts the configured posture at
`event_at_s`, holds it for `event_length_s`, then stands again until the
clip ends. Each real second of the script is one tick on the simulated
clock, so at speed 5 a five-minute script covers 25 simulated hours.

This is the only path that produces LAYING; live keypoints are never
classified as laying.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from .config import Thresholds
from .errors import ConfigError
from .event_log import EventSink, MemorySink
from .labels import PostureLabel
from .pipeline import MonitoringSession
from .session import SessionEvent
from .sim_clock import SimulatedClock

logger = logging.getLogger(__name__)

DEMO_EVENT_TYPES = (PostureLabel.SITTING, PostureLabel.LAYING, PostureLabel.FALLING)

DEFAULT_DEMO_DURATION_S = 5 * 60


@dataclass(frozen=True)
class DemoScript:
    event_type:     PostureLabel
    event_at_s:     float = 45.0
    event_length_s: float = 30.0
    duration_s:     float = DEFAULT_DEMO_DURATION_S
    tick_s:         float = 1.0

    def __post_init__(self):
        if self.event_type not in DEMO_EVENT_TYPES:
            raise ConfigError(
                f"Demo event must be one of {[e.value for e in DEMO_EVENT_TYPES]}, "
                f"got {self.event_type!r}"
            )
        for name in ('duration_s', 'tick_s', 'event_length_s'):
            if getattr(self, name) <= 0:
                raise ConfigError(f'{name} must be > 0')
        if self.event_at_s < 0:
            raise ConfigError('event_at_s must be >= 0')

    def ticks(self) -> Iterator[Tuple[float, PostureLabel]]:
        """(elapsed_real_s, posture) once per tick, from 0 to duration_s."""
        event_end = self.event_at_s + self.event_length_s
        n_ticks = int(self.duration_s / self.tick_s)
        for i in range(n_ticks + 1):
            elapsed = i * self.tick_s
            if self.event_at_s <= elapsed < event_end:
                yield elapsed, self.event_type
            else:
                yield elapsed, PostureLabel.STANDING


@dataclass
class DemoResult:
    events:         List[SessionEvent] = field(default_factory=list)
    sitting_alerts: int = 0
    ticks:          int = 0


def run_demo(script: DemoScript, clock: SimulatedClock,
             thresholds: Thresholds | None = None,
             sink: EventSink | None = None) -> DemoResult:
    """
    Play a script through a fresh MonitoringSession on the simulated clock.
    Returns every emitted event (also handed to `sink` if given).
    """
    session = MonitoringSession(thresholds, started_at=clock.now(0.0))
    sink    = sink or MemorySink()
    result  = DemoResult()

    logger.info('Demo: %s at %.0fs for %.0fs, speed %sx',
                script.event_type.value, script.event_at_s,
                script.event_length_s, clock.speed_multiplier)

    for elapsed, label in script.ticks():
        step = session.apply_label(label, clock.now(elapsed))
        result.ticks += 1
        if step.sitting_alert:
            result.sitting_alerts += 1
        if step.event is not None:
            sink.emit(step.event)
            result.events.append(step.event)

    session.stop()
    return result
