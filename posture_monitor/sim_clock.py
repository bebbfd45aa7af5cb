# posture_monitor/sim_clock.py
"""
Time bases for the monitoring loop.

SimulatedClock lets a short clip stand for a long monitoring period:
one real (or media-playback) second equals `speed_multiplier` simulated
minutes.

    simulated_now = start + elapsed_real_s * speed_multiplier * 60 s

The anchor is fixed when the clock is built. Re-deriving it from mutable
inputs on every tick makes the displayed clock drift, so a settings change
means building a new clock for a new session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .config import SimulationConfig
from .errors import ConfigError


@dataclass(frozen=True)
class SimulatedClock:
    speed_multiplier: float
    start:            datetime

    def __post_init__(self):
        if self.speed_multiplier is None or self.speed_multiplier <= 0:
            raise ConfigError(f'speed_multiplier must be > 0, got {self.speed_multiplier!r}')

    @classmethod
    def from_config(cls, config: SimulationConfig) -> 'SimulatedClock':
        return cls(speed_multiplier=config.speed_multiplier, start=config.start)

    def simulated_seconds(self, elapsed_real_s: float) -> float:
        return elapsed_real_s * self.speed_multiplier * 60.0

    def now(self, elapsed_real_s: float) -> datetime:
        if elapsed_real_s < 0:
            raise ValueError(f'elapsed_real_s must be >= 0, got {elapsed_real_s}')
        return self.start + timedelta(seconds=self.simulated_seconds(elapsed_real_s))


class LiveClock:
    """Wall-clock time base with the same now(elapsed) surface."""

    def __init__(self, start: Optional[datetime] = None):
        self.start = start or datetime.now()

    def now(self, elapsed_real_s: float) -> datetime:
        return self.start + timedelta(seconds=elapsed_real_s)
