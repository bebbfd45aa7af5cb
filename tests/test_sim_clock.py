from datetime import datetime, timedelta

import pytest

from posture_monitor.config import SimulationConfig
from posture_monitor.errors import ConfigError
from posture_monitor.sim_clock import LiveClock, SimulatedClock


def test_one_real_minute_at_speed_five_is_five_hours():
    clock = SimulatedClock(speed_multiplier=5, start=datetime(2024, 1, 1, 8, 0))
    assert clock.now(60) == datetime(2024, 1, 1, 13, 0)


def test_zero_elapsed_is_start(t0):
    assert SimulatedClock(3, t0).now(0) == t0


def test_monotonic_in_elapsed(t0):
    clock = SimulatedClock(2.5, t0)
    stamps = [clock.now(e / 10) for e in range(50)]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)


def test_simulated_seconds(t0):
    assert SimulatedClock(1, t0).simulated_seconds(1.5) == pytest.approx(90.0)


@pytest.mark.parametrize('speed', [0, -1, None])
def test_invalid_speed(t0, speed):
    with pytest.raises(ConfigError):
        SimulatedClock(speed, t0)


def test_negative_elapsed_rejected(t0):
    with pytest.raises(ValueError):
        SimulatedClock(1, t0).now(-0.1)


def test_from_config(t0):
    clock = SimulatedClock.from_config(SimulationConfig(speed_multiplier=4, start=t0))
    assert clock.speed_multiplier == 4
    assert clock.now(15) == t0 + timedelta(hours=1)


def test_live_clock_is_real_time(t0):
    assert LiveClock(t0).now(2.5) == t0 + timedelta(seconds=2.5)
