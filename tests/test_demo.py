import pytest

from posture_monitor.config import Thresholds
from posture_monitor.demo import DemoScript, run_demo
from posture_monitor.errors import ConfigError
from posture_monitor.event_log import MemorySink
from posture_monitor.labels import PostureLabel
from posture_monitor.sim_clock import SimulatedClock


@pytest.fixture
def clock(t0):
    return SimulatedClock(speed_multiplier=1, start=t0)


def test_ticks_follow_the_script():
    script = DemoScript(PostureLabel.SITTING, event_at_s=2, event_length_s=3, duration_s=6)
    labels = [label for _, label in script.ticks()]
    S, T = PostureLabel.SITTING, PostureLabel.STANDING
    assert labels == [T, T, S, S, S, T, T]


def test_laying_demo(clock, t0):
    result = run_demo(DemoScript(PostureLabel.LAYING), clock)

    assert result.ticks == 301
    assert [e.type for e in result.events] == [PostureLabel.STANDING, PostureLabel.LAYING]
    laying = result.events[1]
    assert laying.duration_seconds == pytest.approx(30 * 60)
    assert laying.timestamp == '08:45'
    assert laying.is_critical is False


def test_falling_demo_is_critical(clock):
    sink = MemorySink()
    result = run_demo(DemoScript(PostureLabel.FALLING), clock, sink=sink)

    assert sink.events == result.events
    fall = result.events[-1]
    assert fall.type is PostureLabel.FALLING
    assert fall.is_critical is True
    # Dated from the first falling tick, not the confirmation
    assert fall.timestamp == '08:45'
    assert fall.duration_seconds == pytest.approx(30 * 60)


def test_sitting_demo_can_trigger_reminder(clock):
    result = run_demo(DemoScript(PostureLabel.SITTING), clock,
                      thresholds=Thresholds(sitting_alert_s=10 * 60))
    assert result.sitting_alerts == 1


def test_default_reminder_needs_longer_sitting(clock):
    assert run_demo(DemoScript(PostureLabel.SITTING), clock).sitting_alerts == 0


@pytest.mark.parametrize('kwargs', [
    {'event_type': PostureLabel.STANDING},
    {'event_type': PostureLabel.UNKNOWN},
    {'event_type': PostureLabel.SITTING, 'duration_s': 0},
    {'event_type': PostureLabel.SITTING, 'event_at_s': -5},
])
def test_invalid_script(kwargs):
    with pytest.raises(ConfigError):
        DemoScript(**kwargs)
