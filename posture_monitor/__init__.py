# posture_monitor/__init__.py
"""
posture_monitor
===============
Real-time posture and fall monitoring from body keypoints.

Public API
----------
MonitoringSession     — main entry point; feed it keypoints, get StepResult back
StepResult            — dataclass returned by MonitoringSession.step()
SessionEvent          — a completed posture session (what sinks receive)
PostureLabel          — standing | sitting | laying | falling | unknown
Thresholds, SimulationConfig, PoseConfig, load_config — configuration
SimulatedClock, LiveClock — time bases for session timestamps

Individual components (use directly only if you need fine-grained control):
PostureClassifier     — keypoints → instantaneous label
SmoothingWindow       — rolling label history, reports agreed labels
FallConfirmationGate  — holds falls back until they last 5 s
PostureSessionTracker — closes sessions and builds SessionEvents

Video / model glue lives in submodules so the core imports without them:
posture_monitor.pose_estimator (MediaPipe), posture_monitor.runner (loop),
posture_monitor.overlay (OpenCV drawing).

Typical usage
-------------
    from posture_monitor import MonitoringSession, SimulatedClock, Thresholds
    from posture_monitor.event_log import JsonEventLog

    clock   = SimulatedClock(speed_multiplier=5, start=start)
    session = MonitoringSession(Thresholds(), started_at=clock.now(0))
    log     = JsonEventLog('posture_events.json')

    for keypoints, elapsed_s in stream:
        result = session.step(keypoints, clock.now(elapsed_s))
        if result.event:
            log.emit(result.event)
"""

from .labels      import PostureLabel
from .errors      import PostureMonitorError, ConfigError, KeypointTopologyError
from .config      import Thresholds, SimulationConfig, PoseConfig, AppConfig, load_config
from .keypoints   import Keypoint, as_keypoint_set
from .classifier  import PostureClassifier, PostureMetrics
from .smoothing   import SmoothingWindow
from .fall_gate   import FallConfirmationGate
from .session     import PostureSessionTracker, SessionEvent, SittingReminder
from .sim_clock   import SimulatedClock, LiveClock
from .pipeline    import MonitoringSession, StepResult
from .event_log   import MemorySink, JsonEventLog
from .demo        import DemoScript, run_demo

__all__ = [
    'MonitoringSession',
    'StepResult',
    'SessionEvent',
    'PostureLabel',
    'Thresholds',
    'SimulationConfig',
    'PoseConfig',
    'AppConfig',
    'load_config',
    'SimulatedClock',
    'LiveClock',
    'PostureClassifier',
    'PostureMetrics',
    'SmoothingWindow',
    'FallConfirmationGate',
    'PostureSessionTracker',
    'SittingReminder',
    'Keypoint',
    'as_keypoint_set',
    'MemorySink',
    'JsonEventLog',
    'DemoScript',
    'run_demo',
    'PostureMonitorError',
    'ConfigError',
    'KeypointTopologyError',
]

__version__ = '0.1.0'
