# posture_monitor/pipeline.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import numpy as np

from .classifier import PostureClassifier, PostureMetrics
from .config import Thresholds
from .fall_gate import FallConfirmationGate
from .keypoints import KeypointLike, as_keypoint_set
from .labels import PostureLabel
from .session import PostureSessionTracker, SessionEvent, SittingReminder, format_duration
from .smoothing import SmoothingWindow

logger = logging.getLogger(__name__)


# ── Result dataclass ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StepResult:
    """
    Everything the session produces for a single frame.

    instantaneous  : raw classifier label, or None when no body was found
    stable         : last label the smoothing window agreed on (None while warming up)
    posture        : confirmed posture held by the session tracker
    fall_pending   : a falling streak is waiting out the confirmation delay
    fall_confirmed : the fall gate currently reports a confirmed fall
    event          : completed session closed on this frame, if any
    sitting_alert  : prolonged-sitting reminder fired on this frame
    metrics        : geometric signals behind `instantaneous`
    keypoints      : [33, 4] landmark array, or None
    """
    instantaneous  : Optional[PostureLabel]
    stable         : Optional[PostureLabel]
    posture        : PostureLabel
    fall_pending   : bool = False
    fall_confirmed : bool = False
    event          : Optional[SessionEvent] = None
    sitting_alert  : bool = False
    metrics        : Optional[PostureMetrics] = None
    keypoints      : Optional[np.ndarray] = None


class MonitoringSession:
    """
    Single owner of all per-session state: smoothing window, fall gate,
    session tracker and sitting reminder. Build a fresh one per monitoring
    session (and per test); nothing is shared between instances.

    Every frame goes through:
      • PostureClassifier  — instantaneous label
      • SmoothingWindow    — stable label once recent frames agree
      • FallConfirmationGate (stable FALLING only) — 5 s hold before confirming
      • PostureSessionTracker — closes the previous session on a change

    A confirmed fall is dated from the moment the smoothed stream first
    showed falling (the gate's candidate start), so the falling session
    covers the confirmation delay and the session before it ends there.
    Leaving FALLING is gated by smoothing only.

    Usage
    -----
        session = MonitoringSession(Thresholds(), started_at=clock.now(0))
        for keypoints, now in frames:
            result = session.step(keypoints, now)
            if result.event:
                sink.emit(result.event)
        session.stop()
    """

    def __init__(self, thresholds: Thresholds | None = None,
                 started_at: datetime | None = None):
        self.thresholds = thresholds or Thresholds()
        started_at = started_at or datetime.now()

        t = self.thresholds
        self._classifier = PostureClassifier(t)
        self._window     = SmoothingWindow(t.smoothing_window, t.smoothing_quorum)
        self._gate       = FallConfirmationGate(t.fall_confirm_delay_s)
        self._tracker    = PostureSessionTracker(started_at, t.min_session_s)
        self._reminder   = SittingReminder(t.sitting_alert_s)
        self._stopped    = False

    # ── Main entry points ─────────────────────────────────────────────────────

    def step(self, keypoints: Optional[KeypointLike], now: datetime) -> StepResult:
        """
        Process one frame's keypoints.

        keypoints : [33, 4] landmarks or None (no body). None skips the
                    frame without touching any history.
        now       : frame instant in the session's time base.

        Raises KeypointTopologyError for a landmark set that is not 33 x 4.
        """
        if self._stopped:
            return self._snapshot(now)

        ks = as_keypoint_set(keypoints)
        if ks is None:
            return self._snapshot(now)

        metrics = self._classifier.measure(ks)
        label   = self._classifier.classify_metrics(metrics)

        self._window.push(label)
        return self._advance(self._window.current, now,
                             instantaneous=label, metrics=metrics, keypoints=ks)

    def apply_label(self, label: PostureLabel, now: datetime) -> StepResult:
        """
        Feed an already-stable label, bypassing classification and
        smoothing. Used by scripted demo sessions. Falls still go through
        the confirmation gate.
        """
        if label is PostureLabel.UNKNOWN:
            raise ValueError('UNKNOWN cannot be applied as a stable label')
        if self._stopped:
            return self._snapshot(now)
        return self._advance(label, now, instantaneous=label)

    def stop(self):
        """No further events are produced after this call."""
        self._stopped = True

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def posture(self) -> PostureLabel:
        return self._tracker.current_posture

    @property
    def posture_started_at(self) -> datetime:
        return self._tracker.started_at

    @property
    def classifier(self) -> PostureClassifier:
        return self._classifier

    @property
    def window(self) -> SmoothingWindow:
        return self._window

    @property
    def gate(self) -> FallConfirmationGate:
        return self._gate

    # ── Private helpers ───────────────────────────────────────────────────────

    def _advance(self, stable: Optional[PostureLabel], now: datetime, *,
                 instantaneous: Optional[PostureLabel] = None,
                 metrics: Optional[PostureMetrics] = None,
                 keypoints: Optional[np.ndarray] = None) -> StepResult:
        event     = None
        confirmed = False

        if stable is PostureLabel.FALLING:
            confirmed = self._gate.observe(PostureLabel.FALLING, now)
            if confirmed and self._tracker.current_posture is not PostureLabel.FALLING:
                fall_start = self._gate.candidate_started_at
                logger.warning('Fall confirmed (falling since %s)', fall_start.isoformat())
                event = self._tracker.on_stable_label(PostureLabel.FALLING, fall_start)
        elif stable is not None:
            self._gate.observe(stable, now)
            event = self._tracker.on_stable_label(stable, now)

        if event is not None:
            log = logger.warning if event.is_critical else logger.info
            log('Session ended: %s for %s (from %s)',
                event.type.value, event.duration_text, event.started_at.isoformat())

        sitting_alert = self._reminder.update(self._tracker.current_posture, now)
        if sitting_alert:
            logger.info('Prolonged sitting: %s', format_duration(self._reminder.sitting_seconds(now)))

        return StepResult(
            instantaneous  = instantaneous,
            stable         = stable,
            posture        = self._tracker.current_posture,
            fall_pending   = self._gate.pending(now),
            fall_confirmed = confirmed,
            event          = event,
            sitting_alert  = sitting_alert,
            metrics        = metrics,
            keypoints      = keypoints,
        )

    def _snapshot(self, now: datetime) -> StepResult:
        return StepResult(
            instantaneous = None,
            stable        = self._window.current,
            posture       = self._tracker.current_posture,
            fall_pending  = False if self._stopped else self._gate.pending(now),
        )
