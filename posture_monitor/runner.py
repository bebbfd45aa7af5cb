# posture_monitor/runner.py
"""
The monitoring loop.

One cooperative loop, no worker threads: read the next frame, run pose
inference, step the MonitoringSession, hand any completed session to the
sink. The next frame is only read after the current one is finished, so
frames the model cannot keep up with are simply skipped by the capture
device rather than queued.

Stopping
--------
stop() may be called from a key handler or another thread. No frame is
processed after it, and a pose result that comes back after stop() is
thrown away.

Usage
-----
    runner = MonitorRunner(cv2.VideoCapture('clip.mp4'), estimator, session, sink,
                           clock=SimulatedClock(5, start), media_time=True)
    for frame, result, now in runner.iter_results():
        cv2.imshow('Posture', draw_overlay(frame, result, now))
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Iterator, Optional, Protocol, Tuple

import cv2
import numpy as np

from .event_log import EventSink
from .pipeline import MonitoringSession, StepResult
from .sim_clock import LiveClock

logger = logging.getLogger(__name__)


class PoseSource(Protocol):
    def estimate_pose(self, frame: np.ndarray, timestamp_ms: float) -> Optional[np.ndarray]:
        ...


class Clock(Protocol):
    def now(self, elapsed_real_s: float) -> datetime:
        ...


class MonitorRunner:
    """
    Parameters
    ----------
    capture : cv2.VideoCapture (or anything with read() / get() / release())
    pose : PoseSource
        External pose model.
    session : MonitoringSession
        Fresh session; the runner is its only writer.
    sink : EventSink
        Receives each completed SessionEvent once.
    clock : Clock | None
        Maps elapsed real seconds to session time. LiveClock if None.
    media_time : bool
        Use the capture's playback position as elapsed time (video files).
        Otherwise elapsed time comes from time.monotonic() (cameras).
    max_elapsed_s : float | None
        Stop once this much real / playback time has passed.
    """

    def __init__(
        self,
        capture,
        pose: PoseSource,
        session: MonitoringSession,
        sink: EventSink,
        clock: Optional[Clock] = None,
        media_time: bool = False,
        max_elapsed_s: Optional[float] = None,
    ):
        self._capture       = capture
        self._pose          = pose
        self._session       = session
        self._sink          = sink
        self._clock         = clock or LiveClock()
        self._media_time    = media_time
        self._max_elapsed_s = max_elapsed_s
        self._stop_event    = threading.Event()

        self.frames_processed = 0
        self.frames_failed    = 0
        self.events_emitted   = 0

    # ── Control ───────────────────────────────────────────────────────────────

    def stop(self):
        self._stop_event.set()
        self._session.stop()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    # ── Loop ──────────────────────────────────────────────────────────────────

    def run(self) -> int:
        """Run until the source ends or stop() is called. Returns frames processed."""
        for _ in self.iter_results():
            pass
        return self.frames_processed

    def iter_results(self) -> Iterator[Tuple[np.ndarray, StepResult, datetime]]:
        """Yield (frame, result, session_now) for every processed frame."""
        t0 = time.monotonic()
        try:
            while not self._stop_event.is_set():
                ok, frame = self._capture.read()
                if not ok:
                    logger.info('Video source ended after %d frames', self.frames_processed)
                    break

                elapsed = self._elapsed(t0)
                if self._max_elapsed_s is not None and elapsed >= self._max_elapsed_s:
                    logger.info('Session length of %.1fs reached', self._max_elapsed_s)
                    break

                try:
                    processed = self._process(frame, elapsed)
                except Exception:
                    # One bad frame must never end monitoring
                    self.frames_failed += 1
                    logger.exception('Frame %d failed, skipping', self.frames_processed)
                    continue

                if processed is None:
                    break
                self.frames_processed += 1
                yield processed
        finally:
            self._session.stop()

    def _elapsed(self, t0: float) -> float:
        if self._media_time:
            return max(0.0, self._capture.get(cv2.CAP_PROP_POS_MSEC) / 1000.0)
        return time.monotonic() - t0

    def _process(self, frame: np.ndarray, elapsed: float):
        keypoints = self._pose.estimate_pose(frame, elapsed * 1000.0)
        if self._stop_event.is_set():
            logger.debug('Discarding pose result that arrived after stop()')
            return None

        now    = self._clock.now(elapsed)
        result = self._session.step(keypoints, now)

        if result.event is not None:
            self._sink.emit(result.event)
            self.events_emitted += 1

        return frame, result, now

    def close(self):
        self._capture.release()
