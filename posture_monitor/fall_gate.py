# posture_monitor/fall_gate.py

from datetime import datetime, timedelta
from typing import Optional

from .labels import PostureLabel


class FallConfirmationGate:
    """
    Holds a falling reading back until it has lasted confirm_delay_s.

    observe(FALLING, now)  starts the candidate timer on the first call,
                           returns True once now - start >= delay
    observe(other, now)    resets the timer, returns False

    A False return for FALLING means "no change yet", not any other posture.
    """

    def __init__(self, confirm_delay_s: float = 5.0):
        if confirm_delay_s < 0:
            raise ValueError(f'confirm_delay_s must be >= 0, got {confirm_delay_s}')
        self._delay = timedelta(seconds=confirm_delay_s)
        self._candidate_start: Optional[datetime] = None

    def observe(self, label: PostureLabel, now: datetime) -> bool:
        if label is not PostureLabel.FALLING:
            self._candidate_start = None
            return False

        if self._candidate_start is None:
            self._candidate_start = now
        return now - self._candidate_start >= self._delay

    @property
    def candidate_started_at(self) -> Optional[datetime]:
        """When the current unbroken falling streak began, or None."""
        return self._candidate_start

    @property
    def confirm_delay_s(self) -> float:
        return self._delay.total_seconds()

    def pending(self, now: datetime) -> bool:
        """True while a falling streak is running but not yet confirmed."""
        return self._candidate_start is not None and now - self._candidate_start < self._delay

    def reset(self):
        self._candidate_start = None
