# posture_monitor/classifier.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import Thresholds
from .geometry import torso_verticality_angle, bounding_box, leg_straightness_angle
from .labels import PostureLabel


@dataclass(frozen=True)
class PostureMetrics:
    """Geometric signals behind one classification (useful for calibration)."""
    torso_angle: float
    width:       float
    height:      float
    leg_angle:   float

    @property
    def aspect(self) -> float:
        if self.width > 0:
            return self.height / self.width
        return float('inf') if self.height > 0 else 0.0


class PostureClassifier:
    """
    Maps one KeypointSet to an instantaneous posture label.

    Rules, first match wins:
      1. FALLING   torso angle < fall_angle_deg
                   OR width > height * flat_aspect_ratio (catches diagonal
                   falls whose torso angle sits just above the cut-off)
      2. STANDING  torso angle >= standing_angle_deg
                   AND (height / width > standing_aspect_ratio
                        OR straighter leg bend < leg_straightness_deg)
      3. SITTING   everything else

    LAYING is never returned here; only scripted demo sessions produce it.
    Stateless: the same input always gives the same label.
    """

    def __init__(self, thresholds: Thresholds | None = None):
        self.thresholds = thresholds or Thresholds()

    def measure(self, ks: np.ndarray) -> PostureMetrics:
        box = bounding_box(ks)
        return PostureMetrics(
            torso_angle = torso_verticality_angle(ks),
            width       = box.width,
            height      = box.height,
            leg_angle   = leg_straightness_angle(ks),
        )

    def classify(self, ks: Optional[np.ndarray]) -> PostureLabel:
        """ks: [33, 4] keypoint set, or None when no body was found."""
        if ks is None:
            return PostureLabel.UNKNOWN
        return self.classify_metrics(self.measure(ks))

    def classify_metrics(self, m: PostureMetrics) -> PostureLabel:
        t = self.thresholds

        is_flat = m.width > m.height * t.flat_aspect_ratio
        if m.torso_angle < t.fall_angle_deg or is_flat:
            return PostureLabel.FALLING

        if m.torso_angle >= t.standing_angle_deg:
            tall          = m.aspect > t.standing_aspect_ratio
            legs_straight = m.leg_angle < t.leg_straightness_deg
            if tall or legs_straight:
                return PostureLabel.STANDING

        return PostureLabel.SITTING
