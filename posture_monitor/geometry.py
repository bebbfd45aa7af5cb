# posture_monitor/geometry.py
"""
Scalar body signals computed from one KeypointSet.

All helpers are pure and fail-soft: a missing landmark gives a fixed
default instead of an exception, so classification degrades rather than
crashes.

    torso_verticality_angle   90 = upright, 0 = flat
    bounding_box              width / height over all 33 landmarks
    leg_straightness_angle    0 = straight leg, 180 = fully folded
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .keypoints import (
    LEFT_SHOULDER, RIGHT_SHOULDER, LEFT_HIP, RIGHT_HIP,
    LEFT_LEG, RIGHT_LEG, point,
)

# Returned for a leg whose hip, knee or ankle is missing
MISSING_LEG_ANGLE = 180.0

# Returned when shoulders or hips are missing.
# NOTE: biases partial occlusion toward "falling".
MISSING_TORSO_ANGLE = 0.0


@dataclass(frozen=True)
class BoundingBox:
    width: float
    height: float

    @property
    def aspect(self) -> float:
        """height / width. inf for a zero-width box with some height."""
        if self.width > 0:
            return self.height / self.width
        return float('inf') if self.height > 0 else 0.0


def _midpoint(ks: np.ndarray, idx_a: int, idx_b: int) -> Optional[np.ndarray]:
    a = point(ks, idx_a)
    b = point(ks, idx_b)
    if a is None or b is None:
        return None
    return (a + b) / 2.0


def torso_verticality_angle(ks: np.ndarray) -> float:
    """
    Angle in degrees between the hip→shoulder vector and the horizontal.

    Uses the shoulder midpoint (11, 12) and the hip midpoint (23, 24).
    Returns MISSING_TORSO_ANGLE if any of the four landmarks is missing.
    """
    shoulder_mid = _midpoint(ks, LEFT_SHOULDER, RIGHT_SHOULDER)
    hip_mid      = _midpoint(ks, LEFT_HIP, RIGHT_HIP)
    if shoulder_mid is None or hip_mid is None:
        return MISSING_TORSO_ANGLE

    dx, dy = shoulder_mid - hip_mid
    return float(np.degrees(np.arctan2(abs(dy), abs(dx))))


def bounding_box(ks: np.ndarray) -> BoundingBox:
    """Extent of every landmark, regardless of visibility."""
    xs = ks[:, 0]
    ys = ks[:, 1]
    if np.isnan(xs).all() or np.isnan(ys).all():
        return BoundingBox(0.0, 0.0)
    return BoundingBox(
        width  = float(np.nanmax(xs) - np.nanmin(xs)),
        height = float(np.nanmax(ys) - np.nanmin(ys)),
    )


def joint_bend_angle(a: Optional[np.ndarray],
                     b: Optional[np.ndarray],
                     c: Optional[np.ndarray]) -> float:
    """
    Bend at b between segments a→b and b→c, in degrees.
    0 when the three points are collinear (straight limb).
    """
    if a is None or b is None or c is None:
        return MISSING_LEG_ANGLE

    ab = b - a
    bc = c - b
    mags = np.linalg.norm(ab) * np.linalg.norm(bc)
    if mags == 0:
        return 0.0

    cosine = np.clip(np.dot(ab, bc) / mags, -1.0, 1.0)
    return float(np.degrees(np.arccos(cosine)))


def leg_straightness_angle(ks: np.ndarray) -> float:
    """Bend of the straighter of the two legs."""
    left  = joint_bend_angle(*(point(ks, i) for i in LEFT_LEG))
    right = joint_bend_angle(*(point(ks, i) for i in RIGHT_LEG))
    return min(left, right)
