# posture_monitor/keypoints.py
"""
Landmark topology and the KeypointSet container.

A KeypointSet is a float ndarray of shape [33, 4] holding
(x, y, z, visibility) per landmark, x / y normalised to [0, 1] of the
frame. This is the same layout MediaPipe pose returns, so the estimator
can hand its array straight through.

A row with NaN x or y counts as a missing landmark for the geometry
helpers. Low visibility does NOT make a landmark missing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np

from .errors import KeypointTopologyError

NUM_LANDMARKS = 33
NUM_COLUMNS   = 4       # x, y, z, visibility

# ── BlazePose landmark indices ───────────────────────────────────────────────
NOSE           = 0
LEFT_SHOULDER  = 11
RIGHT_SHOULDER = 12
LEFT_ELBOW     = 13
RIGHT_ELBOW    = 14
LEFT_WRIST     = 15
RIGHT_WRIST    = 16
LEFT_HIP       = 23
RIGHT_HIP      = 24
LEFT_KNEE      = 25
RIGHT_KNEE     = 26
LEFT_ANKLE     = 27
RIGHT_ANKLE    = 28

LEFT_LEG  = (LEFT_HIP, LEFT_KNEE, LEFT_ANKLE)
RIGHT_LEG = (RIGHT_HIP, RIGHT_KNEE, RIGHT_ANKLE)

# Connections drawn by the overlay (torso, arms, legs)
SKELETON_EDGES = [
    (11, 12), (11, 23), (12, 24), (23, 24),     # torso
    (11, 13), (13, 15), (12, 14), (14, 16),     # arms
    (23, 25), (25, 27), (24, 26), (26, 28),     # legs
]


@dataclass(frozen=True)
class Keypoint:
    """One estimated body landmark."""
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0


KeypointLike = Union[np.ndarray, Sequence[Keypoint], Sequence[Sequence[float]]]


def as_keypoint_set(data: Optional[KeypointLike]) -> Optional[np.ndarray]:
    """
    Normalise pose-model output into a [33, 4] float array.

    Returns None for None (no body detected). Raises KeypointTopologyError
    for anything that is not exactly 33 landmarks of 4 values; a wrong
    length is never padded or truncated.
    """
    if data is None:
        return None

    if isinstance(data, np.ndarray):
        arr = data.astype(float, copy=False)
    else:
        rows = []
        for kp in data:
            if isinstance(kp, Keypoint):
                rows.append((kp.x, kp.y, kp.z, kp.visibility))
            else:
                rows.append(tuple(kp))
        try:
            arr = np.array(rows, dtype=float)
        except ValueError as exc:
            raise KeypointTopologyError(f'Ragged keypoint rows: {exc}') from exc

    if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] != NUM_COLUMNS:
        raise KeypointTopologyError(
            f'Expected a ({NUM_LANDMARKS}, {NUM_COLUMNS}) keypoint set, got shape {arr.shape}'
        )
    return arr


def point(ks: np.ndarray, idx: int) -> Optional[np.ndarray]:
    """(x, y) of one landmark, or None if it is missing (NaN)."""
    xy = ks[idx, :2]
    if np.isnan(xy).any():
        return None
    return xy


def visible_mask(ks: np.ndarray, min_visibility: float) -> np.ndarray:
    """Boolean mask of landmarks confident enough to draw."""
    vis = np.nan_to_num(ks[:, 3], nan=0.0)
    return vis > min_visibility
