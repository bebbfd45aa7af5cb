from datetime import datetime, timedelta

import numpy as np
import pytest

from posture_monitor.keypoints import NUM_LANDMARKS


def make_pose(points, filler):
    """[33, 4] keypoint set: named landmarks from `points`, the rest at `filler`."""
    ks = np.zeros((NUM_LANDMARKS, 4))
    ks[:, 0], ks[:, 1] = filler
    ks[:, 3] = 0.9
    for idx, (x, y) in points.items():
        ks[idx, 0] = x
        ks[idx, 1] = y
    return ks


# Upright, tall and narrow: torso 90°, height/width = 8
STANDING_POINTS = {
    0:  (0.50, 0.10),
    11: (0.45, 0.25), 12: (0.55, 0.25),
    23: (0.46, 0.50), 24: (0.54, 0.50),
    25: (0.46, 0.70), 26: (0.54, 0.70),
    27: (0.46, 0.90), 28: (0.54, 0.90),
}

# Upright torso, thighs horizontal, shins vertical: box 0.60 x 0.65, knees bent 90°
SITTING_POINTS = {
    0:  (0.30, 0.15),
    11: (0.25, 0.30), 12: (0.35, 0.30),
    23: (0.26, 0.55), 24: (0.34, 0.55),
    25: (0.80, 0.55), 26: (0.85, 0.55),
    27: (0.80, 0.80), 28: (0.85, 0.80),
}

# Lying on the floor, torso about 10° off horizontal, box far wider than tall
FALLING_POINTS = {
    0:  (0.72, 0.63),
    11: (0.60, 0.640), 12: (0.60, 0.654),
    23: (0.30, 0.700), 24: (0.30, 0.700),
    25: (0.17, 0.710), 26: (0.17, 0.710),
    27: (0.05, 0.720), 28: (0.05, 0.720),
}


@pytest.fixture
def standing_pose():
    return make_pose(STANDING_POINTS, filler=(0.50, 0.30))


@pytest.fixture
def sitting_pose():
    return make_pose(SITTING_POINTS, filler=(0.30, 0.40))


@pytest.fixture
def falling_pose():
    return make_pose(FALLING_POINTS, filler=(0.40, 0.68))


@pytest.fixture
def t0():
    return datetime(2024, 1, 1, 8, 0, 0)


def at(t0, seconds):
    return t0 + timedelta(seconds=seconds)
