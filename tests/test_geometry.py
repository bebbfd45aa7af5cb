import numpy as np
import pytest

from posture_monitor.geometry import (
    BoundingBox, bounding_box, joint_bend_angle,
    leg_straightness_angle, torso_verticality_angle,
    MISSING_LEG_ANGLE, MISSING_TORSO_ANGLE,
)


def test_torso_upright_is_90(standing_pose):
    assert torso_verticality_angle(standing_pose) == pytest.approx(90.0)


def test_torso_lying_is_near_10(falling_pose):
    assert torso_verticality_angle(falling_pose) == pytest.approx(10.0, abs=0.1)


def test_torso_angle_ignores_direction(standing_pose):
    # Upside down (shoulders below hips) is still vertical
    flipped = standing_pose.copy()
    flipped[:, 1] = 1.0 - flipped[:, 1]
    assert torso_verticality_angle(flipped) == pytest.approx(90.0)


def test_missing_shoulder_gives_flat_torso(standing_pose):
    standing_pose[11, :2] = np.nan
    assert torso_verticality_angle(standing_pose) == MISSING_TORSO_ANGLE == 0.0


def test_low_visibility_is_not_missing(standing_pose):
    standing_pose[:, 3] = 0.01
    assert torso_verticality_angle(standing_pose) == pytest.approx(90.0)


def test_bounding_box_uses_all_landmarks(standing_pose):
    standing_pose[:, 3] = 0.0
    box = bounding_box(standing_pose)
    assert box.width == pytest.approx(0.10)
    assert box.height == pytest.approx(0.80)
    assert box.aspect == pytest.approx(8.0)


def test_bounding_box_skips_nan_rows(standing_pose):
    standing_pose[0, :2] = np.nan       # nose was the top of the box
    assert bounding_box(standing_pose).height == pytest.approx(0.65)


def test_bounding_box_aspect_edge_cases():
    assert BoundingBox(0.0, 0.5).aspect == float('inf')
    assert BoundingBox(0.0, 0.0).aspect == 0.0


def test_straight_leg_is_zero(standing_pose):
    assert leg_straightness_angle(standing_pose) == pytest.approx(0.0, abs=1e-3)


def test_bent_knee_is_90(sitting_pose):
    assert leg_straightness_angle(sitting_pose) == pytest.approx(90.0)


def test_missing_leg_falls_back_to_other_side(sitting_pose, standing_pose):
    # Left leg gone: the straight right leg still counts
    standing_pose[27, :2] = np.nan
    assert leg_straightness_angle(standing_pose) == pytest.approx(0.0, abs=1e-3)

    sitting_pose[25, :2] = np.nan
    sitting_pose[26, :2] = np.nan
    assert leg_straightness_angle(sitting_pose) == MISSING_LEG_ANGLE


def test_joint_bend_degenerate_segment_is_straight():
    a = np.array([0.5, 0.5])
    assert joint_bend_angle(a, a.copy(), np.array([0.5, 0.9])) == 0.0


def test_joint_bend_folded_back_is_180():
    angle = joint_bend_angle(np.array([0.0, 0.0]), np.array([0.0, 1.0]), np.array([0.0, 0.0]))
    assert angle == pytest.approx(180.0)
