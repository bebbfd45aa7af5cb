import numpy as np

from posture_monitor.labels import PostureLabel
from posture_monitor.overlay import draw_overlay
from posture_monitor.pipeline import StepResult


def blank():
    return np.zeros((240, 320, 3), dtype=np.uint8)


def test_frame_is_not_modified(standing_pose, t0):
    frame = blank()
    result = StepResult(PostureLabel.STANDING, PostureLabel.STANDING,
                        PostureLabel.STANDING, keypoints=standing_pose)
    annotated = draw_overlay(frame, result, sim_now=t0)

    assert not frame.any()
    assert annotated.shape == frame.shape
    assert annotated.any()


def test_fall_banner_is_red(falling_pose):
    result = StepResult(PostureLabel.FALLING, PostureLabel.FALLING,
                        PostureLabel.FALLING, fall_confirmed=True, keypoints=falling_pose)
    annotated = draw_overlay(blank(), result)
    # Pure red (BGR) pixels only come from the banner / skeleton
    red = (annotated[..., 2] == 255) & (annotated[..., 0] == 0) & (annotated[..., 1] == 0)
    assert red.any()


def test_no_pose_still_draws_status():
    result = StepResult(None, None, PostureLabel.SITTING)
    assert draw_overlay(blank(), result).any()
