import numpy as np
import pytest

from posture_monitor.errors import KeypointTopologyError
from posture_monitor.keypoints import (
    NUM_LANDMARKS, Keypoint, as_keypoint_set, point, visible_mask,
)


def test_none_means_no_body():
    assert as_keypoint_set(None) is None


def test_keypoint_objects_are_accepted():
    kps = [Keypoint(x=i / 100, y=0.5, visibility=0.8) for i in range(NUM_LANDMARKS)]
    ks = as_keypoint_set(kps)
    assert ks.shape == (33, 4)
    assert ks[10, 0] == pytest.approx(0.1)
    assert ks[10, 3] == pytest.approx(0.8)


def test_plain_rows_are_accepted():
    ks = as_keypoint_set([(0.1, 0.2, 0.0, 1.0)] * NUM_LANDMARKS)
    assert ks.dtype == float


@pytest.mark.parametrize('data', [
    np.zeros((17, 4)),
    np.zeros((33, 3)),
    np.zeros(132),
    [(0.1, 0.2)] * 33,
    [(0.1, 0.2, 0.0, 1.0)] * 32 + [(0.1, 0.2)],
])
def test_wrong_topology_is_rejected(data):
    with pytest.raises(KeypointTopologyError):
        as_keypoint_set(data)


def test_nan_landmark_is_missing():
    ks = np.zeros((33, 4))
    ks[5, 1] = np.nan
    assert point(ks, 5) is None
    assert point(ks, 6) is not None


def test_visibility_mask_treats_nan_as_hidden():
    ks = np.zeros((33, 4))
    ks[:, 3] = 0.9
    ks[0, 3] = 0.3
    ks[1, 3] = np.nan
    mask = visible_mask(ks, 0.5)
    assert not mask[0] and not mask[1]
    assert mask[2:].all()
