# posture_monitor/pose_estimator.py

import logging
from pathlib import Path

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from .config import PoseConfig
from .keypoints import as_keypoint_set

logger = logging.getLogger(__name__)


class PoseEstimator:
    """
    MediaPipe PoseLandmarker wrapper running in VIDEO mode, one person.

    estimate_pose(frame_bgr, timestamp_ms) returns the full [33, 4]
    (x, y, z, visibility) array in normalised [0, 1] coords, or None when
    no body is found. Low-visibility landmarks are passed through as-is;
    deciding what to trust is up to the consumer.

    The model file (.task) is the one published for the Tasks API, e.g.
    pose_landmarker_lite.task.
    """

    def __init__(self, config: PoseConfig = None):
        self.config = config or PoseConfig()

        model_path = Path(self.config.model_path)
        if not model_path.exists():
            raise RuntimeError(f'Pose model not found: {model_path}')

        options = vision.PoseLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=str(model_path)),
            running_mode=vision.RunningMode.VIDEO,
            num_poses=1,
            min_pose_detection_confidence=self.config.min_detection_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )
        logger.info('Loading pose model: %s', model_path)
        self._landmarker = vision.PoseLandmarker.create_from_options(options)
        self._last_ts_ms = -1

    def estimate_pose(self, frame_bgr: np.ndarray, timestamp_ms: float):
        """
        Run inference on one BGR frame. The frame itself is not modified.

        VIDEO mode needs strictly increasing timestamps, so a repeated or
        backwards timestamp is nudged forward by 1 ms.
        """
        ts = int(timestamp_ms)
        if ts <= self._last_ts_ms:
            ts = self._last_ts_ms + 1
        self._last_ts_ms = ts

        rgb    = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        image  = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self._landmarker.detect_for_video(image, ts)

        if not result.pose_landmarks:
            return None

        lm  = result.pose_landmarks[0]
        arr = np.array([
            [p.x, p.y, p.z, p.visibility if p.visibility is not None else 0.0]
            for p in lm
        ])
        return as_keypoint_set(arr)

    def close(self):
        self._landmarker.close()
