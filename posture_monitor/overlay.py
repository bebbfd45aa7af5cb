# posture_monitor/overlay.py

from datetime import datetime
from typing import Optional

import cv2
import numpy as np

from .keypoints import SKELETON_EDGES, visible_mask
from .labels import PostureLabel
from .pipeline import StepResult


# ── Colour palette (BGR) ──────────────────────────────────────────────────────
_COLOUR = {
    PostureLabel.FALLING  : (0,   0,   255),   # red
    PostureLabel.LAYING   : (0,   165, 255),   # orange
    PostureLabel.SITTING  : (255, 200,  0 ),   # teal
    PostureLabel.STANDING : (0,   200,  0 ),   # green
    'pending'             : (0,   220, 220),   # yellow
    'no_pose'             : (180, 180, 180),   # grey
}


def draw_overlay(frame: np.ndarray, result: StepResult,
                 sim_now: Optional[datetime] = None,
                 min_visibility: float = 0.5) -> np.ndarray:
    """
    Return a copy of `frame` with skeleton, posture labels and the clock
    drawn on it. The input frame is left untouched.
    """
    annotated = frame.copy()
    h, _ = annotated.shape[:2]

    if result.keypoints is None:
        _put_text(annotated, 'No pose detected', (20, 40), _COLOUR['no_pose'])
    else:
        colour = _COLOUR.get(result.instantaneous, (255, 255, 255))
        draw_skeleton(annotated, result.keypoints, colour, min_visibility)
        raw = result.instantaneous.value.upper() if result.instantaneous else '-'
        _put_text(annotated, f'RAW : {raw}', (20, 40), colour, scale=0.8)

    posture_colour = _COLOUR.get(result.posture, (255, 255, 255))
    _put_text(annotated, f'POSTURE : {result.posture.value.upper()}', (20, 75),
              posture_colour, scale=0.8)

    if result.fall_confirmed:
        _banner(annotated, 'FALL DETECTED', _COLOUR[PostureLabel.FALLING])
    elif result.fall_pending:
        _banner(annotated, 'confirming fall...', _COLOUR['pending'])
    elif result.sitting_alert:
        _banner(annotated, 'Time to stand up', _COLOUR['pending'])

    if sim_now is not None:
        _put_text(annotated, sim_now.strftime('%H:%M'), (20, h - 20),
                  (255, 255, 255), scale=0.9)

    return annotated


def draw_skeleton(frame: np.ndarray, keypoints: np.ndarray, colour,
                  min_visibility: float = 0.5) -> None:
    """Draw landmarks and connections above min_visibility, in place."""
    h, w = frame.shape[:2]
    mask = visible_mask(keypoints, min_visibility)

    def px(idx):
        return int(keypoints[idx, 0] * w), int(keypoints[idx, 1] * h)

    for a, b in SKELETON_EDGES:
        if mask[a] and mask[b]:
            cv2.line(frame, px(a), px(b), colour, 2)

    for idx in np.flatnonzero(mask):
        cv2.circle(frame, px(idx), 4, colour, -1)


# ── Drawing utilities ─────────────────────────────────────────────────────────

def _put_text(frame, text, origin, colour, scale=0.7, thickness=2):
    cv2.putText(frame, text, origin,
                cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2)
    cv2.putText(frame, text, origin,
                cv2.FONT_HERSHEY_SIMPLEX, scale, colour, thickness)


def _banner(frame, text, colour):
    h, w = frame.shape[:2]
    (tw, th), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_DUPLEX, 1.2, 2)
    x = (w - tw) // 2
    y = 120
    cv2.rectangle(frame, (x - 10, y - th - 10), (x + tw + 10, y + 10),
                  (0, 0, 0), -1)
    cv2.putText(frame, text, (x, y),
                cv2.FONT_HERSHEY_DUPLEX, 1.2, colour, 2)
