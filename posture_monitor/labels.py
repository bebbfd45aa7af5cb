# posture_monitor/labels.py

from enum import Enum


class PostureLabel(str, Enum):
    """
    Posture values shared by the classifier, the smoothing window and the
    session tracker. UNKNOWN marks "no body this frame" and is never pushed
    into history or written to an event.
    """
    STANDING = 'standing'
    SITTING  = 'sitting'
    LAYING   = 'laying'
    FALLING  = 'falling'
    UNKNOWN  = 'unknown'

    def __str__(self) -> str:
        return self.value


# Labels a session can hold (everything except UNKNOWN)
SESSION_LABELS = (
    PostureLabel.STANDING,
    PostureLabel.SITTING,
    PostureLabel.LAYING,
    PostureLabel.FALLING,
)
