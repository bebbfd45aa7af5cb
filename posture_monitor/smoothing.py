# posture_monitor/smoothing.py

from collections import deque
from typing import List, Optional

from .labels import PostureLabel


class SmoothingWindow:
    """
    Rolling history of instantaneous labels that only reports a label once
    recent frames agree on it.

    push() returns a stable label when the window holds at least `quorum`
    entries and at least `quorum` of them are the same label; otherwise it
    returns None and the caller keeps its previous stable state (also held
    here as `current`).

    With size=5, quorum=3:
        [sit, sit, fall, sit, sit]   never reports fall
        ... fall, fall, fall         reports fall on the third push
    """

    def __init__(self, size: int = 5, quorum: int = 3):
        if size < 1:
            raise ValueError(f'size must be >= 1, got {size}')
        if not 1 <= quorum <= size:
            raise ValueError(f'quorum must lie in [1, {size}], got {quorum}')
        self.size    = size
        self.quorum  = quorum
        self._labels = deque(maxlen=size)
        self._current: Optional[PostureLabel] = None

    def push(self, label: PostureLabel) -> Optional[PostureLabel]:
        if label is PostureLabel.UNKNOWN:
            # Absence never votes
            raise ValueError('UNKNOWN labels are not pushed into the history')

        self._labels.append(label)
        if len(self._labels) < self.quorum:
            return None

        stable = self._agreed_label()
        if stable is not None:
            self._current = stable
        return stable

    def _agreed_label(self) -> Optional[PostureLabel]:
        counts = {}
        for label in self._labels:
            counts[label] = counts.get(label, 0) + 1
        # Newest label first so ties (only possible with a minority quorum) favour recency
        for label in reversed(self._labels):
            if counts[label] >= self.quorum:
                return label
        return None

    @property
    def current(self) -> Optional[PostureLabel]:
        """Last stable label reported, held across None pushes."""
        return self._current

    @property
    def labels(self) -> List[PostureLabel]:
        return list(self._labels)

    def clear(self):
        self._labels.clear()
        self._current = None

    def __len__(self) -> int:
        return len(self._labels)
