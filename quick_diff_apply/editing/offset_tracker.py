"""
Offset tracker — maps a hunk's original position to where its old region
currently sits in a live document that has absorbed other hunks.
"""

from __future__ import annotations

from typing import Mapping


class OffsetTracker:
    """Record measured line deltas of applied hunks, keyed by hunk index.

    The shift for hunk *i* is the sum of the deltas of applied hunks with a
    lower index, whatever order they were applied in.  Hunks that were never
    recorded (pending or skipped) contribute nothing.
    """

    def __init__(self) -> None:
        self._deltas: dict[int, int] = {}

    def record(self, hunk_index: int, delta: int) -> None:
        if hunk_index in self._deltas:
            raise ValueError(f"Delta for hunk {hunk_index} already recorded")
        self._deltas[hunk_index] = delta

    def shift_before(self, hunk_index: int) -> int:
        return sum(d for i, d in self._deltas.items() if i < hunk_index)

    def adjusted_start(self, hunk_index: int, old_start: int) -> int:
        """0-based line where the hunk's old region begins right now."""
        return old_start - 1 + self.shift_before(hunk_index)

    @property
    def deltas(self) -> Mapping[int, int]:
        return dict(self._deltas)

    def __contains__(self, hunk_index: int) -> bool:
        return hunk_index in self._deltas

    def __len__(self) -> int:
        return len(self._deltas)
