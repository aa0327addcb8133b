"""
Review session — hunk-by-hunk apply/reject of one file diff against a live
document, without ever recomputing the diff.

The session keeps a status per hunk and the measured line delta of every
applied hunk.  From those it derives where each remaining hunk's old region
currently sits, so hunks can be applied in any order.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Mapping

from .document import DocumentEditor, LineRange
from .errors import EditorRejectedEdit, InvalidHunkIndex, SessionClosed
from .hunk_model import FileDiff, Hunk
from .offset_tracker import OffsetTracker

logger = logging.getLogger(__name__)


class HunkStatus(enum.Enum):
    PENDING = "pending"
    APPLIED = "applied"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self is not HunkStatus.PENDING


@dataclass
class BulkApplyResult:
    """Result of ``apply_all_remaining``."""
    success: bool = False
    applied: list[int] = field(default_factory=list)
    failed_hunk: int | None = None
    error: str = ""


class ReviewSession:
    """Interactive review state for one file diff against one document.

    The caller owns the session; starting a review for another document
    means discarding this one first.
    """

    def __init__(self, file_diff: FileDiff, editor: DocumentEditor) -> None:
        self._diff = file_diff
        self._editor = editor
        self._status: dict[int, HunkStatus] = {
            i: HunkStatus.PENDING for i in range(len(file_diff.hunks))
        }
        self._offsets = OffsetTracker()
        self._active: int | None = None
        self._closed = False

        logger.info(
            "[Review] Started review of %s (%d hunks)",
            file_diff.path or "<unnamed>", len(file_diff.hunks),
        )
        self._advance()
        if not self._status:
            self._close("empty diff")

    # ------------------------------------------------------------------
    # Read-only state (pulled by presentation adapters)
    # ------------------------------------------------------------------

    @property
    def file_diff(self) -> FileDiff:
        return self._diff

    @property
    def hunks(self) -> tuple[Hunk, ...]:
        return self._diff.hunks

    @property
    def editor(self) -> DocumentEditor:
        return self._editor

    @property
    def status(self) -> Mapping[int, HunkStatus]:
        return dict(self._status)

    @property
    def net_line_delta(self) -> Mapping[int, int]:
        return self._offsets.deltas

    @property
    def active_hunk(self) -> int | None:
        return self._active

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def all_processed(self) -> bool:
        return all(s.is_terminal for s in self._status.values())

    def indices_with(self, status: HunkStatus) -> list[int]:
        return [i for i, s in self._status.items() if s is status]

    def get_adjusted_start_line(self, hunk_index: int) -> int:
        """0-based line where hunk *hunk_index*'s old region currently sits."""
        hunk = self._hunk(hunk_index)
        return self._offsets.adjusted_start(hunk_index, hunk.old_start)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def preview_hunk(self, hunk_index: int) -> None:
        self._ensure_open()
        self._require_pending(hunk_index)
        self._active = hunk_index

    def apply_hunk(self, hunk_index: int) -> int:
        """Apply one pending hunk to the document.

        Returns
        -------
        int
            The measured net line delta of the edit.

        Raises
        ------
        InvalidHunkIndex
            The index is out of range or the hunk is not pending.
        EditorRejectedEdit
            The range is outside the document or the editor refused the
            edit.  The hunk stays pending and the session stays open.
        """
        self._ensure_open()
        self._require_pending(hunk_index)

        delta = self._apply_one(hunk_index)
        self._advance()
        if self.all_processed:
            self._close("all hunks processed")
        return delta

    def skip_hunk(self, hunk_index: int) -> None:
        self._ensure_open()
        self._hunk(hunk_index)
        if self._status[hunk_index] is HunkStatus.APPLIED:
            raise InvalidHunkIndex(hunk_index, "already applied")

        self._status[hunk_index] = HunkStatus.SKIPPED
        logger.info("[Review] Hunk %d rejected", hunk_index + 1)
        self._advance()
        if self.all_processed:
            self._close("all hunks processed")

    def apply_all_remaining(self) -> BulkApplyResult:
        """Apply every pending hunk in index order, stopping at the first failure."""
        self._ensure_open()
        result = BulkApplyResult()

        for hunk_index in self.indices_with(HunkStatus.PENDING):
            try:
                self._apply_one(hunk_index)
            except EditorRejectedEdit as exc:
                logger.warning(
                    "[Review] Apply-all stopped at hunk %d: %s",
                    hunk_index + 1, exc,
                )
                result.failed_hunk = hunk_index
                result.error = str(exc)
                self._active = hunk_index
                return result
            result.applied.append(hunk_index)

        result.success = True
        self._active = None
        self._close("all remaining hunks applied")
        return result

    def discard_all(self) -> None:
        """Stop reviewing.  Hunks already applied stay in the document."""
        self._ensure_open()
        self._close("discarded by user")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_one(self, hunk_index: int) -> int:
        hunk = self._diff.hunks[hunk_index]
        start = max(self.get_adjusted_start_line(hunk_index), 0)
        line_range_end = start + hunk.old_line_count
        text = "".join(line + "\n" for line in hunk.replacement_lines)

        before = self._editor.current_line_count()
        if line_range_end > before:
            raise EditorRejectedEdit(
                hunk_index,
                f"lines [{start}, {line_range_end}) are outside the "
                f"{before}-line document",
            )

        try:
            ok = self._editor.replace_lines(LineRange(start, line_range_end), text)
        except (OSError, ValueError) as exc:
            raise EditorRejectedEdit(hunk_index, str(exc)) from exc
        if not ok:
            raise EditorRejectedEdit(hunk_index, "the editor rejected the edit")

        delta = self._editor.current_line_count() - before
        self._status[hunk_index] = HunkStatus.APPLIED
        self._offsets.record(hunk_index, delta)
        logger.info(
            "[Review] Hunk %d applied at line %d (delta %+d)",
            hunk_index + 1, start + 1, delta,
        )
        return delta

    def _advance(self) -> None:
        pending = self.indices_with(HunkStatus.PENDING)
        self._active = pending[0] if pending else None

    def _close(self, reason: str) -> None:
        self._closed = True
        self._active = None
        logger.info(
            "[Review] Session closed (%s): %d applied, %d skipped, %d pending",
            reason,
            len(self.indices_with(HunkStatus.APPLIED)),
            len(self.indices_with(HunkStatus.SKIPPED)),
            len(self.indices_with(HunkStatus.PENDING)),
        )

    def _hunk(self, hunk_index: int) -> Hunk:
        if not isinstance(hunk_index, int) or not 0 <= hunk_index < len(self._diff.hunks):
            raise InvalidHunkIndex(hunk_index)
        return self._diff.hunks[hunk_index]

    def _require_pending(self, hunk_index: int) -> None:
        self._hunk(hunk_index)
        status = self._status[hunk_index]
        if status is not HunkStatus.PENDING:
            raise InvalidHunkIndex(hunk_index, f"hunk is {status.value}")

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosed("The review session has ended")
