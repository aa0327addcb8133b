"""
quick_diff_apply — apply unified diffs all at once or hunk by hunk.

Public API for library usage::

    from quick_diff_apply import DiffParser, InMemoryDocument, ReviewSession

    file_diff = DiffParser().parse_single(diff_text)
    session = ReviewSession(file_diff, InMemoryDocument(original_text))
    session.apply_hunk(0)
"""

from .editing import (
    DiffParser, FileDiff, Hunk, InMemoryDocument, ReviewSession,
    apply_all, apply_selected,
)

__all__ = [
    "DiffParser", "FileDiff", "Hunk", "InMemoryDocument", "ReviewSession",
    "apply_all", "apply_selected",
]
