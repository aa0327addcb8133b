"""
Exceptions raised by the diff model, the patch engine and the review session.
"""

from __future__ import annotations


class StructuralMismatch(ValueError):
    """A hunk's declared line counts disagree with its change list."""


class DiffParseError(ValueError):
    """Raised when diff text cannot be turned into file diffs."""


class PatchApplyError(Exception):
    """Raised when a batch patch cannot be written to the workspace."""


class ReviewError(Exception):
    """Base class for interactive review failures."""


class InvalidHunkIndex(ReviewError):
    """Hunk index out of range, or the hunk is not in the required state."""

    def __init__(self, hunk_index: int, reason: str = "out of range") -> None:
        super().__init__(f"Invalid hunk index {hunk_index}: {reason}")
        self.hunk_index = hunk_index
        self.reason = reason


class EditorRejectedEdit(ReviewError):
    """The document editor refused (or could not perform) a hunk edit."""

    def __init__(self, hunk_index: int, message: str) -> None:
        super().__init__(f"Hunk {hunk_index + 1} could not be applied: {message}")
        self.hunk_index = hunk_index


class SessionClosed(ReviewError):
    """The review session has already terminated."""
