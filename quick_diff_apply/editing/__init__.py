"""Hunk-level diff application — batch patching and interactive review."""

from .errors import (
    StructuralMismatch, DiffParseError, PatchApplyError,
    ReviewError, InvalidHunkIndex, EditorRejectedEdit, SessionClosed,
)
from .hunk_model import ChangeKind, Change, Hunk, FileDiff, FileStatus
from .patch_engine import apply_all, apply_selected, new_file_content
from .offset_tracker import OffsetTracker
from .document import DocumentEditor, LineRange, InMemoryDocument, FileDocument
from .review_session import ReviewSession, HunkStatus, BulkApplyResult
from .diff_parser import DiffParser
from .workspace import WorkspacePatcher, FilePreview, WorkspaceResult, compute_unified_diff

__all__ = [
    "StructuralMismatch", "DiffParseError", "PatchApplyError",
    "ReviewError", "InvalidHunkIndex", "EditorRejectedEdit", "SessionClosed",
    "ChangeKind", "Change", "Hunk", "FileDiff", "FileStatus",
    "apply_all", "apply_selected", "new_file_content",
    "OffsetTracker",
    "DocumentEditor", "LineRange", "InMemoryDocument", "FileDocument",
    "ReviewSession", "HunkStatus", "BulkApplyResult",
    "DiffParser",
    "WorkspacePatcher", "FilePreview", "WorkspaceResult", "compute_unified_diff",
]
