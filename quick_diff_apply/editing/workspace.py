"""
Workspace patcher — non-interactive, multi-file application of a parsed
diff: preview every file first, then write all of them transactionally.
"""

from __future__ import annotations

import difflib
import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .document import safe_write
from .errors import PatchApplyError
from .hunk_model import FileDiff, FileStatus
from .patch_engine import apply_all, apply_selected, new_file_content

logger = logging.getLogger(__name__)


@dataclass
class FilePreview:
    """Original and patched content of one file, computed before writing."""
    path: str
    status: FileStatus
    original_text: str
    patched_text: str
    existed: bool = True

    @property
    def changed(self) -> bool:
        return self.status is not FileStatus.MODIFIED or self.original_text != self.patched_text


@dataclass
class WorkspaceResult:
    """Result of writing previews to the workspace."""
    success: bool = False
    files_written: list[str] = field(default_factory=list)
    files_deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    error: str = ""


class WorkspacePatcher:
    """Apply file diffs to files under a workspace root."""

    def __init__(self, root: str = ".", encoding: str = "utf-8") -> None:
        self._root = root
        self._encoding = encoding

    def resolve(self, path: str) -> str:
        return os.path.join(self._root, path)

    # ------------------------------------------------------------------
    # Phase 1: compute patched contents without writing
    # ------------------------------------------------------------------

    def preview(self, file_diffs: Iterable[FileDiff]) -> list[FilePreview]:
        previews: list[FilePreview] = []

        for file_diff in file_diffs:
            path = file_diff.path
            if not path or path == "/dev/null":
                continue

            if file_diff.is_new:
                existing = self._read(path)
                previews.append(FilePreview(
                    path=path,
                    status=FileStatus.ADDED,
                    original_text=existing or "",
                    patched_text=new_file_content(file_diff),
                    existed=existing is not None,
                ))
            elif file_diff.is_deleted:
                original = self._read(path)
                if original is None:
                    logger.warning(
                        "[Workspace] %s for deletion diff not found, "
                        "previewing against empty content", path,
                    )
                previews.append(FilePreview(
                    path=path,
                    status=FileStatus.DELETED,
                    original_text=original or "",
                    patched_text="",
                    existed=original is not None,
                ))
            else:
                original = self._read(path)
                if original is None:
                    logger.warning("[Workspace] File not found: %s, skipping", path)
                    continue
                previews.append(FilePreview(
                    path=path,
                    status=FileStatus.MODIFIED,
                    original_text=original,
                    patched_text=apply_all(original, file_diff.hunks),
                ))

        return previews

    # ------------------------------------------------------------------
    # Phase 2: write everything, rolling back on failure
    # ------------------------------------------------------------------

    def apply(self, previews: Sequence[FilePreview]) -> WorkspaceResult:
        """Write all previews; on any failure restore what was already written."""
        result = WorkspaceResult()

        if not previews:
            result.error = "No changes to apply"
            return result

        done: list[FilePreview] = []
        try:
            for preview in previews:
                if not preview.changed:
                    result.skipped.append(preview.path)
                    continue
                self._write_one(preview)
                done.append(preview)
        except (OSError, UnicodeError) as exc:
            logger.error(
                "[Workspace] Write failed for %s, rolling back %d files: %s",
                preview.path, len(done), exc,
            )
            self._rollback(done)
            result.error = f"Write failed for {preview.path}: {exc}"
            return result

        for preview in done:
            if preview.status is FileStatus.DELETED:
                result.files_deleted.append(preview.path)
            else:
                result.files_written.append(preview.path)
        result.success = True
        logger.info(
            "[Workspace] Applied diff: %d written, %d deleted",
            len(result.files_written), len(result.files_deleted),
        )
        return result

    def apply_selected_hunks(
        self,
        path: str,
        file_diff: FileDiff,
        indices: Iterable[int],
    ) -> FilePreview:
        """Patch *path* from its pristine content with only the chosen hunks."""
        original = self._read(path)
        if original is None:
            raise PatchApplyError(f"File not found: {path}")

        indices = sorted(set(indices))
        bad = [i for i in indices if not 0 <= i < len(file_diff.hunks)]
        if bad:
            raise PatchApplyError(
                f"Hunk indices {bad} out of range (diff has "
                f"{len(file_diff.hunks)} hunks)"
            )

        preview = FilePreview(
            path=path,
            status=FileStatus.MODIFIED,
            original_text=original,
            patched_text=apply_selected(original, file_diff.hunks, indices),
        )
        result = self.apply([preview])
        if not result.success and result.error:
            raise PatchApplyError(result.error)
        return preview

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read(self, path: str) -> str | None:
        full_path = self.resolve(path)
        if not os.path.isfile(full_path):
            return None
        with open(full_path, "r", encoding=self._encoding, newline="") as f:
            return f.read()

    def _write_one(self, preview: FilePreview) -> None:
        full_path = self.resolve(preview.path)
        if preview.status is FileStatus.DELETED:
            if os.path.exists(full_path):
                os.remove(full_path)
            return
        parent = os.path.dirname(os.path.abspath(full_path))
        os.makedirs(parent, exist_ok=True)
        safe_write(full_path, preview.patched_text, self._encoding)

    def _rollback(self, written: Sequence[FilePreview]) -> None:
        for preview in written:
            full_path = self.resolve(preview.path)
            try:
                if preview.existed:
                    safe_write(full_path, preview.original_text, self._encoding)
                elif os.path.exists(full_path):
                    os.remove(full_path)
            except (OSError, UnicodeError) as rb_exc:
                logger.error(
                    "[Workspace] Rollback failed for %s: %s",
                    preview.path, rb_exc,
                )


def compute_unified_diff(preview: FilePreview) -> str:
    """Render the change a preview would make as unified diff text."""
    old_lines = preview.original_text.splitlines(keepends=True)
    new_lines = preview.patched_text.splitlines(keepends=True)
    fromfile = "/dev/null" if preview.status is FileStatus.ADDED else f"a/{preview.path}"
    tofile = "/dev/null" if preview.status is FileStatus.DELETED else f"b/{preview.path}"

    diff = difflib.unified_diff(
        old_lines, new_lines,
        fromfile=fromfile,
        tofile=tofile,
        lineterm="",
    )
    return "\n".join(line.rstrip("\n") for line in diff)
