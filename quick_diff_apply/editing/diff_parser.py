"""
Diff parser — turns unified diff text into ``FileDiff`` objects the patch
engine and review session consume.  Parsing itself is done by ``unidiff``.
"""

from __future__ import annotations

import logging

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from .errors import DiffParseError
from .hunk_model import Change, ChangeKind, FileDiff, FileStatus, Hunk

logger = logging.getLogger(__name__)

_PLACEHOLDER_HEADER = "--- a/_\n+++ b/_\n"


class DiffParser:
    """Parse unified diffs (git, ``diff -u``, or bare ``@@`` hunks)."""

    def parse(self, diff_text: str) -> list[FileDiff]:
        """Parse *diff_text* into one ``FileDiff`` per touched file.

        Raises
        ------
        DiffParseError
            The text is empty, malformed, or contains no file sections.
        StructuralMismatch
            A hunk's declared line counts disagree with its lines.
        """
        text = self._normalize(diff_text)
        if not text.strip():
            raise DiffParseError("Diff text is empty")

        try:
            patch_set = PatchSet(text)
        except UnidiffParseError as exc:
            logger.warning("[DiffParse] unidiff rejected the diff: %s", exc)
            raise DiffParseError(f"Malformed unified diff: {exc}") from exc

        file_diffs = [self._convert_file(pf) for pf in patch_set]
        if not file_diffs:
            raise DiffParseError("No diff information found")

        logger.debug(
            "[DiffParse] Parsed %d file(s), %d hunk(s)",
            len(file_diffs), sum(len(fd.hunks) for fd in file_diffs),
        )
        return file_diffs

    def parse_single(self, diff_text: str) -> FileDiff:
        """Parse a diff that must touch exactly one file."""
        file_diffs = self.parse(diff_text)
        if len(file_diffs) != 1:
            raise DiffParseError(
                f"Expected a single-file diff, got {len(file_diffs)} files"
            )
        return file_diffs[0]

    # ------------------------------------------------------------------
    # Internal conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(diff_text: str) -> str:
        text = diff_text.replace("\r\n", "\n").replace("\r", "\n")
        stripped = text.lstrip()
        if stripped.startswith("@@"):
            # Hunk-only input: give unidiff the file headers it needs
            text = _PLACEHOLDER_HEADER + stripped
        if text and not text.endswith("\n"):
            text += "\n"
        return text

    def _convert_file(self, patched_file) -> FileDiff:
        if patched_file.is_added_file:
            status = FileStatus.ADDED
        elif patched_file.is_removed_file:
            status = FileStatus.DELETED
        else:
            status = FileStatus.MODIFIED

        return FileDiff(
            hunks=tuple(self._convert_hunk(h) for h in patched_file),
            source_path=patched_file.source_file or "",
            target_path=patched_file.target_file or "",
            status=status,
        )

    @staticmethod
    def _convert_hunk(unidiff_hunk) -> Hunk:
        changes: list[Change] = []
        for line in unidiff_hunk:
            if line.is_added:
                kind = ChangeKind.INSERT
            elif line.is_removed:
                kind = ChangeKind.DELETE
            elif line.is_context:
                kind = ChangeKind.CONTEXT
            else:
                # "\ No newline at end of file" and similar markers
                continue
            changes.append(Change(kind=kind, text=line.value.rstrip("\n")))

        return Hunk(
            old_start=unidiff_hunk.source_start,
            old_line_count=unidiff_hunk.source_length,
            new_start=unidiff_hunk.target_start,
            new_line_count=unidiff_hunk.target_length,
            changes=tuple(changes),
        )
