"""Tests for the WorkspacePatcher."""

import os

import pytest

from quick_diff_apply.editing.diff_parser import DiffParser
from quick_diff_apply.editing.errors import PatchApplyError
from quick_diff_apply.editing.hunk_model import FileStatus
from quick_diff_apply.editing.workspace import (
    FilePreview, WorkspacePatcher, WorkspaceResult, compute_unified_diff,
)


MULTI_FILE_DIFF = """\
--- a/keep.txt
+++ b/keep.txt
@@ -2 +2 @@
-foo
+bar
--- /dev/null
+++ b/sub/created.txt
@@ -0,0 +1,2 @@
+first
+second
--- a/removed.txt
+++ /dev/null
@@ -1,2 +0,0 @@
-gone
-too
"""

TWO_HUNK_DIFF = """\
--- a/lines.txt
+++ b/lines.txt
@@ -1 +1 @@
-one
+ONE
@@ -3 +3 @@
-three
+THREE
"""


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "keep.txt").write_text("line1\nfoo\nline3\n", encoding="utf-8")
    (tmp_path / "removed.txt").write_text("gone\ntoo\n", encoding="utf-8")
    (tmp_path / "lines.txt").write_text("one\ntwo\nthree\n", encoding="utf-8")
    return tmp_path


class TestPreview:
    def test_previews_every_kind(self, workspace):
        patcher = WorkspacePatcher(str(workspace))
        previews = patcher.preview(DiffParser().parse(MULTI_FILE_DIFF))

        by_path = {p.path: p for p in previews}
        assert by_path["keep.txt"].patched_text == "line1\nbar\nline3\n"
        assert by_path["sub/created.txt"].status is FileStatus.ADDED
        assert by_path["sub/created.txt"].original_text == ""
        assert by_path["sub/created.txt"].patched_text == "first\nsecond"
        assert by_path["removed.txt"].original_text == "gone\ntoo\n"
        assert by_path["removed.txt"].patched_text == ""

    def test_preview_does_not_write(self, workspace):
        patcher = WorkspacePatcher(str(workspace))
        patcher.preview(DiffParser().parse(MULTI_FILE_DIFF))

        assert (workspace / "keep.txt").read_text(encoding="utf-8") == "line1\nfoo\nline3\n"
        assert not (workspace / "sub").exists()

    def test_missing_modified_file_skipped(self, tmp_path):
        patcher = WorkspacePatcher(str(tmp_path))
        previews = patcher.preview(DiffParser().parse(TWO_HUNK_DIFF))
        assert previews == []

    def test_missing_deleted_file_previews_empty(self, tmp_path):
        patcher = WorkspacePatcher(str(tmp_path))
        diff = "--- a/ghost.txt\n+++ /dev/null\n@@ -1 +0,0 @@\n-boo\n"
        previews = patcher.preview(DiffParser().parse(diff))

        assert len(previews) == 1
        assert previews[0].existed is False
        assert previews[0].original_text == ""


class TestApply:
    def test_writes_creates_and_deletes(self, workspace):
        patcher = WorkspacePatcher(str(workspace))
        previews = patcher.preview(DiffParser().parse(MULTI_FILE_DIFF))
        result = patcher.apply(previews)

        assert result.success is True
        assert sorted(result.files_written) == ["keep.txt", "sub/created.txt"]
        assert result.files_deleted == ["removed.txt"]
        assert (workspace / "keep.txt").read_text(encoding="utf-8") == "line1\nbar\nline3\n"
        assert (workspace / "sub" / "created.txt").read_text(encoding="utf-8") == "first\nsecond"
        assert not (workspace / "removed.txt").exists()

    def test_empty_previews(self, workspace):
        result = WorkspacePatcher(str(workspace)).apply([])
        assert result.success is False
        assert "No changes" in result.error

    def test_unchanged_file_skipped(self, workspace):
        preview = FilePreview(
            path="keep.txt", status=FileStatus.MODIFIED,
            original_text="same", patched_text="same",
        )
        result = WorkspacePatcher(str(workspace)).apply([preview])
        assert result.success is True
        assert result.skipped == ["keep.txt"]
        assert result.files_written == []

    def test_rollback_on_write_failure(self, workspace, monkeypatch):
        patcher = WorkspacePatcher(str(workspace))
        previews = [
            FilePreview(path="keep.txt", status=FileStatus.MODIFIED,
                        original_text="line1\nfoo\nline3\n",
                        patched_text="patched\n"),
            FilePreview(path="lines.txt", status=FileStatus.MODIFIED,
                        original_text="one\ntwo\nthree\n",
                        patched_text="boom\n"),
        ]

        real_write_one = patcher._write_one

        def failing_write_one(preview):
            if preview.path == "lines.txt":
                raise OSError("disk full")
            real_write_one(preview)

        monkeypatch.setattr(patcher, "_write_one", failing_write_one)
        result = patcher.apply(previews)

        assert isinstance(result, WorkspaceResult)
        assert result.success is False
        assert "disk full" in result.error
        assert (workspace / "keep.txt").read_text(encoding="utf-8") == "line1\nfoo\nline3\n"
        assert (workspace / "lines.txt").read_text(encoding="utf-8") == "one\ntwo\nthree\n"

    def test_rollback_when_text_cannot_be_encoded(self, tmp_path):
        (tmp_path / "a.txt").write_text("one\n", encoding="ascii")
        (tmp_path / "b.txt").write_text("two\n", encoding="ascii")
        diff = (
            "--- a/a.txt\n+++ b/a.txt\n@@ -1 +1 @@\n-one\n+ONE\n"
            "--- a/b.txt\n+++ b/b.txt\n@@ -1 +1 @@\n-two\n+tw\u00e9\n"
        )
        patcher = WorkspacePatcher(str(tmp_path), encoding="ascii")
        result = patcher.apply(patcher.preview(DiffParser().parse(diff)))

        assert result.success is False
        assert "b.txt" in result.error
        assert (tmp_path / "a.txt").read_text(encoding="ascii") == "one\n"
        assert (tmp_path / "b.txt").read_text(encoding="ascii") == "two\n"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.txt", "b.txt"]

    def test_crlf_file_keeps_line_endings(self, tmp_path):
        (tmp_path / "lines.txt").write_bytes(b"one\r\ntwo\r\nthree\r\n")
        patcher = WorkspacePatcher(str(tmp_path))
        result = patcher.apply(patcher.preview(DiffParser().parse(TWO_HUNK_DIFF)))

        assert result.success is True
        assert (tmp_path / "lines.txt").read_bytes() == b"ONE\r\ntwo\r\nTHREE\r\n"


class TestApplySelectedHunks:
    def test_only_chosen_hunk_written(self, workspace):
        patcher = WorkspacePatcher(str(workspace))
        file_diff = DiffParser().parse_single(TWO_HUNK_DIFF)
        preview = patcher.apply_selected_hunks("lines.txt", file_diff, [1])

        assert preview.patched_text == "one\ntwo\nTHREE\n"
        assert (workspace / "lines.txt").read_text(encoding="utf-8") == "one\ntwo\nTHREE\n"

    def test_out_of_range_index(self, workspace):
        patcher = WorkspacePatcher(str(workspace))
        file_diff = DiffParser().parse_single(TWO_HUNK_DIFF)
        with pytest.raises(PatchApplyError):
            patcher.apply_selected_hunks("lines.txt", file_diff, [5])

    def test_missing_file(self, tmp_path):
        patcher = WorkspacePatcher(str(tmp_path))
        file_diff = DiffParser().parse_single(TWO_HUNK_DIFF)
        with pytest.raises(PatchApplyError):
            patcher.apply_selected_hunks("lines.txt", file_diff, [0])


class TestComputeUnifiedDiff:
    def test_renders_change(self):
        preview = FilePreview(
            path="keep.txt", status=FileStatus.MODIFIED,
            original_text="a\nb\n", patched_text="a\nB\n",
        )
        text = compute_unified_diff(preview)
        assert "--- a/keep.txt" in text
        assert "+++ b/keep.txt" in text
        assert "-b" in text.splitlines()
        assert "+B" in text.splitlines()

    def test_new_file_uses_dev_null(self):
        preview = FilePreview(
            path="n.txt", status=FileStatus.ADDED,
            original_text="", patched_text="x\n",
        )
        assert compute_unified_diff(preview).startswith("--- /dev/null")
