"""Tests for the document editors."""

import pytest

from quick_diff_apply.editing.document import (
    DocumentEditor, FileDocument, InMemoryDocument, LineRange, safe_write,
)
from quick_diff_apply.editing.hunk_model import Change, ChangeKind, FileDiff, Hunk
from quick_diff_apply.editing.review_session import ReviewSession


class TestLineRange:
    def test_length(self):
        assert len(LineRange(2, 5)) == 3
        assert len(LineRange(4, 4)) == 0

    @pytest.mark.parametrize("start,end", [(-1, 2), (3, 2)])
    def test_invalid(self, start, end):
        with pytest.raises(ValueError):
            LineRange(start, end)


class TestInMemoryDocument:
    def test_line_count_follows_editor_convention(self):
        assert InMemoryDocument("").current_line_count() == 1
        assert InMemoryDocument("a").current_line_count() == 1
        assert InMemoryDocument("a\nb\n").current_line_count() == 3

    def test_implements_protocol(self):
        assert isinstance(InMemoryDocument("x"), DocumentEditor)

    def test_replace_single_line(self):
        doc = InMemoryDocument("a\nb\nc\n")
        assert doc.replace_lines(LineRange(1, 2), "B\n") is True
        assert doc.text == "a\nB\nc\n"
        assert doc.edit_count == 1

    def test_insert_without_removal(self):
        doc = InMemoryDocument("a\nb\n")
        assert doc.replace_lines(LineRange(0, 0), "x\ny\n") is True
        assert doc.text == "x\ny\na\nb\n"
        assert doc.current_line_count() == 5

    def test_delete_lines(self):
        doc = InMemoryDocument("a\nb\nc\n")
        assert doc.replace_lines(LineRange(0, 2), "") is True
        assert doc.text == "c\n"

    def test_range_ending_at_line_count_reaches_end_of_text(self):
        doc = InMemoryDocument("a\nb")
        assert doc.replace_lines(LineRange(1, 2), "B\n") is True
        assert doc.text == "a\nB\n"
        assert doc.current_line_count() == 3

    def test_out_of_bounds_rejected(self):
        doc = InMemoryDocument("a\nb\n")
        assert doc.replace_lines(LineRange(2, 4), "z\n") is False
        assert doc.text == "a\nb\n"
        assert doc.edit_count == 0

    def test_line_text(self):
        doc = InMemoryDocument("a\nbb\n")
        assert doc.line_text(1) == "bb"
        assert doc.line_text(2) == ""
        with pytest.raises(IndexError):
            doc.line_text(3)


class TestLineEndings:
    def test_detects_crlf(self):
        assert InMemoryDocument("a\r\nb\r\n").eol == "\r\n"
        assert InMemoryDocument("a\nb\r\n").eol == "\n"
        assert InMemoryDocument("single").eol == "\n"

    def test_inserted_text_uses_document_ending(self):
        doc = InMemoryDocument("a\r\nb\r\nc\r\n")
        assert doc.replace_lines(LineRange(1, 2), "B\nB2\n") is True
        assert doc.text == "a\r\nB\r\nB2\r\nc\r\n"
        assert doc.current_line_count() == 5

    def test_crlf_text_not_doubled(self):
        doc = InMemoryDocument("a\r\nb\r\n")
        doc.replace_lines(LineRange(0, 1), "A\r\n")
        assert doc.text == "A\r\nb\r\n"

    def test_line_text_strips_carriage_return(self):
        assert InMemoryDocument("a\r\nb\r\n").line_text(0) == "a"


class TestFileDocument:
    def test_load_edit_save(self, tmp_path):
        path = tmp_path / "target.txt"
        path.write_text("one\ntwo\n", encoding="utf-8")

        doc = FileDocument(str(path))
        assert doc.dirty is False
        doc.replace_lines(LineRange(1, 2), "TWO\n")
        assert doc.dirty is True
        assert path.read_text(encoding="utf-8") == "one\ntwo\n"

        doc.save()
        assert doc.dirty is False
        assert path.read_text(encoding="utf-8") == "one\nTWO\n"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            FileDocument(str(tmp_path / "missing.txt"))


class TestSafeWrite:
    def test_writes_and_leaves_no_temp_file(self, tmp_path):
        path = tmp_path / "out.txt"
        safe_write(str(path), "hello\n")

        assert path.read_text(encoding="utf-8") == "hello\n"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    def test_overwrites_existing(self, tmp_path):
        path = tmp_path / "out.txt"
        path.write_text("old", encoding="utf-8")
        safe_write(str(path), "new")
        assert path.read_text(encoding="utf-8") == "new"


class TestFileDocumentLineEndings:
    def test_review_keeps_crlf(self, tmp_path):
        path = tmp_path / "win.txt"
        path.write_bytes(b"a\r\nb\r\nc\r\n")
        hunk = Hunk(2, 1, 2, 1, [
            Change(ChangeKind.DELETE, "b"), Change(ChangeKind.INSERT, "B"),
        ])
        doc = FileDocument(str(path))
        session = ReviewSession(FileDiff(hunks=[hunk]), doc)

        assert session.apply_hunk(0) == 0
        doc.save()
        assert path.read_bytes() == b"a\r\nB\r\nc\r\n"
