"""
Document editors — the only way the review session mutates text.

Line numbering follows editor convention: a buffer has
``text.count("\\n") + 1`` lines, so ``"a\\nb\\n"`` has three lines, the last
one empty.  A line range ``[start, end)`` spans from the beginning of line
``start`` to the beginning of line ``end``; ``end == line_count`` means the
end of the text.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .patch_engine import detect_line_ending

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineRange:
    """Half-open range of 0-based lines."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid line range [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start


@runtime_checkable
class DocumentEditor(Protocol):
    """What the review session needs from a live document."""

    def current_line_count(self) -> int:
        ...

    def replace_lines(self, line_range: LineRange, text: str) -> bool:
        """Replace *line_range* with *text*; return False to reject the edit.

        After a successful call, ``current_line_count()`` reflects the edit.
        """
        ...

    def line_text(self, line: int) -> str:
        """Text of 0-based *line* without its line ending."""
        ...


class InMemoryDocument:
    """A text buffer that applies line-range edits in memory.

    The buffer keeps the line ending it was created with: ``"\\n"`` in
    inserted text is written as ``eol``.
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self.eol = detect_line_ending(text)
        self.edit_count = 0

    @property
    def text(self) -> str:
        return self._text

    def current_line_count(self) -> int:
        return self._text.count("\n") + 1

    def replace_lines(self, line_range: LineRange, text: str) -> bool:
        line_count = self.current_line_count()
        if line_range.end > line_count:
            logger.debug(
                "[Document] Rejecting edit [%d, %d) on %d-line buffer",
                line_range.start, line_range.end, line_count,
            )
            return False

        if self.eol != "\n":
            text = text.replace(self.eol, "\n").replace("\n", self.eol)

        begin = self._offset_of_line(line_range.start)
        end = self._offset_of_line(line_range.end)
        self._text = self._text[:begin] + text + self._text[end:]
        self.edit_count += 1
        return True

    def line_text(self, line: int) -> str:
        if not 0 <= line < self.current_line_count():
            raise IndexError(f"Line {line} out of range")
        begin = self._offset_of_line(line)
        end = self._text.find("\n", begin)
        if end == -1:
            end = len(self._text)
        return self._text[begin:end].rstrip("\r")

    def _offset_of_line(self, line: int) -> int:
        """Character offset where *line* begins (end of text past the last)."""
        offset = 0
        for _ in range(line):
            nl = self._text.find("\n", offset)
            if nl == -1:
                return len(self._text)
            offset = nl + 1
        return offset


class FileDocument(InMemoryDocument):
    """An in-memory buffer loaded from a file and saved back atomically."""

    def __init__(self, file_path: str, encoding: str = "utf-8") -> None:
        with open(file_path, "r", encoding=encoding, newline="") as f:
            text = f.read()
        super().__init__(text)
        self.file_path = file_path
        self.encoding = encoding
        self._saved_text = text

    @property
    def dirty(self) -> bool:
        return self.text != self._saved_text

    def save(self) -> None:
        safe_write(self.file_path, self.text, self.encoding)
        self._saved_text = self.text
        logger.info("[Document] Saved %s", self.file_path)


def safe_write(file_path: str, content: str, encoding: str = "utf-8") -> None:
    """Write *content* to *file_path* atomically via temp file + rename."""
    abs_path = os.path.abspath(file_path)
    tmp_path = abs_path + ".quickdiff_tmp"

    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as f:
            f.write(content)

        # On Windows, os.rename fails if destination exists
        if os.path.exists(abs_path):
            shutil.move(tmp_path, abs_path)
        else:
            os.rename(tmp_path, abs_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
