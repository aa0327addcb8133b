"""
Patch engine — pure functions that splice diff hunks into a full text
buffer.  Nothing here touches a session, an editor or the filesystem.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .hunk_model import FileDiff, Hunk

logger = logging.getLogger(__name__)


def detect_line_ending(text: str) -> str:
    """Line ending of *text*, taken from its first line break ("\\n" if none)."""
    nl = text.find("\n")
    if nl > 0 and text[nl - 1] == "\r":
        return "\r\n"
    return "\n"


def apply_all(original: str, hunks: Sequence[Hunk]) -> str:
    """Apply every hunk to *original* and return the new text.

    Hunks are spliced from the last to the first so that each splice only
    touches lines after the ones still to be processed.  Each hunk is
    positioned at its ``new_start`` and removes ``old_line_count`` lines.

    Parameters
    ----------
    original:
        Full text of the pre-image.
    hunks:
        Hunks of one file diff, ascending by ``old_start``.

    Returns
    -------
    str
        The patched text, using the line ending of *original*.  A trailing
        newline is kept iff *original* had one.
    """
    eol = detect_line_ending(original)
    lines = original.split(eol)

    for hunk in reversed(hunks):
        pos = max(hunk.new_start - 1, 0)
        _splice(lines, pos, hunk)

    return _restore_trailing_newline(original, eol.join(lines), eol)


def apply_selected(
    original: str,
    hunks: Sequence[Hunk],
    selected: Iterable[int],
) -> str:
    """Apply only the hunks at *selected* indices to the pristine *original*.

    Positioning uses the original coordinates (``old_start``), so this must
    not be called on a buffer that already absorbed other hunks.  Indices
    that do not name a hunk are ignored.
    """
    chosen = [hunks[i] for i in sorted(set(selected)) if 0 <= i < len(hunks)]
    if not chosen:
        return original

    eol = detect_line_ending(original)
    lines = original.split(eol)

    # Bottom-up by original position
    for hunk in sorted(chosen, key=lambda h: h.old_start, reverse=True):
        pos = max(hunk.old_start - 1, 0)
        _splice(lines, pos, hunk)

    logger.debug("[Patch] Applied %d of %d hunks", len(chosen), len(hunks))
    return _restore_trailing_newline(original, eol.join(lines), eol)


def new_file_content(file_diff: FileDiff) -> str:
    """Return the content of a file created by *file_diff*."""
    lines: list[str] = []
    for hunk in file_diff.hunks:
        lines.extend(hunk.replacement_lines)
    return "\n".join(lines)


def _splice(lines: list[str], pos: int, hunk: Hunk) -> None:
    if pos > len(lines):
        logger.warning(
            "[Patch] Hunk %s starts past the end of a %d-line buffer",
            hunk.header, len(lines),
        )
    lines[pos:pos + hunk.old_line_count] = hunk.replacement_lines


def _restore_trailing_newline(original: str, patched: str, eol: str) -> str:
    if original.endswith(eol) and patched and not patched.endswith(eol):
        return patched + eol
    return patched
