"""
Hunk model — the shapes exchanged between the diff parser, the patch
engine and the review session.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .errors import StructuralMismatch


class ChangeKind(enum.Enum):
    CONTEXT = " "
    INSERT = "+"
    DELETE = "-"


class FileStatus(enum.Enum):
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"


_DEV_NULL = "/dev/null"


def strip_ab_prefix(path: str) -> str:
    """Drop the ``a/`` or ``b/`` prefix git puts on diff paths."""
    if path.startswith(("a/", "b/")):
        return path[2:]
    return path


@dataclass(frozen=True)
class Change:
    """One line inside a hunk, without its diff marker."""
    kind: ChangeKind
    text: str

    @property
    def marker(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class Hunk:
    """A contiguous edit region: old lines replaced by new lines."""
    old_start: int             # 1-indexed line in the pre-image
    old_line_count: int
    new_start: int             # 1-indexed line in the post-image
    new_line_count: int
    changes: tuple[Change, ...] = ()

    def __post_init__(self) -> None:
        # Lists are accepted for convenience but stored as a tuple
        object.__setattr__(self, "changes", tuple(self.changes))

        for change in self.changes:
            if not isinstance(change.kind, ChangeKind):
                raise StructuralMismatch(
                    f"Unknown change kind {change.kind!r} in hunk "
                    f"@@ -{self.old_start} +{self.new_start} @@"
                )

        old_counted = sum(
            1 for c in self.changes
            if c.kind in (ChangeKind.CONTEXT, ChangeKind.DELETE)
        )
        new_counted = sum(
            1 for c in self.changes
            if c.kind in (ChangeKind.CONTEXT, ChangeKind.INSERT)
        )
        if old_counted != self.old_line_count or new_counted != self.new_line_count:
            raise StructuralMismatch(
                f"Hunk @@ -{self.old_start},{self.old_line_count} "
                f"+{self.new_start},{self.new_line_count} @@ declares "
                f"{self.old_line_count}/{self.new_line_count} lines but its "
                f"changes count {old_counted}/{new_counted}"
            )

    @property
    def replacement_lines(self) -> list[str]:
        """Context and inserted lines, in order (the post-image)."""
        return [
            c.text for c in self.changes
            if c.kind in (ChangeKind.CONTEXT, ChangeKind.INSERT)
        ]

    @property
    def removed_lines(self) -> list[str]:
        """Context and deleted lines, in order (the pre-image)."""
        return [
            c.text for c in self.changes
            if c.kind in (ChangeKind.CONTEXT, ChangeKind.DELETE)
        ]

    @property
    def is_insertion(self) -> bool:
        return self.old_line_count == 0

    @property
    def is_deletion(self) -> bool:
        return self.new_line_count == 0

    @property
    def header(self) -> str:
        return (f"@@ -{self.old_start},{self.old_line_count} "
                f"+{self.new_start},{self.new_line_count} @@")


@dataclass(frozen=True)
class FileDiff:
    """All hunks for one logical file, ordered by ascending ``old_start``."""
    hunks: tuple[Hunk, ...] = ()
    source_path: str = ""
    target_path: str = ""
    status: FileStatus = FileStatus.MODIFIED

    def __post_init__(self) -> None:
        object.__setattr__(self, "hunks", tuple(self.hunks))

    def __len__(self) -> int:
        return len(self.hunks)

    def __iter__(self):
        return iter(self.hunks)

    @property
    def path(self) -> str:
        """Workspace-relative path this diff touches."""
        if self.status is FileStatus.DELETED or self.target_path in ("", _DEV_NULL):
            return strip_ab_prefix(self.source_path)
        return strip_ab_prefix(self.target_path)

    @property
    def is_new(self) -> bool:
        return self.status is FileStatus.ADDED or self.source_path == _DEV_NULL

    @property
    def is_deleted(self) -> bool:
        return self.status is FileStatus.DELETED or self.target_path == _DEV_NULL
