"""
CLI entry point — argument parsing and the review / apply flows.
"""

import argparse
import os
import sys

from .config import Config
from .cli_display import (
    log, setup_logger, show_error, show_info, show_success, show_warning,
)
from .editing.diff_parser import DiffParser
from .editing.document import FileDocument
from .editing.errors import (
    DiffParseError, PatchApplyError, ReviewError, StructuralMismatch,
)
from .editing.review_session import HunkStatus, ReviewSession
from .editing.workspace import WorkspacePatcher, compute_unified_diff
from .review_display import format_colored_diff, run_review, summarize


def _read_diff(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, "r", encoding="utf-8") as f:
        return f.read()


def _parse_indices(raw: str) -> list[int]:
    """Parse ``"0,2"`` into ``[0, 2]``."""
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid hunk list: {raw!r}") from exc


def _confirm(question: str) -> bool:
    try:
        answer = input(f"  {question} [y/N]: ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        return False
    return answer in ("y", "yes")


def cmd_review(args, cfg: Config) -> int:
    """Start an interactive review of a single-file diff against TARGET."""
    file_diff = DiffParser().parse_single(_read_diff(args.diff))

    target_name = os.path.basename(args.target)
    source_name = os.path.basename(file_diff.source_path)
    if file_diff.is_new or file_diff.is_deleted:
        show_error("Inline review only supports diffs that modify an existing file")
        return 2
    if source_name not in ("_", target_name):
        show_error(f"Diff is for {source_name!r}, not {target_name!r}")
        return 2
    if not os.path.isfile(args.target):
        show_error(f"File not found: {args.target}")
        return 2

    document = FileDocument(args.target, encoding=cfg.ENCODING)
    session = ReviewSession(file_diff, document)
    run_review(session, use_tui=cfg.USE_TUI and not args.no_tui)

    if session.indices_with(HunkStatus.APPLIED) and document.dirty:
        document.save()
        show_success(f"Saved {args.target} ({summarize(session)})")
    else:
        show_info(f"No changes written to {args.target}")
    return 0


def cmd_apply(args, cfg: Config) -> int:
    """Preview a (multi-file) diff and apply it to the workspace."""
    parser = DiffParser()
    diff_text = _read_diff(args.diff)
    root = args.root or cfg.WORKSPACE_ROOT
    patcher = WorkspacePatcher(root, encoding=cfg.ENCODING)

    if args.hunks is not None:
        file_diff = parser.parse_single(diff_text)
        path = args.file or file_diff.path
        preview = patcher.apply_selected_hunks(path, file_diff, args.hunks)
        show_success(
            f"Applied hunks {', '.join(str(i) for i in sorted(set(args.hunks)))} "
            f"to {preview.path}"
        )
        return 0

    previews = [p for p in patcher.preview(parser.parse(diff_text)) if p.changed]
    if not previews:
        show_warning("No changes to preview or apply")
        return 0

    if cfg.SHOW_PREVIEW:
        for preview in previews:
            print(f"\n{'─' * 60}")
            print(format_colored_diff(compute_unified_diff(preview)))

    auto = args.yes or cfg.AUTO_APPROVE
    if not auto and not _confirm(f"Apply changes to {len(previews)} file(s)?"):
        show_info("Changes from diff discarded.")
        return 0

    result = patcher.apply(previews)
    if not result.success:
        show_error(result.error)
        return 1
    show_success(
        f"Diff applied: {len(result.files_written)} written, "
        f"{len(result.files_deleted)} deleted"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quick-diff-apply",
        description="Apply unified diffs all at once or hunk by hunk",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .quickdiff.yaml config file")
    parser.add_argument("--no-tui", action="store_true",
                        help="Use the console review loop instead of the TUI")
    sub = parser.add_subparsers(dest="command", required=True)

    review = sub.add_parser("review", help="Review a diff hunk by hunk")
    review.add_argument("target", help="File the diff applies to")
    review.add_argument("diff", nargs="?", default="-",
                        help="Diff file (default: read from stdin)")
    review.set_defaults(func=cmd_review)

    apply = sub.add_parser("apply", help="Apply a diff to the workspace")
    apply.add_argument("diff", nargs="?", default="-",
                       help="Diff file (default: read from stdin)")
    apply.add_argument("--root", default=None,
                       help="Workspace root (default: from config)")
    apply.add_argument("--yes", action="store_true",
                       help="Apply without asking for confirmation")
    apply.add_argument("--hunks", type=_parse_indices, default=None,
                       help="Comma-separated 0-based hunk indices to apply")
    apply.add_argument("--file", default=None,
                       help="Target file for --hunks (default: the diff's path)")
    apply.set_defaults(func=cmd_apply)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    cfg = Config.load(args.config)

    try:
        setup_logger(cfg.LOG_DIR)
        return args.func(args, cfg)
    except (DiffParseError, StructuralMismatch, PatchApplyError, ReviewError,
            OSError, UnicodeError) as exc:
        log.exception("Command failed")
        show_error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
