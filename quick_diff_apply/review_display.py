"""
Review display — renders a review session's state in the terminal.

Everything here reads the session after each operation (pull model) and
never changes hunk state except by calling the session's own operations.
Includes a Textual-based review app and a plain console loop.
"""

from __future__ import annotations

from dataclasses import dataclass

from .editing.errors import ReviewError
from .editing.hunk_model import ChangeKind, Hunk
from .editing.review_session import HunkStatus, ReviewSession


@dataclass(frozen=True)
class HunkMarker:
    """How one hunk should be highlighted in the current document."""
    hunk_index: int
    status: HunkStatus
    start_line: int            # 0-based, in the current document
    line_span: int             # highlighted lines, clipped to the document
    is_active: bool = False


def hunk_markers(session: ReviewSession, line_count: int) -> list[HunkMarker]:
    """Compute gutter/highlight markers for every hunk of *session*.

    Applied hunks highlight the lines they inserted, skipped and pending
    hunks the old lines they cover.
    """
    markers: list[HunkMarker] = []
    status = session.status
    for index, hunk in enumerate(session.hunks):
        start = session.get_adjusted_start_line(index)
        if start < 0 or start > line_count:
            continue
        if status[index] is HunkStatus.APPLIED:
            span = hunk.new_line_count
        else:
            span = hunk.old_line_count
        span = max(0, min(span, line_count - start))
        markers.append(HunkMarker(
            hunk_index=index,
            status=status[index],
            start_line=start,
            line_span=span,
            is_active=session.active_hunk == index,
        ))
    return markers


@dataclass(frozen=True)
class RegionLine:
    """One line of the live document shown next to a hunk."""
    line: int                  # 0-based
    text: str
    status: HunkStatus | None  # None outside the hunk
    is_active: bool = False


def document_region(
    session: ReviewSession,
    marker: HunkMarker,
    context: int = 2,
) -> list[RegionLine]:
    """Lines of the current document around *marker*, tagged with its state."""
    editor = session.editor
    line_count = editor.current_line_count()
    first = max(marker.start_line - context, 0)
    stop = min(marker.start_line + marker.line_span + context, line_count)

    region: list[RegionLine] = []
    for line in range(first, stop):
        inside = marker.start_line <= line < marker.start_line + marker.line_span
        region.append(RegionLine(
            line=line,
            text=editor.line_text(line),
            status=marker.status if inside else None,
            is_active=inside and marker.is_active,
        ))
    return region


def describe_hunk(hunk: Hunk) -> str:
    if hunk.is_insertion:
        return f"inserts {len(hunk.replacement_lines)} line(s)"
    if hunk.is_deletion:
        return f"deletes {len(hunk.removed_lines)} line(s)"
    return (f"replaces {len(hunk.removed_lines)} line(s) "
            f"with {len(hunk.replacement_lines)}")


def summarize(session: ReviewSession) -> str:
    applied = len(session.indices_with(HunkStatus.APPLIED))
    skipped = len(session.indices_with(HunkStatus.SKIPPED))
    pending = len(session.indices_with(HunkStatus.PENDING))
    return f"{applied} applied, {skipped} skipped, {pending} pending"


def format_colored_hunk(hunk: Hunk) -> str:
    """Render a hunk with ANSI colors.

    Green for insertions (+), red for deletions (-), cyan for the @@ header.
    """
    colored = [f"\033[36m{hunk.header}\033[0m"]
    for change in hunk.changes:
        line = f"{change.marker}{change.text}"
        if change.kind is ChangeKind.INSERT:
            colored.append(f"\033[32m{line}\033[0m")
        elif change.kind is ChangeKind.DELETE:
            colored.append(f"\033[31m{line}\033[0m")
        else:
            colored.append(line)
    return "\n".join(colored)


# Checked in order: file headers before single +/- lines
_DIFF_LINE_COLORS = (
    (("+++", "---"), "\033[1m"),
    (("@@",), "\033[36m"),
    (("+",), "\033[32m"),
    (("-",), "\033[31m"),
)


def _color_diff_line(line: str) -> str:
    for prefixes, code in _DIFF_LINE_COLORS:
        if line.startswith(prefixes):
            return f"{code}{line}\033[0m"
    return line


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string."""
    return "\n".join(_color_diff_line(line) for line in diff_text.splitlines())


_REGION_ANSI = {
    HunkStatus.PENDING: "\033[33m",
    HunkStatus.APPLIED: "\033[32m",
    HunkStatus.SKIPPED: "\033[2m",
}


def _gutter(entry: RegionLine) -> str:
    if entry.is_active:
        return "▶"
    if entry.status is None:
        return " "
    return "│"


def format_colored_region(region: list[RegionLine]) -> str:
    """Render document lines with ANSI colors by hunk state.

    Lines of an applied hunk are green, pending yellow, skipped dim.
    """
    rendered = []
    for entry in region:
        line = f"{entry.line + 1:>5} {_gutter(entry)} {entry.text}"
        if entry.status is not None:
            line = f"{_REGION_ANSI[entry.status]}{line}\033[0m"
        rendered.append(line)
    return "\n".join(rendered)


_STATUS_STYLE = {
    HunkStatus.PENDING: "bold yellow",
    HunkStatus.APPLIED: "bold green",
    HunkStatus.SKIPPED: "dim",
}


def _format_rich_hunk(
    session: ReviewSession,
    index: int,
    marker: HunkMarker | None = None,
) -> str:
    """Convert one hunk plus its review state to Rich markup.

    With a *marker*, the live document lines around the hunk follow the diff.
    """
    hunk = session.hunks[index]
    status = session.status[index]
    style = _STATUS_STYLE[status]
    pointer = "▶ " if session.active_hunk == index else "  "
    start = session.get_adjusted_start_line(index)

    lines = [
        f"[{style}]{pointer}Hunk {index + 1}/{len(session.hunks)} "
        f"({status.value}) at line {start + 1}: {describe_hunk(hunk)}[/{style}]",
        f"[cyan]{hunk.header}[/cyan]",
    ]
    for change in hunk.changes:
        # Escape Rich markup characters in the line content
        escaped = f"{change.marker}{change.text}".replace("[", "\\[")
        if status is HunkStatus.SKIPPED:
            lines.append(f"[dim]{escaped}[/dim]")
        elif change.kind is ChangeKind.INSERT:
            lines.append(f"[green]{escaped}[/green]")
        elif change.kind is ChangeKind.DELETE:
            lines.append(f"[red]{escaped}[/red]")
        else:
            lines.append(escaped)

    if marker is not None:
        lines.append("[dim]current document:[/dim]")
        for entry in document_region(session, marker):
            text = entry.text.replace("[", "\\[")
            row = f"{entry.line + 1:>5} {_gutter(entry)} {text}"
            if entry.status is None:
                lines.append(f"[dim]{row}[/dim]")
            else:
                region_style = _STATUS_STYLE[entry.status]
                lines.append(f"[{region_style}]{row}[/{region_style}]")
    return "\n".join(lines)


def run_review(session: ReviewSession, use_tui: bool = True) -> None:
    """Drive *session* until it closes or the user quits."""
    if use_tui:
        _textual_review(session)
    else:
        _console_review(session)


# ══════════════════════════════════════════════════════════════════
#  Interactive Hunk Review — Textual TUI
# ══════════════════════════════════════════════════════════════════

def _textual_review(session: ReviewSession) -> None:
    """Launch a Textual app to review hunks one at a time."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    from .cli_display import log

    class HunkReviewApp(App):
        """Hunk-by-hunk review with apply/reject actions."""

        CSS = """
        #review-header {
            dock: top;
            height: 1;
            background: $primary-darken-2;
            text-style: bold;
            padding: 0 1;
        }
        #hunk-scroll {
            height: 1fr;
            border: tall $panel;
            padding: 0 1;
        }
        .hunk {
            padding: 0 0 1 0;
        }
        .hunk.-active {
            border-left: thick $accent;
            background: $boost;
        }
        #controls {
            dock: bottom;
            height: auto;
            align-horizontal: center;
        }
        #controls Button {
            margin: 0 2;
        }
        #review-status {
            dock: bottom;
            height: 1;
            color: $text-muted;
            padding: 0 1;
        }
        """

        BINDINGS = [
            Binding("a", "apply_hunk", "Apply hunk"),
            Binding("r", "reject_hunk", "Reject hunk"),
            Binding("A", "apply_all", "Apply all remaining"),
            Binding("d", "discard", "Discard"),
            Binding("n", "next_hunk", "Next"),
            Binding("p", "prev_hunk", "Previous"),
            Binding("escape", "quit", "Quit"),
        ]

        def __init__(self, review: ReviewSession) -> None:
            super().__init__()
            self._session = review

        def compose(self) -> ComposeResult:
            path = self._session.file_diff.path or "document"
            yield Static(f"Reviewing {path}", id="review-header")
            with VerticalScroll(id="hunk-scroll"):
                for index in range(len(self._session.hunks)):
                    yield Static("", id=f"hunk-{index}", classes="hunk")
            yield Static("", id="review-status")
            with Horizontal(id="controls"):
                yield Button("✔ Apply", id="apply-btn", variant="success")
                yield Button("✕ Reject", id="reject-btn", variant="error")
                yield Button("Apply All", id="apply-all-btn", variant="primary")
                yield Button("Discard", id="discard-btn", variant="default")
            yield Footer()

        def on_mount(self) -> None:
            self._refresh_view()

        def _refresh_view(self) -> None:
            line_count = self._session.editor.current_line_count()
            markers = {
                m.hunk_index: m for m in hunk_markers(self._session, line_count)
            }
            for index in range(len(self._session.hunks)):
                widget = self.query_one(f"#hunk-{index}", Static)
                widget.update(
                    _format_rich_hunk(self._session, index, markers.get(index))
                )
                widget.set_class(self._session.active_hunk == index, "-active")
            self.query_one("#review-status", Static).update(
                f"{summarize(self._session)}  |  "
                f"[bold]a[/bold] apply, [bold]r[/bold] reject, "
                f"[bold]A[/bold] apply all, [bold]d[/bold] discard"
            )
            active = self._session.active_hunk
            if active is not None:
                self.query_one(f"#hunk-{active}", Static).scroll_visible()

        def _run(self, operation, *args) -> None:
            try:
                outcome = operation(*args)
            except ReviewError as exc:
                log.warning(f"[Review] {exc}")
                self.notify(str(exc), severity="error")
                return
            if getattr(outcome, "error", ""):
                self.notify(outcome.error, severity="error")
            if self._session.closed:
                self.exit()
                return
            self._refresh_view()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            actions = {
                "apply-btn": self.action_apply_hunk,
                "reject-btn": self.action_reject_hunk,
                "apply-all-btn": self.action_apply_all,
                "discard-btn": self.action_discard,
            }
            handler = actions.get(event.button.id)
            if handler is not None:
                handler()

        def action_apply_hunk(self) -> None:
            if self._session.active_hunk is not None:
                self._run(self._session.apply_hunk, self._session.active_hunk)

        def action_reject_hunk(self) -> None:
            if self._session.active_hunk is not None:
                self._run(self._session.skip_hunk, self._session.active_hunk)

        def action_apply_all(self) -> None:
            self._run(self._session.apply_all_remaining)

        def action_discard(self) -> None:
            self._run(self._session.discard_all)

        def action_next_hunk(self) -> None:
            self._move(1)

        def action_prev_hunk(self) -> None:
            self._move(-1)

        def _move(self, step: int) -> None:
            pending = self._session.indices_with(HunkStatus.PENDING)
            if not pending or self._session.active_hunk is None:
                return
            pos = pending.index(self._session.active_hunk)
            self._run(self._session.preview_hunk, pending[(pos + step) % len(pending)])

    app = HunkReviewApp(session)
    app.run()


def _console_review(session: ReviewSession) -> None:
    """Console-based review loop for terminals without the Textual app."""
    from .cli_display import show_error, show_info

    print()
    print(f"Reviewing {session.file_diff.path or 'document'} ({len(session.hunks)} hunks)")
    print("=" * 60)

    while not session.closed:
        index = session.active_hunk
        if index is None:
            break
        start = session.get_adjusted_start_line(index)
        print(f"\n{'─' * 60}")
        print(f"  Hunk {index + 1}/{len(session.hunks)} at line {start + 1}"
              f"  ({summarize(session)})")
        print(f"  {describe_hunk(session.hunks[index])}")
        print(format_colored_hunk(session.hunks[index]))
        marker = next(
            (m for m in hunk_markers(session, session.editor.current_line_count())
             if m.hunk_index == index),
            None,
        )
        if marker is not None:
            print("  current document:")
            print(format_colored_region(document_region(session, marker)))
        print("\n  [a]pply  |  [r]eject  |  [A]pply all  |  [d]iscard  |  [q]uit")

        try:
            choice = input("  Your choice: ").strip()
        except (EOFError, KeyboardInterrupt):
            return

        try:
            if choice in ("a", "apply"):
                session.apply_hunk(index)
            elif choice in ("r", "reject"):
                session.skip_hunk(index)
            elif choice == "A":
                result = session.apply_all_remaining()
                if not result.success:
                    show_error(result.error)
            elif choice in ("d", "discard"):
                session.discard_all()
            elif choice in ("q", "quit"):
                return
            else:
                print("  Invalid choice. Use a, r, A, d or q.")
        except ReviewError as exc:
            show_error(str(exc))

    show_info(f"Review finished: {summarize(session)}")
