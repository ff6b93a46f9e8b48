"""pykill - Main Textual application."""

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Static, TextArea

from pykill.config import LOG_LEVELS, Settings, load_settings
from pykill.errors import ConfigError, ProcessTableUnavailable
from pykill.log_setup import setup_logging
from pykill.marks import MarkStore
from pykill.models import ProcessDetails, Signal
from pykill.procfs import ProcessReader
from pykill.render import ASCII_GLYPHS, UNICODE_GLYPHS, Glyphs, format_lines, render_tree
from pykill.scheduler import RefreshScheduler, ViewState, clamp_cursor
from pykill.signals import SignalExecutor
from pykill.snapshot import build_snapshot

logger = logging.getLogger(__name__)


def format_details(details: ProcessDetails) -> str:
    """Format process details for the detail screen."""
    lines = [
        f"PID      {details.pid}",
        f"Command  {' '.join(details.cmdline) or '-'}",
        f"Cwd      {details.cwd or '-'}",
        f"Exe      {details.exe or '-'}",
        f"Root     {details.root or '-'}",
        "",
        "Environment:",
    ]
    lines.extend(f"  {entry}" for entry in details.environ)
    if not details.environ:
        lines.append("  (unavailable)")
    return "\n".join(lines)


class ProcessTreeView(TextArea):
    """Read-only text view of the rendered process tree."""

    DEFAULT_CSS = """
    ProcessTreeView {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTreeView."""
        super().__init__(*args, read_only=True, soft_wrap=False, show_line_numbers=False, **kwargs)

    @property
    def cursor_row(self) -> int:
        """Get the line the cursor is on."""
        return self.cursor_location[0]

    def view_state(self) -> ViewState:
        """Record scroll offset and cursor position."""
        row, column = self.cursor_location
        return ViewState(scroll_x=self.scroll_x, scroll_y=self.scroll_y, row=row, column=column)

    def show_lines(self, lines: list[str], row: int | None = None) -> None:
        """
        Replace the text, keeping scroll offset and cursor where they were.

        Args:
            lines: New text lines.
            row: Line to put the cursor on instead of the current one.
        """
        state = self.view_state()
        if row is not None:
            state = replace(state, row=row)

        self.load_text("\n".join(lines))
        self.cursor_location = clamp_cursor(state, lines)
        # Moving the cursor scrolls it into view; put the viewport back after
        self.scroll_to(state.scroll_x, state.scroll_y, animate=False)
        self.call_after_refresh(self._restore_scroll, state, row is not None)

    def _restore_scroll(self, state: ViewState, follow_cursor: bool) -> None:
        self.scroll_to(state.scroll_x, state.scroll_y, animate=False)
        if follow_cursor:
            self.scroll_cursor_visible()


class DetailScreen(Screen):
    """Command line, links and environment of one process."""

    BINDINGS = [
        Binding("escape,q", "app.pop_screen", "Back"),
    ]

    def __init__(self, details: ProcessDetails) -> None:
        """Initialize DetailScreen."""
        super().__init__()
        self.details = details

    def compose(self) -> ComposeResult:
        """Compose the detail layout."""
        yield VerticalScroll(Static(format_details(self.details), markup=False, id="details"))
        yield Footer()


class TreeScreen(Screen):
    """Process tree with marks and signal execution."""

    BINDINGS = [
        Binding("t", "mark('TERM')", "TERM"),
        Binding("h", "mark('HUP')", "HUP"),
        Binding("k", "mark('KILL')", "KILL"),
        Binding("Q", "mark('QUIT')", "QUIT"),
        Binding("u", "unmark", "Unmark"),
        Binding("U", "unmark_all", "Unmark all", show=False),
        Binding("x", "execute", "Execute"),
        Binding("g", "refresh_tree", "Refresh"),
        Binding("enter", "details", "Details"),
        *[Binding(str(digit), f"count_prefix({digit})", show=False) for digit in range(10)],
    ]

    def __init__(
        self,
        reader: ProcessReader,
        executor: SignalExecutor,
        glyphs: Glyphs = UNICODE_GLYPHS,
        refresh_interval: float = 2.0,
    ) -> None:
        """Initialize TreeScreen."""
        super().__init__()
        self._reader = reader
        self._executor = executor
        self._glyphs = glyphs
        self._mark_store = MarkStore()
        self._tree_view = ProcessTreeView(id="process-tree")
        self._refresh_scheduler = RefreshScheduler(
            self.set_interval,
            self.refresh_tree,
            self._is_visible,
            interval=refresh_interval,
        )
        self._count_prefix: int | None = None
        self._started = False

    @property
    def marks(self) -> MarkStore:
        """Get the mark store of the current render."""
        return self._mark_store

    @property
    def scheduler(self) -> RefreshScheduler:
        """Get the refresh scheduler."""
        return self._refresh_scheduler

    def compose(self) -> ComposeResult:
        """Compose the tree layout."""
        yield Static(f"  {'PID':>7}   COMMAND", id="tree-header")
        yield self._tree_view
        yield Footer()

    def on_mount(self) -> None:
        """Render the first snapshot and start refreshing."""
        self._tree_view.focus()
        self.refresh_tree()
        self._refresh_scheduler.start()
        self._started = True

    def on_screen_resume(self) -> None:
        """Pick refreshing back up when the tree becomes visible again."""
        if not self._started or self._mark_store.has_pending:
            return
        self.refresh_tree()
        self._refresh_scheduler.start()

    def _is_visible(self) -> bool:
        return self.app.screen is self

    def refresh_tree(self) -> bool:
        """
        Rebuild the tree from a fresh snapshot, discarding marks.

        Returns:
            False if the process table could not be read; the old display stays.
        """
        try:
            snapshot = build_snapshot(self._reader)
        except ProcessTableUnavailable as e:
            logger.error(f"Refresh failed: {e}")
            self.notify(str(e), title="Refresh failed", severity="error")
            return False

        self._mark_store.replace(render_tree(snapshot))
        self._redraw()
        return True

    def _redraw(self, row: int | None = None) -> None:
        self._tree_view.show_lines(format_lines(self._mark_store.lines, self._glyphs), row=row)

    def _take_count(self) -> int:
        count = self._count_prefix if self._count_prefix is not None else 1
        self._count_prefix = None
        return count

    def _apply_mark(self, signal: Signal | None) -> None:
        # Marks must survive until executed, so no automatic rebuilds from here on
        self._refresh_scheduler.stop()
        count = self._take_count()
        row = self._mark_store.mark(self._tree_view.cursor_row, signal, count)
        self._redraw(row=row)

    def action_count_prefix(self, digit: int) -> None:
        """Extend the numeric prefix of the next mark command."""
        self._count_prefix = (self._count_prefix or 0) * 10 + digit

    def action_mark(self, name: str) -> None:
        """Mark lines from the cursor with a signal."""
        self._apply_mark(Signal[name])

    def action_unmark(self) -> None:
        """Clear marks from the cursor."""
        self._apply_mark(None)

    def action_unmark_all(self) -> None:
        """Clear every mark."""
        self._refresh_scheduler.stop()
        self._count_prefix = None
        self._mark_store.unmark_all()
        self._redraw()

    def action_execute(self) -> None:
        """Send all pending signals."""
        self._count_prefix = None
        pending = self._mark_store.pending()
        if not pending:
            self.notify("No marked processes")
        else:
            logger.info(f"Sending {len(pending)} signals")
            row = self._tree_view.cursor_row
            report = self._executor.execute(self._mark_store.lines)
            self._mark_store.replace(report.lines)
            self._redraw(row=report.cursor_after(row))
            for failure in report.failures:
                self.notify(
                    f"{failure.pid}: {failure.message}",
                    title=f"SIG{failure.signal.name} failed",
                    severity="error",
                )

        if not self._mark_store.has_pending:
            self._refresh_scheduler.start()

    def action_refresh_tree(self) -> None:
        """Rebuild the tree now and resume automatic refreshing."""
        self._count_prefix = None
        self.refresh_tree()
        self._refresh_scheduler.start()

    def action_details(self) -> None:
        """Show details of the process under the cursor."""
        lines = self._mark_store.lines
        if not lines:
            return
        pid = lines[min(self._tree_view.cursor_row, len(lines) - 1)].pid
        details = self._reader.read_details(pid)
        if details is None:
            self.notify(f"Process {pid} no longer exists", severity="warning")
            return
        self.app.push_screen(DetailScreen(details))


class PykillApp(App):
    """Main pykill application."""

    TITLE = "pykill"
    SUB_TITLE = "Process tree and signals"

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, settings: Settings | None = None, executor: SignalExecutor | None = None) -> None:
        """Initialize the PykillApp."""
        super().__init__()
        self.settings = settings or Settings()
        self._executor = executor or SignalExecutor()

    def get_default_screen(self) -> Screen:
        """Use the process tree as the base screen."""
        return TreeScreen(
            ProcessReader(self.settings.proc_root),
            self._executor,
            glyphs=ASCII_GLYPHS if self.settings.ascii_glyphs else UNICODE_GLYPHS,
            refresh_interval=self.settings.refresh_interval,
        )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="pykill",
        description="Browse the process tree, mark processes and send them signals.",
    )
    parser.add_argument("--config", type=Path, help="TOML configuration file")
    parser.add_argument("--interval", type=float, help="seconds between automatic refreshes")
    parser.add_argument("--ascii", action="store_true", default=None, help="draw the tree with ASCII glyphs")
    parser.add_argument("--proc-root", type=Path, help="procfs mount point (default /proc)")
    parser.add_argument("--log-level", choices=sorted(LOG_LEVELS), help="log file verbosity")
    return parser


def resolve_settings(argv: list[str] | None = None) -> Settings:
    """Load settings from the config file, then apply command line overrides."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        parser.error(str(e))

    if args.interval is not None:
        if args.interval <= 0:
            parser.error("--interval must be positive")
        settings.refresh_interval = args.interval
    if args.ascii is not None:
        settings.ascii_glyphs = args.ascii
    if args.proc_root is not None:
        settings.proc_root = args.proc_root
    if args.log_level is not None:
        settings.log_level = args.log_level
    return settings


def main(argv: list[str] | None = None) -> None:
    """Entry point for pykill application."""
    settings = resolve_settings(argv)
    setup_logging(settings)
    app = PykillApp(settings)
    app.run()


if __name__ == "__main__":
    main()
