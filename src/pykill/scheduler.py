"""Periodic refresh of the process tree view."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """What a set_interval implementation hands back (e.g. textual.timer.Timer)."""

    def stop(self) -> None: ...


@dataclass(slots=True, frozen=True)
class ViewState:
    """Scroll offset and cursor position of a view, recorded around a rebuild."""

    scroll_x: float = 0.0
    scroll_y: float = 0.0
    row: int = 0
    column: int = 0


def clamp_cursor(state: ViewState, lines: Sequence[str]) -> tuple[int, int]:
    """Fit a recorded cursor position onto new text lines."""
    if not lines:
        return 0, 0
    row = max(0, min(state.row, len(lines) - 1))
    column = max(0, min(state.column, len(lines[row])))
    return row, column


class RefreshScheduler:
    """
    Re-runs the snapshot and render cycle on a timer while the view is visible.

    Ticks run on the UI's event loop, interleaved with operator commands, never
    in parallel with them. A tick that finds the view hidden cancels the
    scheduler; stopping it while marks are pending is the owner's job.
    """

    def __init__(
        self,
        set_interval: Callable[[float, Callable[[], None]], TimerHandle],
        refresh: Callable[[], None],
        is_visible: Callable[[], bool],
        interval: float = 2.0,
    ) -> None:
        """
        Initialize the RefreshScheduler.

        Args:
            set_interval: Starts a repeating timer, e.g. a Textual widget's set_interval.
            refresh: Rebuilds the view.
            is_visible: Reports whether the view is currently shown.
            interval: Seconds between refreshes. Default 2.0s.
        """
        self._set_interval = set_interval
        self._refresh = refresh
        self._is_visible = is_visible
        self._interval = max(0.1, interval)
        self._timer: TimerHandle | None = None

    @property
    def interval(self) -> float:
        """Get the refresh interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the refresh interval, restarting a running timer."""
        self._interval = max(0.1, value)  # Minimum 0.1 seconds
        if self.is_running:
            self.stop()
            self.start()

    @property
    def is_running(self) -> bool:
        """Check if the timer is active."""
        return self._timer is not None

    def start(self) -> None:
        """Start the timer."""
        if self.is_running:
            return
        logger.debug(f"Refresh scheduled every {self._interval}s")
        self._timer = self._set_interval(self._interval, self.tick)

    def stop(self) -> None:
        """Cancel the timer."""
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
            logger.debug("Refresh stopped")

    def tick(self) -> None:
        """Refresh the view, or cancel if nobody can see it."""
        if not self._is_visible():
            self.stop()
            return
        self._refresh()
