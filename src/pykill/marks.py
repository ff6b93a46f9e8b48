"""Pending-signal marks attached to display lines."""

from pykill.models import DisplayLine, Signal


class MarkStore:
    """
    Holds the current display lines and their pending-signal marks.

    Marks live on the lines themselves; a fresh render means fresh, unmarked
    lines, so marks never outlive the render they were made on.
    """

    def __init__(self, lines: list[DisplayLine] | None = None) -> None:
        """Initialize the MarkStore with an optional initial render."""
        self._lines: list[DisplayLine] = list(lines or [])

    @property
    def lines(self) -> list[DisplayLine]:
        """Get the current display lines."""
        return self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def replace(self, lines: list[DisplayLine]) -> None:
        """Install a new set of display lines."""
        self._lines = list(lines)

    def mark(self, start: int, signal: Signal | None, count: int = 1) -> int:
        """
        Mark `count` lines starting at `start` with a signal.

        A signal of None clears the marks instead. Counts running past the
        end stop at the last line.

        Returns:
            The line the cursor should move to: the one after the last
            visited line, clamped to the last line.
        """
        if not self._lines:
            return 0

        start = max(0, start)
        stop = min(start + max(0, count), len(self._lines))
        for line in self._lines[start:stop]:
            line.mark = signal
        return min(stop, len(self._lines) - 1)

    def unmark_all(self) -> None:
        """Clear every mark."""
        for line in self._lines:
            line.mark = None

    def pending(self) -> list[DisplayLine]:
        """Get the marked lines, top to bottom."""
        return [line for line in self._lines if line.mark is not None]

    @property
    def has_pending(self) -> bool:
        """Check if any line carries a mark."""
        return any(line.mark is not None for line in self._lines)
