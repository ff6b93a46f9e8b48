"""Signal dispatch and display reconciliation."""

import logging
from bisect import bisect_left
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

import psutil

from pykill.models import DisplayLine, Signal

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """Result classes of a signal dispatch."""

    SENT = "sent"
    NOT_FOUND = "not-found"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class SignalResult:
    """Outcome of sending one signal to one process."""

    pid: int
    signal: Signal
    outcome: Outcome
    message: str = ""


def send_signal(pid: int, signal: Signal) -> SignalResult:
    """Send a signal to a process and classify the result."""
    try:
        psutil.Process(pid).send_signal(signal.value)
    except psutil.NoSuchProcess:
        return SignalResult(pid, signal, Outcome.NOT_FOUND, "no such process")
    except psutil.AccessDenied as e:
        return SignalResult(pid, signal, Outcome.FAILED, e.msg or "permission denied")
    except (psutil.Error, OSError) as e:
        return SignalResult(pid, signal, Outcome.FAILED, str(e))
    return SignalResult(pid, signal, Outcome.SENT)


@dataclass(slots=True)
class ExecutionReport:
    """Display lines after an execute pass, plus what happened on the way."""

    lines: list[DisplayLine]
    results: list[SignalResult] = field(default_factory=list)
    removed: list[int] = field(default_factory=list)  # indices into the old lines

    @property
    def failures(self) -> list[SignalResult]:
        """Get the results that should be reported to the operator."""
        return [r for r in self.results if r.outcome is Outcome.FAILED]

    def cursor_after(self, row: int) -> int:
        """Map a cursor line of the old display onto the new one."""
        row -= bisect_left(self.removed, row)
        return max(0, min(row, len(self.lines) - 1))


class SignalExecutor:
    """
    Sends every pending signal and reconciles the display.

    Signals are dispatched one at a time, top to bottom. A process that no
    longer exists loses its line; any other failure keeps the line and its
    mark so it can be retried.
    """

    def __init__(self, sender: Callable[[int, Signal], SignalResult] = send_signal) -> None:
        """
        Initialize the SignalExecutor.

        Args:
            sender: Callable dispatching one signal. Defaults to psutil dispatch.
        """
        self._sender = sender

    def execute(self, lines: list[DisplayLine]) -> ExecutionReport:
        """Send the signal of every marked line and build the new display."""
        report = ExecutionReport(lines=[])

        for index, line in enumerate(lines):
            if line.mark is None:
                report.lines.append(line)
                continue

            result = self._sender(line.pid, line.mark)
            report.results.append(result)

            if result.outcome is Outcome.NOT_FOUND:
                logger.info(f"Process {line.pid} is gone, dropping it")
                report.removed.append(index)
                continue

            if result.outcome is Outcome.SENT:
                logger.info(f"Sent SIG{line.mark.name} to {line.pid}")
                line.mark = None
            else:
                logger.warning(f"SIG{line.mark.name} to {line.pid} failed: {result.message}")
            report.lines.append(line)

        return report
