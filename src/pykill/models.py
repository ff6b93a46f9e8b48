"""Data models for pykill."""

import signal
from dataclasses import dataclass, field
from enum import Enum


class Signal(Enum):
    """Signals an operator can mark a process with."""

    TERM = signal.SIGTERM
    HUP = signal.SIGHUP
    KILL = signal.SIGKILL
    QUIT = signal.SIGQUIT

    @property
    def glyph(self) -> str:
        """One-letter mark shown in the mark column."""
        return self.name[0]


class Indent(Enum):
    """Indentation tokens used to draw tree branches."""

    BLANK = "blank"
    VERTICAL = "vertical"
    TEE = "tee"
    CORNER = "corner"


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable status record of a single process."""

    pid: int
    name: str
    state: str  # 'R', 'S', 'Z', 'D', etc.
    ppid: int  # 0 when the process has no parent
    children: tuple[int, ...] = ()


@dataclass(slots=True, frozen=True)
class ProcessDetails:
    """Command line, environment and link targets of a process."""

    pid: int
    cmdline: tuple[str, ...] = ()
    environ: tuple[str, ...] = ()
    cwd: str | None = None
    exe: str | None = None
    root: str | None = None


@dataclass(slots=True)
class DisplayLine:
    """One rendered row of the process tree."""

    pid: int
    state: str
    name: str
    indent: tuple[Indent, ...] = field(default_factory=tuple)
    mark: Signal | None = None

    @property
    def state_glyph(self) -> str:
        # Interruptible sleep is the common case, keep it out of the way
        return " " if self.state == "S" else self.state
