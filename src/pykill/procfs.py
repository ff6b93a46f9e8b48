"""Process record reader for the /proc filesystem.

PUBLIC API:
  - parse_stat: Parse the fixed-format line of /proc/<pid>/stat
  - ProcessReader: Enumerate PIDs and read per-process records and details
"""

import logging
import os
from pathlib import Path

from pykill.errors import ProcessTableUnavailable
from pykill.models import ProcessDetails, ProcessRecord

logger = logging.getLogger(__name__)


def parse_stat(text: str) -> ProcessRecord:
    """Parse a stat line into a ProcessRecord without children.

    The command name is whatever lies between the first "(" and the last ")",
    so names containing spaces or parentheses survive intact.

    Args:
        text: Contents of /proc/<pid>/stat.

    Raises:
        ValueError: If the line does not match the expected layout.
    """
    left_paren = text.find("(")
    right_paren = text.rfind(")")
    if left_paren < 1 or right_paren < left_paren:
        raise ValueError(f"no parenthesized command in {text[:64]!r}")

    pid = int(text[:left_paren].strip())
    if pid <= 0:
        raise ValueError(f"invalid pid {pid}")

    fields = text[right_paren + 1 :].split()
    if len(fields) < 2:
        raise ValueError(f"truncated stat line {text[:64]!r}")

    state = fields[0]
    if len(state) != 1:
        raise ValueError(f"invalid state {state!r}")

    return ProcessRecord(
        pid=pid,
        name=text[left_paren + 1 : right_paren],
        state=state,
        ppid=int(fields[1]),
    )


def _split_block(data: bytes) -> tuple[str, ...]:
    """Split a NUL-separated block into strings."""
    return tuple(part.decode("utf-8", "replace") for part in data.split(b"\x00") if part)


class ProcessReader:
    """Reads process records from a procfs mount.

    Individual processes may vanish at any moment; every per-process read
    reports that as "unavailable" rather than raising.
    """

    def __init__(self, proc_root: str | os.PathLike[str] = "/proc") -> None:
        """
        Initialize the ProcessReader.

        Args:
            proc_root: Mount point of the process-information filesystem.
        """
        self._root = Path(proc_root)

    @property
    def proc_root(self) -> Path:
        """Get the procfs mount point."""
        return self._root

    def list_pids(self) -> list[int]:
        """
        List the PIDs currently present, ascending.

        Raises:
            ProcessTableUnavailable: If the process table cannot be listed.
        """
        try:
            entries = os.listdir(self._root)
        except OSError as e:
            raise ProcessTableUnavailable(f"cannot list {self._root}: {e.strerror or e}") from e

        return sorted(pid for pid in (int(e) for e in entries if e.isdigit()) if pid > 0)

    def read_record(self, pid: int) -> ProcessRecord | None:
        """Read the status record of a process, or None if it is unavailable."""
        try:
            text = (self._root / str(pid) / "stat").read_bytes().decode("utf-8", "replace")
        except OSError as e:
            logger.debug(f"Could not read stat of {pid}: {e}")
            return None

        try:
            record = parse_stat(text)
        except ValueError as e:
            logger.debug(f"Malformed stat of {pid}: {e}")
            return None

        if record.pid != pid:
            logger.debug(f"Stat of {pid} claims pid {record.pid}")
            return None
        return record

    def read_details(self, pid: int) -> ProcessDetails | None:
        """Read command line, environment and link targets of a process.

        Returns None if the process no longer exists. Fields that exist but
        are unreadable (e.g. another user's environment) are left empty.
        """
        proc_dir = self._root / str(pid)
        if not proc_dir.is_dir():
            return None

        return ProcessDetails(
            pid=pid,
            cmdline=_split_block(self._read_bytes(proc_dir / "cmdline")),
            environ=_split_block(self._read_bytes(proc_dir / "environ")),
            cwd=self._read_link(proc_dir / "cwd"),
            exe=self._read_link(proc_dir / "exe"),
            root=self._read_link(proc_dir / "root"),
        )

    def _read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            logger.debug(f"Could not read {path}: {e}")
            return b""

    def _read_link(self, path: Path) -> str | None:
        try:
            return os.readlink(path)
        except OSError as e:
            logger.debug(f"Could not read link {path}: {e}")
            return None
