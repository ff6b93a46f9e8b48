"""Shared fixtures for pykill tests."""

import os
from pathlib import Path

import pytest


class FakeProc:
    """A minimal procfs tree under a temporary directory."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def add(self, pid: int, name: str, state: str = "S", ppid: int = 0) -> Path:
        """Add a process with a well-formed stat line."""
        return self.add_raw(pid, f"{pid} ({name}) {state} {ppid} {pid} {pid} 0 -1 4194560 100 0 0 0\n")

    def add_raw(self, pid: int, stat: str) -> Path:
        """Add a process directory with an arbitrary stat line."""
        proc_dir = self.root / str(pid)
        proc_dir.mkdir(exist_ok=True)
        (proc_dir / "stat").write_text(stat)
        return proc_dir

    def add_details(
        self,
        pid: int,
        cmdline: bytes = b"",
        environ: bytes | None = None,
        cwd: str | None = None,
        exe: str | None = None,
        root: str | None = None,
    ) -> None:
        """Add command line, environment and links to an existing process."""
        proc_dir = self.root / str(pid)
        (proc_dir / "cmdline").write_bytes(cmdline)
        if environ is not None:
            (proc_dir / "environ").write_bytes(environ)
        for link, target in (("cwd", cwd), ("exe", exe), ("root", root)):
            if target is not None:
                os.symlink(target, proc_dir / link)


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """Empty fake procfs rooted in a temporary directory."""
    root = tmp_path / "proc"
    root.mkdir()
    return FakeProc(root)
