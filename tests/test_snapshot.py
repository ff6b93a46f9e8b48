"""Tests for snapshot building."""

import pytest

from pykill.errors import ProcessTableUnavailable
from pykill.models import ProcessRecord
from pykill.procfs import ProcessReader
from pykill.snapshot import Snapshot, build_snapshot


def record(pid: int, ppid: int, name: str | None = None, state: str = "S") -> ProcessRecord:
    return ProcessRecord(pid=pid, name=name or f"p{pid}", state=state, ppid=ppid)


def assert_children_invariant(snapshot: Snapshot) -> None:
    for pid, rec in snapshot.items():
        expected = sorted(other for other, o in snapshot.items() if o.ppid == pid)
        assert list(rec.children) == expected


class TestSnapshot:
    """Tests for the Snapshot mapping."""

    def test_empty_snapshot(self):
        """Test an empty snapshot has no records and no roots."""
        snapshot = Snapshot()
        assert len(snapshot) == 0
        assert list(snapshot) == []
        assert snapshot.roots() == []

    def test_iteration_is_ascending(self):
        """Test records are iterated in ascending PID order."""
        snapshot = Snapshot.from_records([record(30, 1), record(1, 0), record(7, 1)])
        assert list(snapshot) == [1, 7, 30]

    def test_from_records_links_children(self):
        """Test child lists are linked and sorted ascending."""
        snapshot = Snapshot.from_records(
            [record(1, 0), record(9, 1), record(2, 1), record(5, 1), record(11, 5)]
        )
        assert snapshot[1].children == (2, 5, 9)
        assert snapshot[5].children == (11,)
        assert snapshot[9].children == ()
        assert_children_invariant(snapshot)

    def test_orphans_are_roots(self):
        """Test records whose parent is missing become roots."""
        snapshot = Snapshot.from_records([record(1, 0), record(50, 49), record(60, 1)])
        assert snapshot.roots() == [1, 50]
        assert snapshot[50].ppid == 49
        assert_children_invariant(snapshot)

    def test_all_orphans(self):
        """Test a snapshot where no parent resolves has only roots."""
        snapshot = Snapshot.from_records([record(3, 100), record(2, 200), record(1, 300)])
        assert snapshot.roots() == [1, 2, 3]

    def test_snapshot_is_read_only(self):
        """Test the snapshot cannot be mutated."""
        snapshot = Snapshot.from_records([record(1, 0)])
        with pytest.raises(TypeError):
            snapshot[2] = record(2, 1)

    def test_plain_constructor_trusts_children(self):
        """Test the plain constructor keeps the given child lists."""
        snapshot = Snapshot({1: ProcessRecord(1, "a", "S", 0, children=(2,)), 2: record(2, 7)})
        assert snapshot[1].children == (2,)
        assert snapshot.roots() == [1, 2]


class TestBuildSnapshot:
    """Tests for build_snapshot."""

    def test_scenario_tree(self, fake_proc):
        """Test the four-process example tree."""
        fake_proc.add(1, "init", ppid=0)
        fake_proc.add(10, "a", ppid=1)
        fake_proc.add(20, "b", ppid=1)
        fake_proc.add(30, "c", ppid=20)

        snapshot = build_snapshot(ProcessReader(fake_proc.root))

        assert list(snapshot) == [1, 10, 20, 30]
        assert snapshot[1].children == (10, 20)
        assert snapshot[20].children == (30,)
        assert snapshot.roots() == [1]
        assert_children_invariant(snapshot)

    def test_vanished_and_malformed_are_omitted(self, fake_proc):
        """Test unreadable records are left out without failing the build."""
        fake_proc.add(1, "init", ppid=0)
        fake_proc.add(2, "child", ppid=1)
        (fake_proc.root / "3").mkdir()  # exited between listing and read
        fake_proc.add_raw(4, "4 broken\n")
        fake_proc.add(5, "grandchild", ppid=4)

        snapshot = build_snapshot(ProcessReader(fake_proc.root))

        assert list(snapshot) == [1, 2, 5]
        assert snapshot[1].children == (2,)
        # Parent 4 was dropped, so 5 is an orphan
        assert 5 in snapshot.roots()

    def test_enumeration_failure(self, tmp_path):
        """Test a missing process table aborts the build."""
        with pytest.raises(ProcessTableUnavailable):
            build_snapshot(ProcessReader(tmp_path / "missing"))

    def test_empty_table(self, fake_proc):
        """Test an empty process table builds an empty snapshot."""
        assert len(build_snapshot(ProcessReader(fake_proc.root))) == 0

    def test_real_proc(self):
        """Test a snapshot of the live system satisfies the child invariant."""
        reader = ProcessReader()
        if not reader.proc_root.is_dir():
            pytest.skip("requires procfs")

        snapshot = build_snapshot(reader)
        assert len(snapshot) > 0
        assert_children_invariant(snapshot)
