"""Point-in-time process forest."""

import logging
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import replace
from types import MappingProxyType

from pykill.models import ProcessRecord
from pykill.procfs import ProcessReader

logger = logging.getLogger(__name__)


class Snapshot(Mapping[int, ProcessRecord]):
    """
    Immutable mapping of PID to ProcessRecord, iterated in ascending PID order.

    Construct with from_records() to have child lists linked from parent PIDs;
    the plain constructor trusts the children already present on the records.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Mapping[int, ProcessRecord] | None = None) -> None:
        ordered = dict(sorted((records or {}).items()))
        self._records = MappingProxyType(ordered)

    @classmethod
    def from_records(cls, records: Iterable[ProcessRecord]) -> "Snapshot":
        """Build a snapshot, linking every record into its parent's children."""
        by_pid = {record.pid: record for record in records}

        children: defaultdict[int, list[int]] = defaultdict(list)
        for record in by_pid.values():
            # Orphans keep their nominal ppid but are linked nowhere
            if record.ppid in by_pid:
                children[record.ppid].append(record.pid)

        return cls(
            {
                pid: replace(record, children=tuple(sorted(children.get(pid, ()))))
                for pid, record in by_pid.items()
            }
        )

    def __getitem__(self, pid: int) -> ProcessRecord:
        return self._records[pid]

    def __iter__(self) -> Iterator[int]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"Snapshot({len(self)} processes)"

    def roots(self) -> list[int]:
        """PIDs without a parent in this snapshot, ascending."""
        return [
            pid
            for pid, record in self._records.items()
            if record.ppid == 0 or record.ppid not in self._records
        ]


def build_snapshot(reader: ProcessReader) -> Snapshot:
    """
    Read every visible process and assemble the forest.

    Processes that vanish or have malformed records between enumeration and
    read are simply left out.

    Raises:
        ProcessTableUnavailable: If the process table cannot be enumerated.
    """
    pids = reader.list_pids()
    records = [record for record in map(reader.read_record, pids) if record is not None]
    if len(records) != len(pids):
        logger.debug(f"Dropped {len(pids) - len(records)} unavailable processes")
    return Snapshot.from_records(records)
