"""In-memory table of mounted partitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

LAST_DIGITS = "73"
MAX_IDS_PER_DISK = 15  # 3 primary + 12 logical partitions


@dataclass(frozen=True)
class MountedPartition:
    """A partition mounted in memory, identified by its id."""

    partition_id: str
    partition_name: str
    disk_path: str


class MountTable:
    """Ordered collection of mounted partitions."""

    def __init__(self) -> None:
        self._entries: list[MountedPartition] = []

    def __iter__(self) -> Iterator[MountedPartition]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def _find(self, partition_id: str) -> MountedPartition | None:
        return next((e for e in self._entries if e.partition_id == partition_id), None)

    def new_id(self, disk_name: str) -> str | None:
        """Lowest free id for ``disk_name``, or None when all are taken."""
        taken = {entry.partition_id for entry in self._entries}
        candidates = (f"{LAST_DIGITS}{n}{disk_name}" for n in range(1, MAX_IDS_PER_DISK + 1))
        return next((c for c in candidates if c not in taken), None)

    def insert(self, partition_name: str, disk_name: str, disk_path: str) -> MountedPartition:
        """Mount a partition at the end of the table and return its entry."""
        new_id = self.new_id(disk_name)
        if new_id is None:
            raise ValueError(f"no free partition id left for disk {disk_name}")
        entry = MountedPartition(new_id, partition_name, disk_path)
        self._entries.append(entry)
        return entry

    def is_mounted(self, partition_name: str, disk_path: str) -> bool:
        return any(
            e.partition_name == partition_name and e.disk_path == disk_path
            for e in self._entries
        )

    def partition_id(self, partition_name: str) -> str | None:
        return next(
            (e.partition_id for e in self._entries if e.partition_name == partition_name), None
        )

    def has_id(self, partition_id: str) -> bool:
        return self._find(partition_id) is not None

    def disk_path(self, partition_id: str) -> str | None:
        entry = self._find(partition_id)
        return entry.disk_path if entry else None

    def partition_name(self, partition_id: str) -> str | None:
        entry = self._find(partition_id)
        return entry.partition_name if entry else None

    def remove(self, partition_id: str) -> MountedPartition:
        """Unmount the partition with ``partition_id``; KeyError if absent."""
        entry = self._find(partition_id)
        if entry is None:
            raise KeyError(partition_id)
        self._entries.remove(entry)
        return entry

    def describe(self) -> str:
        """Human-readable listing of the mounted partitions."""
        lines = ["> Mostrando lista de particiones montadas en memoria:"]
        lines.extend(
            f"[ Id: {e.partition_id} | Partition name: {e.partition_name} | "
            f"Disk path: {e.disk_path} ]"
            for e in self._entries
        )
        lines.append(f"> Total particiones montadas: {len(self._entries)}")
        return "\n".join(lines) + "\n\n"