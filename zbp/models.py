"""Data models for zfs-backup-planner."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zbp.estimate import TransferEstimate

UNKNOWN_DEVICE = "??"

SNAPSHOT_MODES = ("ask", "always", "never")


def pool_name(path: str) -> str:
    """Return the pool a dataset or snapshot path lives in.

    data/system@snap1 -> data, data123 -> data123, pool1/child -> pool1
    """
    return path.split("/", 1)[0]


@dataclass(frozen=True)
class Snapshot:
    """A ZFS snapshot: pool/dataset@name."""
    dataset: str
    name: str  # just the snapshot label after '@'

    @property
    def full_name(self) -> str:
        return f"{self.dataset}@{self.name}"

    @classmethod
    def parse(cls, full_name: str) -> "Snapshot":
        dataset, sep, name = full_name.partition("@")
        if not sep or not name:
            raise ValueError(f"Not a snapshot: {full_name!r}")
        return cls(dataset=dataset, name=name)


@dataclass(frozen=True)
class BlockDeviceRef:
    """Physical disk backing the backup pool, if it could be determined.

    diagnostic holds the raw lookup output when resolution failed so the
    operator can see why.
    """
    name: str | None
    diagnostic: str = ""

    @property
    def known(self) -> bool:
        return self.name is not None

    @property
    def display(self) -> str:
        return self.name if self.name is not None else UNKNOWN_DEVICE


@dataclass
class PlannerConfig:
    data_dataset: str
    backup_dataset: str
    snapshot_mode: str = "ask"   # one of SNAPSHOT_MODES
    include_oldest: bool = True
    label_format: str = "%Y%m%d.%H%M"
    progress_meter: str = "pv -pterb"
    verbose: bool = False

    @property
    def backup_pool(self) -> str:
        return pool_name(self.backup_dataset)


@dataclass
class BackupPlan:
    """Everything decided during a run, ready to be rendered."""
    data_dataset: str
    backup_dataset: str
    data_snapshots: list[Snapshot] = field(default_factory=list)
    backup_snapshots: list[Snapshot] = field(default_factory=list)
    old_label: str | None = None
    new_label: str | None = None
    created: Snapshot | None = None
    estimate: "TransferEstimate | None" = None
    device: BlockDeviceRef = field(default_factory=lambda: BlockDeviceRef(None))

    @property
    def backup_pool(self) -> str:
        return pool_name(self.backup_dataset)
