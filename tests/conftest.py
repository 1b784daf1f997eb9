"""MockExecutor and shared snapshot data for testing."""
from __future__ import annotations

import os

# Colour codes are chosen at import time; keep test output plain.
os.environ.setdefault("NO_COLOR", "1")


class MockExecutor:
    """
    Executor that returns pre-scripted responses for commands.

    responses: dict mapping tuple(cmd) -> stdout string, or an Exception
    instance to raise. A list value is consumed one item per call, which
    lets a command answer differently the second time it runs.
    If the command isn't found, raises KeyError (to catch unexpected calls in tests).
    """

    def __init__(self, responses: dict | None = None):
        self.responses: dict = responses or {}
        self.calls: list[list[str]] = []  # record of all commands run

    def run(self, cmd: list[str]) -> str:
        self.calls.append(cmd)
        key = tuple(cmd)
        if key not in self.responses:
            raise KeyError(f"MockExecutor: unexpected command: {cmd}")
        result = self.responses[key]
        if isinstance(result, list):
            result = result.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


# ---------------------------------------------------------------------------
# Snapshot data
# ---------------------------------------------------------------------------

DATA = "tank/data"
BACKUP = "backup/data"

DATA_SNAPS = [
    "tank/data@20240101.1200",
    "tank/data@20240108.1200",
    "tank/data@20240115.1200",
]

# Backup has received up to 20240108.1200
BACKUP_SNAPS = [
    "backup/data@20240101.1200",
    "backup/data@20240108.1200",
]

VDEV_LISTING = "backup\t-\n  sdc1\t-\n"
SEND_ESTIMATE = (
    "incremental\t20240108.1200\ttank/data@20240115.1200\t1572864\n"
    "size\t1572864\n"
)


def list_cmd(dataset: str) -> tuple:
    return ("zfs", "list", "-H", "-t", "snapshot", "-o", "name", "-s", "createtxg", dataset)


def send_estimate_cmd(dataset: str, old: str, new: str) -> tuple:
    return ("zfs", "send", "-n", "-P", "-i", f"{dataset}@{old}", f"{dataset}@{new}")


def vdev_cmd(pool: str) -> tuple:
    return ("zpool", "list", "-v", "-H", "-o", "name", "-L", pool)


def lsblk_cmd(device: str) -> tuple:
    return ("lsblk", "-dno", "pkname", f"/dev/{device}")


def _snap_list_output(full_names: list[str]) -> str:
    return "\n".join(full_names) + "\n"


def make_standard_responses(
    data_dataset: str = DATA,
    backup_dataset: str = BACKUP,
    data_snaps: list[str] | None = None,
    backup_snaps: list[str] | None = None,
) -> dict:
    """
    Return a responses dict covering a full planning run without snapshot creation.
    """
    if data_snaps is None:
        data_snaps = DATA_SNAPS
    if backup_snaps is None:
        backup_snaps = BACKUP_SNAPS

    return {
        list_cmd(data_dataset): _snap_list_output(data_snaps),
        list_cmd(backup_dataset): _snap_list_output(backup_snaps),
        send_estimate_cmd(data_dataset, "20240108.1200", "20240115.1200"): SEND_ESTIMATE,
        vdev_cmd("backup"): VDEV_LISTING,
        lsblk_cmd("sdc1"): "sdc\n",
    }

