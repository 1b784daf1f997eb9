"""ZFS operations using an Executor for dependency injection."""
from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from zbp.errors import ListingError, SnapshotCreationError
from zbp.executor import ExecutorError
from zbp.models import Snapshot

if TYPE_CHECKING:
    from zbp.executor import Executor


def echo_command(cmd: list[str], verbose: bool) -> None:
    if verbose:
        print(f"    $ {shlex.join(cmd)}")


def list_snapshots(
    dataset: str,
    executor: "Executor",
    verbose: bool = False,
) -> list[Snapshot]:
    """Return snapshots of a dataset, oldest first."""
    cmd = ["zfs", "list", "-H", "-t", "snapshot", "-o", "name", "-s", "createtxg", dataset]
    echo_command(cmd, verbose)
    try:
        output = executor.run(cmd)
    except ExecutorError as e:
        raise ListingError(f"Listing snapshots of {dataset} failed", e) from e

    results = []
    for line in output.splitlines():
        name = line.strip()
        if not name:
            continue
        try:
            results.append(Snapshot.parse(name))
        except ValueError as e:
            raise ListingError(
                f"Unexpected line in snapshot listing of {dataset}: {name!r}"
            ) from e
    return results


def find_latest_pair(
    data_snaps: list[Snapshot],
    backup_snaps: list[Snapshot],
    include_oldest: bool = True,
) -> str | None:
    """Return the newest snapshot label present on both sides, or None.

    Only labels are compared, so the two datasets may live under different
    paths. With include_oldest=False the first (oldest) entry of each list
    is never a candidate.
    """
    start = 0 if include_oldest else 1
    data_candidates = data_snaps[start:]
    backup_candidates = backup_snaps[start:]

    # Iterate data newest→oldest so the most recent common label wins
    for snap in reversed(data_candidates):
        for other in reversed(backup_candidates):
            if other.name == snap.name:
                return snap.name
    return None


def create_snapshot(
    dataset: str,
    label: str,
    executor: "Executor",
    verbose: bool = False,
) -> Snapshot:
    """Create dataset@label and return it."""
    snap = Snapshot(dataset=dataset, name=label)
    cmd = ["zfs", "snapshot", snap.full_name]
    echo_command(cmd, verbose)
    try:
        executor.run(cmd)
    except ExecutorError as e:
        raise SnapshotCreationError(f"Creating snapshot {snap.full_name} failed", e) from e
    return snap
