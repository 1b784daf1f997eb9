"""Best-effort lookup of the physical disk behind the backup pool."""
from __future__ import annotations

from typing import TYPE_CHECKING

from zbp.executor import ExecutorError
from zbp.models import BlockDeviceRef, pool_name
from zbp.zfs import echo_command

if TYPE_CHECKING:
    from zbp.executor import Executor


def parse_vdev_listing(output: str) -> str:
    """Return the single device named by ``zpool list -v -H -o name -L``.

    The listing is the pool line followed by one line per vdev. Anything
    other than exactly one vdev line means the backing disk is ambiguous.
    """
    lines = output.strip().splitlines()
    if len(lines) != 2:
        raise ValueError(
            f"Expected the pool and exactly one device, got {len(lines)} line(s)"
        )
    tokens = lines[1].split()
    if not tokens:
        raise ValueError("Device line is empty")
    return tokens[0]


def parse_parent_listing(output: str) -> str | None:
    """Return the parent disk named by ``lsblk -dno pkname``, or None.

    A whole disk has no parent and prints an empty line. Without -d lsblk
    also walks the partitions, each naming the disk again; more than one
    distinct parent means the answer is ambiguous.
    """
    parents = {line.strip() for line in output.splitlines() if line.strip()}
    if len(parents) != 1:
        return None
    return parents.pop()


def parent_device(device: str, executor: "Executor", verbose: bool = False) -> str:
    """Return the disk a partition belongs to, or the device itself."""
    cmd = ["lsblk", "-dno", "pkname", f"/dev/{device}"]
    echo_command(cmd, verbose)
    try:
        output = executor.run(cmd)
    except ExecutorError as e:
        print(f"- Looking up parent of {device} failed: {e}")
        return device
    return parse_parent_listing(output) or device


def resolve_backup_device(
    dataset: str,
    executor: "Executor",
    verbose: bool = False,
) -> BlockDeviceRef:
    """Resolve the disk backing the pool of dataset. Never raises."""
    pool = pool_name(dataset)
    cmd = ["zpool", "list", "-v", "-H", "-o", "name", "-L", pool]
    echo_command(cmd, verbose)
    try:
        output = executor.run(cmd)
    except ExecutorError as e:
        return BlockDeviceRef(None, diagnostic=str(e))

    try:
        device = parse_vdev_listing(output)
    except ValueError as e:
        return BlockDeviceRef(None, diagnostic=f"{e}\n{output.rstrip()}")

    return BlockDeviceRef(parent_device(device, executor, verbose))
