"""Dry-run size estimation for an incremental send."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from zbp.errors import EstimationError
from zbp.executor import ExecutorError
from zbp.zfs import echo_command

if TYPE_CHECKING:
    from zbp.executor import Executor

_UNITS = "KMGTPE"


def to_human_byte_format(size: int) -> str:
    """Render a byte count with binary prefixes.

    0 -> "0 B", 1024 -> "1.0 KiB", 1572864 -> "1.5 MiB"
    """
    if size < 0:
        raise ValueError(f"Byte count must be >= 0, got {size}")
    if size < 1024:
        return f"{size} B"

    value = float(size)
    exp = 0
    while value >= 1024 and exp < len(_UNITS):
        value /= 1024
        exp += 1
    return f"{value:.1f} {_UNITS[exp - 1]}iB"


@dataclass(frozen=True)
class TransferEstimate:
    size_bytes: int

    @property
    def human(self) -> str:
        return to_human_byte_format(self.size_bytes)


def parse_send_estimate(output: str) -> int:
    """Extract the byte count from ``zfs send -n -P`` output.

    The report is tab separated; the total is the second field of the
    second line, e.g.::

        incremental	20240101.1200	tank/data@20240108.1200	1572864
        size	1572864
    """
    lines = output.strip().splitlines()
    if len(lines) < 2:
        raise EstimationError(
            f"Expected at least 2 lines of estimate output, got {len(lines)}"
        )
    fields = lines[1].split("\t")
    if len(fields) < 2:
        raise EstimationError(
            f"Expected at least 2 tab-separated fields, got {lines[1]!r}"
        )
    value = fields[1].strip()
    if not (value.isascii() and value.isdigit()):
        raise EstimationError(f"Estimated size is not a byte count: {value!r}")
    return int(value)


def estimate_transfer_size(
    dataset: str,
    old_label: str,
    new_label: str,
    executor: "Executor",
    verbose: bool = False,
) -> TransferEstimate:
    """Ask ZFS how many bytes an incremental send from old to new would move."""
    cmd = [
        "zfs", "send", "-n", "-P", "-i",
        f"{dataset}@{old_label}",
        f"{dataset}@{new_label}",
    ]
    echo_command(cmd, verbose)
    try:
        output = executor.run(cmd)
    except ExecutorError as e:
        raise EstimationError("Estimating transfer size failed", e) from e
    return TransferEstimate(size_bytes=parse_send_estimate(output))
