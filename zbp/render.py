"""Turn a BackupPlan into the text shown to the operator."""
from __future__ import annotations

import os
import shlex
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zbp.estimate import TransferEstimate
    from zbp.models import BackupPlan, BlockDeviceRef, Snapshot

# ANSI color codes (respect NO_COLOR convention: https://no-color.org)
if os.environ.get("NO_COLOR") is not None:
    GREEN = RED = YELLOW = RESET = ""
else:
    GREEN = "\033[32m"
    RED = "\033[31m"
    YELLOW = "\033[33m"
    RESET = "\033[0m"

INDENT = "    "


def format_snapshot_table(
    data_snaps: list["Snapshot"],
    backup_snaps: list["Snapshot"],
    data_title: str = "Data Dataset",
    backup_title: str = "Backup Dataset",
) -> str:
    """Two aligned columns, one row per index; a shorter list leaves blanks."""
    rows = [(data_title, backup_title)]
    for idx in range(max(len(data_snaps), len(backup_snaps))):
        left = data_snaps[idx].full_name if idx < len(data_snaps) else ""
        right = backup_snaps[idx].full_name if idx < len(backup_snaps) else ""
        rows.append((left, right))

    width = max(len(left) for left, _ in rows)
    return "\n".join(
        f"{INDENT}{left:<{width}}  {right}".rstrip() for left, right in rows
    )


def format_pair(old_label: str, new_label: str) -> str:
    return (
        f"{INDENT}   {old_label} (old)\n"
        f"{INDENT}=> {GREEN}{new_label}{RESET} (new)"
    )


def format_transfer_command(
    data_dataset: str,
    old_label: str,
    new_label: str,
    backup_dataset: str,
    estimate: "TransferEstimate | None" = None,
    progress_meter: str = "pv -pterb",
) -> str:
    """Build the send | progress | receive pipeline the operator should run."""
    send = shlex.join([
        "zfs", "send", "-i",
        f"{data_dataset}@{old_label}",
        f"{data_dataset}@{new_label}",
    ])
    meter = progress_meter
    if estimate is not None:
        meter = f"{meter} -s {estimate.size_bytes}"
    recv = shlex.join(["zfs", "receive", "-F", backup_dataset])
    return f"{send} | {meter} | {recv}"


def format_removal_commands(pool: str, device: "BlockDeviceRef") -> list[str]:
    """Commands to flush, export and spin down the backup disk, in order."""
    dev = device.display
    return [
        f"zpool sync {pool}",
        f"zpool export {pool}",
        "sync",
        f"hdparm -y /dev/{dev}",
        f"echo 1 > /sys/block/{dev}/device/delete",
    ]


def render_plan(plan: "BackupPlan", progress_meter: str = "pv -pterb") -> str:
    lines = []
    if plan.created is not None:
        lines.append(f"- Created snapshot {plan.created.full_name}")
    lines += [
        "- Pair for incremental backup",
        format_pair(plan.old_label, plan.new_label),
    ]
    if plan.estimate is not None:
        lines.append(
            f"- Estimated transfer size: {plan.estimate.human} "
            f"({plan.estimate.size_bytes} bytes)"
        )
    lines += [
        "- Execute the following command:",
        INDENT + format_transfer_command(
            plan.data_dataset,
            plan.old_label,
            plan.new_label,
            plan.backup_dataset,
            plan.estimate,
            progress_meter,
        ),
        "",
    ]

    if not plan.device.known:
        lines.append(f"{YELLOW}- Error determining block device:{RESET}")
        if plan.device.diagnostic:
            lines += [INDENT + line for line in plan.device.diagnostic.splitlines()]

    sync_cmd, *removal = format_removal_commands(plan.backup_pool, plan.device)
    lines += [
        "- After the transfer run:",
        INDENT + sync_cmd,
        "",
        "- Before removing the backup disk run:",
    ]
    lines += [INDENT + cmd for cmd in removal]
    return "\n".join(lines)
