"""Backup planning: pair snapshots, optionally snapshot, estimate, resolve disk."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Callable

from zbp import zfs
from zbp.device import resolve_backup_device
from zbp.errors import (
    ListingError,
    NoPairError,
    NoSnapshotsError,
    NothingNewError,
)
from zbp.estimate import estimate_transfer_size
from zbp.models import BackupPlan
from zbp.render import format_snapshot_table

if TYPE_CHECKING:
    from zbp.executor import Executor
    from zbp.models import PlannerConfig


def prompt_confirm(prompt: str = "- Create new snapshot of data volume?") -> bool:
    """Ask the user yes/no. Return True if yes."""
    try:
        answer = input(f"{prompt} [y/N] ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer in ("y", "yes")


def _list(dataset: str, executor: "Executor", verbose: bool):
    print(f"- Getting snapshots from dataset '{dataset}'...")
    return zfs.list_snapshots(dataset, executor, verbose)


def _should_snapshot(mode: str, confirm: Callable[[], bool]) -> bool:
    if mode == "always":
        return True
    if mode == "never":
        return False
    return confirm()


def build_plan(
    config: "PlannerConfig",
    executor: "Executor",
    confirm: Callable[[], bool] = prompt_confirm,
    now: datetime | None = None,
) -> BackupPlan:
    """
    Work out the incremental transfer for config and return it as a plan.

    Stages run strictly in order; any fatal condition raises a PlannerError.
    When a listing fails, whatever was listed so far is printed first.
    """
    plan = BackupPlan(
        data_dataset=config.data_dataset,
        backup_dataset=config.backup_dataset,
    )
    verbose = config.verbose

    # --- Listing ---
    try:
        plan.data_snapshots = _list(config.data_dataset, executor, verbose)
        plan.backup_snapshots = _list(config.backup_dataset, executor, verbose)
    except ListingError:
        print("- Snapshots (partial):")
        print(format_snapshot_table(plan.data_snapshots, plan.backup_snapshots))
        raise

    print("- Snapshots:")
    print(format_snapshot_table(plan.data_snapshots, plan.backup_snapshots))

    if not plan.data_snapshots:
        raise NoSnapshotsError(f"Dataset {config.data_dataset} has no snapshots")
    if not plan.backup_snapshots:
        raise NoSnapshotsError(f"Dataset {config.backup_dataset} has no snapshots")

    # --- Pairing ---
    print()
    print("- Determining snapshot pair for incremental backup...")
    plan.old_label = zfs.find_latest_pair(
        plan.data_snapshots,
        plan.backup_snapshots,
        include_oldest=config.include_oldest,
    )
    if plan.old_label is None:
        raise NoPairError("No snapshot pair found")

    # --- Snapshot decision ---
    if _should_snapshot(config.snapshot_mode, confirm):
        label = (now or datetime.now()).strftime(config.label_format)
        print(f"- Creating new snapshot {config.data_dataset}@{label}...")
        plan.created = zfs.create_snapshot(
            config.data_dataset, label, executor, verbose
        )
        print("    Done")
        plan.data_snapshots = _list(config.data_dataset, executor, verbose)
        if not plan.data_snapshots:
            raise NoSnapshotsError(f"Dataset {config.data_dataset} has no snapshots")
    else:
        print("- Skipping snapshot creation")

    plan.new_label = plan.data_snapshots[-1].name
    if plan.new_label == plan.old_label:
        raise NothingNewError(
            f"No new snapshot found: newest snapshot @{plan.new_label} "
            f"is already on {config.backup_dataset}"
        )

    # --- Size estimation ---
    plan.estimate = estimate_transfer_size(
        config.data_dataset, plan.old_label, plan.new_label, executor, verbose
    )

    # --- Device resolution ---
    plan.device = resolve_backup_device(config.backup_dataset, executor, verbose)
    return plan
