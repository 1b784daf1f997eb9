"""Tests for zbp.render module."""
from __future__ import annotations

from zbp.estimate import TransferEstimate
from zbp.models import BackupPlan, BlockDeviceRef, Snapshot
from zbp.render import (
    format_removal_commands,
    format_snapshot_table,
    format_transfer_command,
    render_plan,
)


def _snaps(*full_names: str) -> list[Snapshot]:
    return [Snapshot.parse(s) for s in full_names]


def test_snapshot_table_aligned():
    table = format_snapshot_table(
        _snaps("tank/data@A", "tank/data@B", "tank/data@C"),
        _snaps("bk@A", "bk@B"),
    )
    lines = table.splitlines()
    assert lines == [
        "    Data Dataset  Backup Dataset",
        "    tank/data@A   bk@A",
        "    tank/data@B   bk@B",
        "    tank/data@C",
    ]


def test_snapshot_table_backup_longer():
    table = format_snapshot_table(_snaps("d@A"), _snaps("bk@A", "bk@B"))
    lines = table.splitlines()
    assert len(lines) == 3
    assert lines[2] == "                  bk@B"
    # Second column starts at the same offset on every row
    offsets = {line.index("bk@") for line in lines[1:]}
    assert offsets == {lines[0].index("Backup Dataset")}


def test_snapshot_table_empty():
    assert format_snapshot_table([], []) == "    Data Dataset  Backup Dataset"


def test_transfer_command_embeds_estimate():
    cmd = format_transfer_command(
        "tank/data", "B", "D", "backup/data", TransferEstimate(1572864)
    )
    assert cmd == (
        "zfs send -i tank/data@B tank/data@D | pv -pterb -s 1572864 "
        "| zfs receive -F backup/data"
    )


def test_transfer_command_without_estimate():
    cmd = format_transfer_command("tank/data", "B", "D", "backup/data")
    assert "| pv -pterb |" in cmd


def test_removal_commands():
    assert format_removal_commands("backup", BlockDeviceRef("sdc")) == [
        "zpool sync backup",
        "zpool export backup",
        "sync",
        "hdparm -y /dev/sdc",
        "echo 1 > /sys/block/sdc/device/delete",
    ]


def test_removal_commands_unknown_device():
    cmds = format_removal_commands("backup", BlockDeviceRef(None))
    assert "hdparm -y /dev/??" in cmds


def _plan(device: BlockDeviceRef) -> BackupPlan:
    return BackupPlan(
        data_dataset="tank/data",
        backup_dataset="backup/data",
        old_label="B",
        new_label="D",
        estimate=TransferEstimate(2048),
        device=device,
    )


def test_render_plan():
    text = render_plan(_plan(BlockDeviceRef("sdc")))
    assert "B (old)" in text
    assert "=> D (new)" in text
    assert "2.0 KiB (2048 bytes)" in text
    assert "zfs send -i tank/data@B tank/data@D | pv -pterb -s 2048" in text
    assert text.index("zpool sync backup") < text.index("zpool export backup")
    assert "echo 1 > /sys/block/sdc/device/delete" in text
    assert "Error determining block device" not in text


def test_render_plan_unknown_device_shows_diagnostic():
    text = render_plan(_plan(BlockDeviceRef(None, diagnostic="cannot open 'backup'")))
    assert "Error determining block device" in text
    assert "    cannot open 'backup'" in text
    assert "hdparm -y /dev/??" in text


def test_render_plan_shows_created_snapshot():
    plan = _plan(BlockDeviceRef("sdc"))
    assert "Created snapshot" not in render_plan(plan)
    plan.created = Snapshot(dataset="tank/data", name="D")
    text = render_plan(plan)
    assert text.splitlines()[0] == "- Created snapshot tank/data@D"
