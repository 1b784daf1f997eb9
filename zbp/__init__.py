"""ZFS Backup Planner: plan an incremental snapshot transfer to a backup disk."""

__version__ = "0.1.0"
