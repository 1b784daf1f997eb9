"""Load and validate the optional YAML defaults file."""
from __future__ import annotations

import yaml

from zbp.models import SNAPSHOT_MODES, PlannerConfig

_KNOWN_KEYS = {
    "data", "backup", "snapshot", "include_oldest", "label_format", "progress_meter",
}


class ConfigError(Exception):
    pass


def load_config(path: str) -> dict:
    """Read a YAML defaults file and return the validated mapping."""
    with open(path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a YAML mapping: {path}")

    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

    for key in ("data", "backup", "label_format", "progress_meter"):
        if key in raw:
            value = raw[key]
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"'{key}' must be a non-empty string, got {value!r}")

    if "snapshot" in raw and raw["snapshot"] not in SNAPSHOT_MODES:
        raise ConfigError(
            f"'snapshot' must be one of {', '.join(SNAPSHOT_MODES)}, got {raw['snapshot']!r}"
        )

    if "include_oldest" in raw and not isinstance(raw["include_oldest"], bool):
        raise ConfigError(
            f"'include_oldest' must be true or false, got {raw['include_oldest']!r}"
        )

    return raw


def resolve_config(args, file_config: dict | None = None) -> PlannerConfig:
    """Merge CLI arguments over file defaults.

    Raises ConfigError when the data or backup dataset is missing from both.
    """
    file_config = file_config or {}

    data = args.data or file_config.get("data")
    backup = args.backup or file_config.get("backup")
    missing = [flag for flag, value in (("--data", data), ("--backup", backup)) if not value]
    if missing:
        raise ConfigError(f"Missing required option(s): {', '.join(missing)}")

    if args.snapshot:
        mode = "always"
    elif args.no_snapshot:
        mode = "never"
    else:
        mode = file_config.get("snapshot", "ask")

    include_oldest = file_config.get("include_oldest", True)
    if args.exclude_oldest:
        include_oldest = False

    defaults = PlannerConfig(data_dataset=data, backup_dataset=backup)
    return PlannerConfig(
        data_dataset=data,
        backup_dataset=backup,
        snapshot_mode=mode,
        include_oldest=include_oldest,
        label_format=file_config.get("label_format", defaults.label_format),
        progress_meter=file_config.get("progress_meter", defaults.progress_meter),
        verbose=args.verbose,
    )
