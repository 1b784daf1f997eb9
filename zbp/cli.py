"""CLI entry point for zfs-backup-planner."""
from __future__ import annotations

import argparse
import os
import sys
from typing import TYPE_CHECKING, Callable

from zbp.config import ConfigError, load_config, resolve_config
from zbp.errors import EnvironmentCheckError, PlannerError
from zbp.executor import LocalExecutor
from zbp.plan import build_plan, prompt_confirm
from zbp.render import RED, RESET, render_plan

if TYPE_CHECKING:
    from zbp.executor import Executor


def check_privileges() -> None:
    if os.geteuid() != 0:
        raise EnvironmentCheckError("This program must be run as root! (sudo)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zbp",
        description="ZFS Backup Planner: print the commands for an incremental backup",
    )
    parser.add_argument("--data", help="Name of the data dataset")
    parser.add_argument("--backup", help="Name of the backup dataset")
    parser.add_argument("--config", "-c",
                        help="YAML file with defaults for any of the options")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--snapshot", action="store_true",
                       help="Create a new snapshot without asking")
    group.add_argument("--no-snapshot", action="store_true",
                       help="Do not create a new snapshot and do not ask")
    parser.add_argument("--exclude-oldest", action="store_true",
                        help="Never pair on the oldest snapshot of either dataset")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Show every command that is run")
    return parser


def report_error(e: PlannerError) -> int:
    """Print a fatal error and return the exit code for its kind."""
    print(f"{RED}ERROR: {e}{RESET}", file=sys.stderr)
    return e.exit_code


def run(
    args,
    file_config: dict | None = None,
    executor: "Executor | None" = None,
    confirm: Callable[[], bool] = prompt_confirm,
) -> int:
    """Run one planning pass and return the exit code.

    Privileges are checked by main before this is called.
    """
    try:
        config = resolve_config(args, file_config)
        plan = build_plan(config, executor or LocalExecutor(), confirm=confirm)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1
    except PlannerError as e:
        return report_error(e)

    print()
    print(render_plan(plan, progress_meter=config.progress_meter))
    return 0


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        check_privileges()
    except PlannerError as e:
        sys.exit(report_error(e))

    file_config: dict = {}
    if args.config:
        try:
            file_config = load_config(args.config)
        except (ConfigError, FileNotFoundError) as e:
            print(f"Config error: {e}", file=sys.stderr)
            sys.exit(1)

    if not (args.data or file_config.get("data")) or not (
        args.backup or file_config.get("backup")
    ):
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: --data and --backup are required", file=sys.stderr)
        sys.exit(2)

    sys.exit(run(args, file_config))


if __name__ == "__main__":
    main()
