"""Error taxonomy for a planning run.

Every fatal condition is raised as a PlannerError subclass and turned into
an exit code by zbp.cli.report_error, which prints the message and returns
``exit_code``. zbp.cli.main calls it for the root check and zbp.cli.run for
every later stage.
"""
from __future__ import annotations

from zbp.executor import ExecutorError


class PlannerError(Exception):
    exit_code = 1


class EnvironmentCheckError(PlannerError):
    """A precondition of the host is not met (e.g. not running as root)."""
    exit_code = 4


class CollaboratorError(PlannerError):
    """An external command failed; the message carries the command and its stderr."""
    exit_code = 1

    def __init__(self, message: str, cause: ExecutorError | None = None):
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ListingError(CollaboratorError):
    pass


class SnapshotCreationError(CollaboratorError):
    pass


class EstimationError(CollaboratorError):
    pass


class LogicalStateError(PlannerError):
    """An expected outcome that still ends the run, e.g. nothing to back up."""
    exit_code = 3


class NoSnapshotsError(LogicalStateError):
    pass


class NoPairError(LogicalStateError):
    pass


class NothingNewError(LogicalStateError):
    pass
