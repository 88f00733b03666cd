"""
PSS — Schedule errors.

Every failure the scheduling core reports is a ScheduleError subclass, raised
to the immediate caller. Only the console front end catches them.
"""

from __future__ import annotations


class ScheduleError(Exception):
    """Base class for every error raised by the scheduling core."""


class InvalidTaskError(ScheduleError):
    """Raised when a task field is malformed (date, time, type, name...)."""


class NameConflictError(ScheduleError):
    """Raised when a task name is already used anywhere in the schedule."""


class SchedulingConflictError(ScheduleError):
    """Raised when a task overlaps an existing uncancelled commitment."""

    def __init__(self, message: str, conflicts: list[str] | None = None) -> None:
        self.conflicts = list(conflicts or [])
        if self.conflicts:
            message = f"{message}: {', '.join(self.conflicts)}"
        super().__init__(message)


class CancellationMismatchError(ScheduleError):
    """Raised when an anti-task matches no occurrence, or removing it reopens a conflict."""


class TaskNotFoundError(ScheduleError):
    """Raised when no task with the given name exists."""


class ScheduleFileError(ScheduleError):
    """Raised on I/O failure or malformed schedule file content."""
