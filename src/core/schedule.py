"""
PSS — Schedule.

The aggregate root: three name-keyed collections (transient tasks, anti-tasks,
recurring tasks) behind a single owner. Every mutation goes through this
class, which enforces two invariants after each successful call:

* a name is used at most once across all three collections;
* no present commitment overlaps another one unless an anti-task cancels
  the recurring occurrence involved.

A call that would break an invariant raises and leaves the schedule exactly
as it was. Edits and file loads run inside `_transaction()`, which restores a
snapshot of the collections on any failure.
"""

from __future__ import annotations

import calendar
import dataclasses
import logging
from contextlib import contextmanager
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, TypeVar

from src.core.calendar_utils import date_int_to_string, iso_week, date_to_int
from src.core.errors import (
    CancellationMismatchError,
    InvalidTaskError,
    NameConflictError,
    SchedulingConflictError,
    TaskNotFoundError,
)
from src.data.models import (
    ANTI_TYPES,
    RECURRING_TYPES,
    TRANSIENT_TYPES,
    AntiTask,
    RecurringTask,
    Task,
    TaskFamily,
    label_occurrences,
)
from src.data.schedule_file import (
    read_task_file,
    recurring_to_record,
    task_to_record,
    write_task_file,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Task)

# Any leap year; used to tell whether a month/day pair exists at all.
_LEAP_YEAR = 2000

_FAMILY_TYPES = {
    TaskFamily.TRANSIENT: TRANSIENT_TYPES,
    TaskFamily.ANTI: ANTI_TYPES,
    TaskFamily.RECURRING: RECURRING_TYPES,
}


def _display_order(task: Task) -> tuple:
    return (task.date, task.start_time, task.name)


def _require_family(task_type: str, family: TaskFamily) -> None:
    if task_type not in _FAMILY_TYPES[family]:
        raise InvalidTaskError(f"{task_type!r} is not a {family.value} type")


def _same_interval(old: Task, candidate: Task) -> bool:
    """True if `candidate` differs from `old` by name and type only."""
    return dataclasses.replace(candidate, name=old.name, task_type=old.task_type) == old


def _month_day_exists(month: int, day: int | None = None) -> bool:
    if not 1 <= month <= 12:
        return False
    return day is None or 1 <= day <= calendar.monthrange(_LEAP_YEAR, month)[1]


class Schedule:
    """A personal schedule of transient, anti and recurring tasks."""

    def __init__(self) -> None:
        self._transient_tasks: dict[str, Task] = {}
        self._anti_tasks: dict[str, AntiTask] = {}
        self._recurring_tasks: dict[str, RecurringTask] = {}

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def transient_tasks(self) -> Mapping[str, Task]:
        return MappingProxyType(self._transient_tasks)

    @property
    def anti_tasks(self) -> Mapping[str, AntiTask]:
        return MappingProxyType(self._anti_tasks)

    @property
    def recurring_tasks(self) -> Mapping[str, RecurringTask]:
        return MappingProxyType(self._recurring_tasks)

    def __len__(self) -> int:
        return len(self._transient_tasks) + len(self._anti_tasks) + len(self._recurring_tasks)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_task(name)

    def has_task(self, name: str) -> bool:
        return self._has_name_conflict(name)

    def get_task(self, name: str) -> Task:
        """Look a task up by name in any collection."""
        for tasks in (self._transient_tasks, self._recurring_tasks, self._anti_tasks):
            if name in tasks:
                return tasks[name]
        raise TaskNotFoundError(f"task {name!r} does not exist in schedule")

    # ------------------------------------------------------------------
    # Adding
    # ------------------------------------------------------------------

    def add_transient_task(
        self, name: str, task_type: str, date: int, start_time: float, duration: float
    ) -> Task:
        """Create and add a one-off task."""
        self._check_new_name(name)
        _require_family(task_type, TaskFamily.TRANSIENT)
        task = Task.create(name, task_type, date, start_time, duration)
        self._insert_single(task)
        logger.info("Transient task added: '%s' on %s", name, date_int_to_string(date))
        return task

    def add_subtask(
        self, name: str, task_type: str, date: int, start_time: float, duration: float
    ) -> Task:
        """Add a single recurring-typed occurrence, stored with the transient tasks."""
        self._check_new_name(name)
        _require_family(task_type, TaskFamily.RECURRING)
        task = Task.create(name, task_type, date, start_time, duration)
        self._insert_single(task)
        logger.info("Subtask added: '%s' on %s", name, date_int_to_string(date))
        return task

    def add_anti_task(
        self, name: str, task_type: str, date: int, start_time: float, duration: float
    ) -> AntiTask:
        """Add an anti-task cancelling one occurrence of an existing recurring task."""
        self._check_new_name(name)
        _require_family(task_type, TaskFamily.ANTI)
        anti = AntiTask.create(name, task_type, date, start_time, duration)

        overlapping = [n for n, other in self._anti_tasks.items() if other.overlaps(anti)]
        if overlapping:
            logger.debug("Anti-task '%s' rejected: overlaps %s", name, overlapping)
            raise SchedulingConflictError("anti-task overlaps another anti-task", overlapping)

        if not any(
            anti.get_cancelled_occurrence(recurring) is not None
            for recurring in self._recurring_tasks.values()
        ):
            logger.debug("Anti-task '%s' rejected: no matching occurrence", name)
            raise CancellationMismatchError(
                f"no recurring task has an occurrence matching anti-task {name!r}"
            )

        self._anti_tasks[name] = anti
        logger.info("Anti-task added: '%s' on %s", name, date_int_to_string(date))
        return anti

    def add_recurring_task(
        self,
        name: str,
        task_type: str,
        date: int,
        start_time: float,
        duration: float,
        end_date: int,
        frequency: int,
    ) -> RecurringTask:
        """Create and add a task repeating every `frequency` days."""
        self._check_new_name(name)
        _require_family(task_type, TaskFamily.RECURRING)
        task = RecurringTask.create(
            name, task_type, date, start_time, duration, end_date, frequency
        )
        conflicts = self._find_add_conflicts_recurring(task)
        if conflicts:
            logger.debug("Recurring task '%s' rejected: conflicts with %s", name, conflicts)
            raise SchedulingConflictError("task creates a scheduling conflict", conflicts)
        self._recurring_tasks[name] = task
        logger.info(
            "Recurring task added: '%s' %s to %s every %d days",
            name, date_int_to_string(date), date_int_to_string(end_date), frequency,
        )
        return task

    def _insert_single(self, task: Task) -> None:
        conflicts = self._find_add_conflicts(task)
        if conflicts:
            logger.debug("Task '%s' rejected: conflicts with %s", task.name, conflicts)
            raise SchedulingConflictError("task creates a scheduling conflict", conflicts)
        self._transient_tasks[task.name] = task

    # ------------------------------------------------------------------
    # Deleting
    # ------------------------------------------------------------------

    def delete_task(self, name: str) -> None:
        """Delete a task by name.

        Deleting a recurring task also deletes every anti-task cancelling one
        of its occurrences. Deleting an anti-task is refused when the
        occurrence it frees would overlap something.
        """
        if name in self._transient_tasks:
            del self._transient_tasks[name]
            logger.info("Transient task deleted: '%s'", name)
            return

        if name in self._recurring_tasks:
            recurring = self._recurring_tasks.pop(name)
            orphaned = [
                anti_name
                for anti_name, anti in self._anti_tasks.items()
                if anti.get_cancelled_occurrence(recurring) is not None
            ]
            for anti_name in orphaned:
                del self._anti_tasks[anti_name]
            logger.info(
                "Recurring task deleted: '%s' (with %d anti-tasks)", name, len(orphaned)
            )
            return

        if name in self._anti_tasks:
            anti = self._anti_tasks[name]
            remaining = [a for n, a in self._anti_tasks.items() if n != name]
            conflicts = self._find_delete_conflicts(anti, remaining)
            if conflicts:
                raise CancellationMismatchError(
                    f"deleting anti-task {name!r} would reopen a conflict with "
                    f"{', '.join(conflicts)}"
                )
            del self._anti_tasks[name]
            logger.info("Anti-task deleted: '%s'", name)
            return

        raise TaskNotFoundError(f"task {name!r} does not exist in schedule")

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def edit_transient_task(
        self,
        name: str,
        new_name: str,
        new_type: str,
        new_date: int,
        new_start_time: float,
        new_duration: float,
    ) -> Task:
        """Replace a transient task (or subtask) with new details, all-or-nothing."""
        old = self._lookup(self._transient_tasks, name)
        add = self.add_subtask if old.family is TaskFamily.RECURRING else self.add_transient_task
        candidate = Task.create(new_name, new_type, new_date, new_start_time, new_duration)

        with self._transaction():
            del self._transient_tasks[name]
            if self._rename_in_place(self._transient_tasks, old, candidate):
                return candidate
            return add(new_name, new_type, new_date, new_start_time, new_duration)

    def edit_anti_task(
        self,
        name: str,
        new_name: str,
        new_date: int,
        new_start_time: float,
        new_duration: float,
    ) -> AntiTask:
        """Replace an anti-task with new details, all-or-nothing.

        The new anti-task must match a recurring occurrence, and the
        occurrence freed by the old one must not overlap anything.
        """
        old = self._lookup(self._anti_tasks, name)
        candidate = AntiTask.create(new_name, old.task_type, new_date, new_start_time, new_duration)

        with self._transaction():
            del self._anti_tasks[name]
            if self._rename_in_place(self._anti_tasks, old, candidate):
                return candidate
            anti = self.add_anti_task(new_name, old.task_type, new_date, new_start_time, new_duration)
            conflicts = self._find_delete_conflicts(old, self._anti_tasks.values())
            if conflicts:
                raise CancellationMismatchError(
                    f"moving anti-task {name!r} would reopen a conflict with "
                    f"{', '.join(conflicts)}"
                )
            return anti

    def edit_recurring_task(
        self,
        name: str,
        new_name: str,
        new_type: str,
        new_date: int,
        new_start_time: float,
        new_duration: float,
        new_end_date: int,
        new_frequency: int,
    ) -> RecurringTask:
        """Replace a recurring task with new details, all-or-nothing.

        Anti-tasks that cancelled an occurrence of the old definition but
        match none of the new one are deleted.
        """
        old = self._lookup(self._recurring_tasks, name)
        candidate = RecurringTask.create(
            new_name, new_type, new_date, new_start_time, new_duration, new_end_date, new_frequency
        )

        with self._transaction():
            del self._recurring_tasks[name]
            if self._rename_in_place(self._recurring_tasks, old, candidate):
                return candidate
            stale = [
                anti_name
                for anti_name, anti in self._anti_tasks.items()
                if anti.get_cancelled_occurrence(old) is not None
                and anti.get_cancelled_occurrence(candidate) is None
            ]
            # Stale anti-tasks go first so they cannot mask conflicts of the new series.
            for anti_name in stale:
                del self._anti_tasks[anti_name]
            task = self.add_recurring_task(
                new_name, new_type, new_date, new_start_time, new_duration,
                new_end_date, new_frequency,
            )
            if stale:
                logger.info("Pruned anti-tasks no longer matching '%s': %s", new_name, stale)
            return task

    def _rename_in_place(self, tasks: dict, old: Task, candidate: Task) -> bool:
        """Store `candidate` without conflict checks if only name/type changed."""
        if not _same_interval(old, candidate):
            return False
        self._check_new_name(candidate.name)
        _require_family(candidate.task_type, old.family)
        tasks[candidate.name] = candidate
        logger.info("Task renamed: '%s' -> '%s'", old.name, candidate.name)
        return True

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        """Restore all three collections if the block raises."""
        snapshot = (
            dict(self._transient_tasks),
            dict(self._anti_tasks),
            dict(self._recurring_tasks),
        )
        try:
            yield
        except Exception:
            self._transient_tasks, self._anti_tasks, self._recurring_tasks = snapshot
            raise

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_tasks_by_month(self, month: int) -> list[Task]:
        """Transient tasks and uncancelled recurring occurrences starting in `month`.

        Every year is considered; results are in chronological order.
        """
        if not _month_day_exists(month):
            logger.debug("No tasks for nonexistent month %s", month)
            return []
        result = [t for t in self._transient_tasks.values() if t.month == month]
        for recurring in self._recurring_tasks.values():
            result.extend(
                occurrence
                for occurrence in recurring.get_occurrences()
                if occurrence.month == month and not self._has_anti(occurrence)
            )
        return sorted(result, key=_display_order)

    def get_tasks_by_day(self, month: int, day: int) -> list[Task]:
        if not _month_day_exists(month, day):
            return []
        return [t for t in self.get_tasks_by_month(month) if t.day == day]

    def get_tasks_by_week(self, month: int, day: int) -> list[Task]:
        """Tasks of `month` in the same ISO week as month/day of their own year."""
        if not _month_day_exists(month, day):
            return []
        result = []
        for task in self.get_tasks_by_month(month):
            if day > calendar.monthrange(task.year, month)[1]:
                # Feb 29 outside a leap year
                continue
            if iso_week(task.date) == iso_week(date_to_int(task.year, month, day)):
                result.append(task)
        return result

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def load_file(self, path: str | Path) -> None:
        """Add every task of a schedule file, or none of them.

        Recurring tasks load first, then anti-tasks (they need their recurring
        task), then transient tasks and subtasks (they must see both).
        """
        contents = read_task_file(path)
        try:
            with self._transaction():
                for r in contents.recurring:
                    self.add_recurring_task(
                        r.Name, r.Type, r.StartDate, r.StartTime, r.Duration,
                        r.EndDate, r.Frequency,
                    )
                for r in contents.anti:
                    self.add_anti_task(r.Name, r.Type, r.Date, r.StartTime, r.Duration)
                for r in contents.transient:
                    self.add_transient_task(r.Name, r.Type, r.Date, r.StartTime, r.Duration)
                for r in contents.subtasks:
                    self.add_subtask(
                        f"{r.Name} ({date_int_to_string(r.Date)})",
                        r.Type, r.Date, r.StartTime, r.Duration,
                    )
        except Exception as exc:
            logger.warning("Loading %s rolled back: %s", path, exc)
            raise
        logger.info("Loaded %d tasks from %s", len(contents), path)

    def write_tasks(self, path: str | Path) -> None:
        """Write the whole schedule to `path`, replacing the file."""
        records = [task_to_record(t) for t in sorted(self._transient_tasks.values(), key=_display_order)]
        records += [task_to_record(a) for a in sorted(self._anti_tasks.values(), key=_display_order)]
        records += [
            recurring_to_record(r)
            for r in sorted(self._recurring_tasks.values(), key=_display_order)
        ]
        write_task_file(path, records)

    def write_task_list(self, path: str | Path, tasks: Iterable[Task]) -> None:
        """Write a list of tasks (e.g. a query result) to `path` in the single-task shape."""
        write_task_file(path, [task_to_record(t) for t in tasks])

    # ------------------------------------------------------------------
    # Invariant helpers (pure queries)
    # ------------------------------------------------------------------

    def _lookup(self, tasks: Mapping[str, T], name: str) -> T:
        if name not in tasks:
            raise TaskNotFoundError(f"task {name!r} does not exist in schedule")
        return tasks[name]

    def _check_new_name(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise InvalidTaskError("name cannot be empty")
        if self._has_name_conflict(name):
            raise NameConflictError(f"task name {name!r} already exists in schedule")

    def _has_name_conflict(self, name: str) -> bool:
        return (
            name in self._transient_tasks
            or name in self._anti_tasks
            or name in self._recurring_tasks
        )

    def _has_anti(self, task: Task) -> bool:
        """True if some anti-task cancels `task`."""
        return any(anti.cancels(task) for anti in self._anti_tasks.values())

    def _uncancelled(self, occurrences: list[Task]) -> list[Task]:
        return [o for o in occurrences if not self._has_anti(o)]

    def _find_add_conflicts(self, task: Task) -> list[str]:
        """Names of commitments a single task would overlap.

        Entries sharing the task's name are skipped, so an occurrence is
        never compared with its own recurring task.
        """
        conflicts = [
            name
            for name, other in self._transient_tasks.items()
            if name != task.name and task.overlaps(other)
        ]
        for name, recurring in self._recurring_tasks.items():
            if name == task.name:
                continue
            conflicts += label_occurrences(
                self._uncancelled(recurring.get_overlapping_occurrences(task))
            )
        return conflicts

    def _find_add_conflicts_recurring(self, task: RecurringTask) -> list[str]:
        """Names of commitments a recurring task would overlap.

        Anti-tasks never resolve an overlap between two recurring tasks.
        """
        conflicts = [
            name
            for name, other in self._transient_tasks.items()
            if self._uncancelled(task.get_overlapping_occurrences(other))
        ]
        conflicts += [
            name
            for name, other in self._recurring_tasks.items()
            if name != task.name and task.overlaps_recurring(other)
        ]
        return conflicts

    def _find_delete_conflicts(
        self, anti: AntiTask, remaining: Iterable[AntiTask]
    ) -> list[str]:
        """Conflicts reopened if `anti` stopped cancelling its occurrence.

        An occurrence still cancelled by one of `remaining` stays free.
        """
        remaining = list(remaining)
        conflicts: list[str] = []
        for recurring in self._recurring_tasks.values():
            occurrence = anti.get_cancelled_occurrence(recurring)
            if occurrence is None:
                continue
            if any(other.cancels(occurrence) for other in remaining):
                continue
            conflicts += self._find_add_conflicts(occurrence)
        return conflicts
