"""
PSS — Task Models.

Three task families share one base record: transient tasks, anti-tasks that
cancel a single recurring occurrence, and recurring tasks. Records are
immutable once built; every instance comes out of a validating `create`
factory, and edits build a new record instead of mutating the old one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from numbers import Real
from typing import TYPE_CHECKING

from src.core.calendar_utils import (
    MAX_HOURS,
    date_int_to_string,
    days_between,
    add_days,
    hours_between,
    hours_to_clock,
    int_to_date,
    intervals_overlap,
    round_to_quarter_hour,
    to_instant,
)
from src.core.errors import InvalidTaskError

if TYPE_CHECKING:
    from src.ports.task_port import Overlappable, Recurring


# Transient types
VISIT = "Visit"
SHOPPING = "Shopping"
APPOINTMENT = "Appointment"
# Anti types
CANCELLATION = "Cancellation"
# Recurring types
CLASS = "Class"
STUDY = "Study"
SLEEP = "Sleep"
EXERCISE = "Exercise"
WORK = "Work"
MEAL = "Meal"

TRANSIENT_TYPES = (VISIT, SHOPPING, APPOINTMENT)
ANTI_TYPES = (CANCELLATION,)
RECURRING_TYPES = (CLASS, STUDY, SLEEP, EXERCISE, WORK, MEAL)

MIN_FREQUENCY = 1
MAX_FREQUENCY = 7


class TaskFamily(Enum):
    TRANSIENT = "transient"
    ANTI = "anti"
    RECURRING = "recurring"


def family_of(task_type: str) -> TaskFamily:
    """Map a type string to its family. Raises InvalidTaskError if unknown."""
    if task_type in TRANSIENT_TYPES:
        return TaskFamily.TRANSIENT
    if task_type in ANTI_TYPES:
        return TaskFamily.ANTI
    if task_type in RECURRING_TYPES:
        return TaskFamily.RECURRING
    raise InvalidTaskError(f"{task_type!r} is not a known task type")


def _check_hours(value: object, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidTaskError(f"bad {label}: {value!r}")
    if not 0 <= value <= MAX_HOURS:
        raise InvalidTaskError(f"bad {label}: {value} is outside 0-{MAX_HOURS}")
    return float(value)


def _validate_base(
    name: str, task_type: str, date: int, start_time: float, duration: float
) -> tuple[float, float]:
    """Validate the shared task fields; return (start_time, rounded duration)."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidTaskError("name cannot be empty")
    family_of(task_type)
    start = _check_hours(start_time, "start time")
    length = round_to_quarter_hour(_check_hours(duration, "duration"))
    # The whole interval must fit on the calendar
    to_instant(date, start + length)
    return start, length


def label_occurrences(tasks: list[Task]) -> list[str]:
    """Display labels for a list of occurrences: "Name (1)", "Name (2)"...

    A single task keeps its plain name.
    """
    if len(tasks) <= 1:
        return [t.name for t in tasks]
    return [f"{t.name} ({i})" for i, t in enumerate(tasks, start=1)]


@dataclass(frozen=True)
class Task:
    """A single scheduled interval; also the transient task itself."""

    name: str
    task_type: str
    date: int                # YYYYMMDD
    start_time: float        # fractional hours, 0-23.75
    duration: float          # fractional hours, multiple of 0.25

    @classmethod
    def create(
        cls, name: str, task_type: str, date: int, start_time: float, duration: float
    ) -> Task:
        start, length = _validate_base(name, task_type, date, start_time, duration)
        return cls(name, task_type, date, start, length)

    @property
    def family(self) -> TaskFamily:
        return family_of(self.task_type)

    @property
    def year(self) -> int:
        return self.date // 10000

    @property
    def month(self) -> int:
        return (self.date // 100) % 100

    @property
    def day(self) -> int:
        return self.date % 100

    def start_instant(self) -> datetime:
        return to_instant(self.date, self.start_time)

    def end_instant(self) -> datetime:
        return to_instant(self.date, self.start_time + self.duration)

    def overlaps(self, other: Overlappable) -> bool:
        """True if the two intervals share any instant (touching ends do not)."""
        return intervals_overlap(
            self.start_instant(), self.duration, other.start_instant(), other.duration
        )

    def before(self, other: Task) -> bool:
        """True if this task starts strictly before `other` by (date, start time)."""
        return (self.date, self.start_time) < (other.date, other.start_time)

    def __str__(self) -> str:
        return (
            f"Name: {self.name}\n"
            f"Type: {self.task_type}\n"
            f"Start Date: {date_int_to_string(self.date)}\n"
            f"Start Time: {hours_to_clock(self.start_time)}\n"
            f"Duration: {self.duration:g}"
        )


@dataclass(frozen=True)
class AntiTask(Task):
    """A cancellation of exactly one occurrence of a recurring task."""

    @classmethod
    def create(
        cls, name: str, task_type: str, date: int, start_time: float, duration: float
    ) -> AntiTask:
        start, length = _validate_base(name, task_type, date, start_time, duration)
        if task_type not in ANTI_TYPES:
            raise InvalidTaskError(f"{task_type!r} is not an anti type")
        return cls(name, task_type, date, start, length)

    def cancels(self, task: Overlappable) -> bool:
        """True if this anti-task's interval contains the whole of `task`.

        The anti-task must start no later than the task and last at least
        until the task ends.
        """
        anti_start = self.start_instant()
        task_start = task.start_instant()
        if task_start < anti_start:
            return False
        return self.duration >= hours_between(anti_start, task_start) + task.duration

    def get_cancelled_occurrence(self, recurring: Recurring) -> Task | None:
        """The occurrence of `recurring` this anti-task nullifies, or None.

        Start time and duration must match the recurring definition exactly,
        and the date must fall on one of its cycle days inside its range.
        """
        if self.start_time != recurring.start_time or self.duration != recurring.duration:
            return None
        return recurring.occurrence_on(self.date)


@dataclass(frozen=True)
class RecurringTask(Task):
    """A task repeating every `frequency` days from `date` until `end_date`."""

    end_date: int            # YYYYMMDD
    frequency: int           # days between occurrences, 1-7

    @classmethod
    def create(
        cls,
        name: str,
        task_type: str,
        date: int,
        start_time: float,
        duration: float,
        end_date: int,
        frequency: int,
    ) -> RecurringTask:
        start, length = _validate_base(name, task_type, date, start_time, duration)
        if task_type not in RECURRING_TYPES:
            raise InvalidTaskError(f"{task_type!r} is not a recurring type")
        try:
            end = int_to_date(end_date)
        except InvalidTaskError as exc:
            raise InvalidTaskError(f"bad end date: {end_date!r}") from exc
        if end < int_to_date(date):
            raise InvalidTaskError("end date before start date")
        to_instant(end_date, start + length)
        if isinstance(frequency, bool) or not isinstance(frequency, int):
            raise InvalidTaskError(f"bad frequency: {frequency!r}")
        if not MIN_FREQUENCY <= frequency <= MAX_FREQUENCY:
            raise InvalidTaskError(
                f"bad frequency: {frequency} is outside {MIN_FREQUENCY}-{MAX_FREQUENCY}"
            )
        return cls(name, task_type, date, start, length, end_date, frequency)

    @property
    def end_year(self) -> int:
        return self.end_date // 10000

    @property
    def end_month(self) -> int:
        return (self.end_date // 100) % 100

    @property
    def end_day(self) -> int:
        return self.end_date % 100

    def series_end_instant(self) -> datetime:
        """Exclusive boundary: end date + start time + duration.

        An occurrence exists only if it ends strictly before this instant.
        """
        return to_instant(self.end_date, self.start_time + self.duration)

    def _last_offset(self) -> int:
        return days_between(self.date, self.end_date)

    def _make_occurrence(self, date: int) -> Task:
        return Task.create(self.name, self.task_type, date, self.start_time, self.duration)

    def occurrence_on(self, date: int) -> Task | None:
        """The occurrence starting on `date`, or None if there is none."""
        offset = days_between(self.date, date)
        if not 0 <= offset <= self._last_offset() or offset % self.frequency:
            return None
        occurrence = self._make_occurrence(date)
        if occurrence.end_instant() >= self.series_end_instant():
            return None
        return occurrence

    def get_occurrences(self) -> list[Task]:
        """Expand the whole series, in date order."""
        boundary = self.series_end_instant()
        occurrences: list[Task] = []
        for offset in range(0, self._last_offset() + 1, self.frequency):
            occurrence = self._make_occurrence(add_days(self.date, offset))
            if occurrence.end_instant() >= boundary:
                break
            occurrences.append(occurrence)
        return occurrences

    def get_overlapping_occurrences(self, task: Overlappable) -> list[Task]:
        """Occurrences of this series overlapping a single task.

        Neither interval can exceed 23.75 hours, so only the cycle aligned
        with the task's own day and the cycles immediately before and after
        it can reach the task. Those are computed directly instead of
        expanding the series.
        """
        offset = days_between(self.date, task.date)
        remainder = offset % self.frequency
        cycles = [offset - (remainder or self.frequency), offset + self.frequency - remainder]
        if remainder == 0:
            cycles.append(offset)

        last = self._last_offset()
        result: list[Task] = []
        for cycle in sorted(cycles):
            if not 0 <= cycle <= last:
                continue
            occurrence = self.occurrence_on(add_days(self.date, cycle))
            if occurrence is not None and occurrence.overlaps(task):
                result.append(occurrence)
        return result

    def overlaps(self, other: Overlappable) -> bool:
        return bool(self.get_overlapping_occurrences(other))

    def get_overlapping_occurrences_recurring(self, other: Recurring) -> list[Task]:
        """Occurrences of this series overlapping any occurrence of `other`.

        Expands this series and runs `other`'s cycle arithmetic on each
        occurrence. Slower than the single-task check; recurring/recurring
        comparisons only happen when a recurring task is added or edited.
        """
        return [
            occurrence
            for occurrence in self.get_occurrences()
            if other.get_overlapping_occurrences(occurrence)
        ]

    def overlaps_recurring(self, other: Recurring) -> bool:
        return bool(self.get_overlapping_occurrences_recurring(other))

    def __str__(self) -> str:
        return (
            super().__str__()
            + f"\nEnd Date: {date_int_to_string(self.end_date)}"
            + f"\nFrequency: {self.frequency}"
        )
