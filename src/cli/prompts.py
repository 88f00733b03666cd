"""Console prompts — read raw user input and turn it into primitive values.

No scheduling rules live here: dates are only split into YYYYMMDD integers
and calendar validity is left to the task factories.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.core.calendar_utils import date_to_int
from src.data.models import CANCELLATION, RECURRING_TYPES, TRANSIENT_TYPES

_TIME_FORMAT = re.compile(r"^\d{1,2}:\d{2}$")
_DATE_FORMAT = re.compile(r"^\d{1,4}-\d{1,2}-\d{1,2}$")


@dataclass
class TaskInfo:
    name: str
    task_type: str
    date: int
    start_time: float
    duration: float


@dataclass
class RecurringInfo(TaskInfo):
    end_date: int = 0
    frequency: int = 0


def ask(prompt: str) -> str:
    return input(prompt).strip()


def string_to_date_int(text: str) -> int:
    """Convert "YYYY-MM-DD" (e.g. 2020-11-14) to 20201114."""
    text = text.strip()
    if not _DATE_FORMAT.match(text):
        raise ValueError(f"bad date entered: {text!r}")
    year, month, day = (int(part) for part in text.split("-"))
    return date_to_int(year, month, day)


def string_to_time(text: str) -> float:
    """Convert "H:MM"/"HH:MM" to fractional hours ("15:30" -> 15.5)."""
    text = text.strip()
    if not _TIME_FORMAT.match(text):
        raise ValueError(f"bad start time entered: {text!r}")
    hour, minute = (int(part) for part in text.split(":"))
    if not 0 <= hour <= 23:
        raise ValueError(f"invalid hour: {hour}")
    if not 0 <= minute <= 59:
        raise ValueError(f"invalid minutes: {minute}")
    return hour + minute / 60


def string_to_hours(text: str) -> float:
    """Parse a decimal duration in hours ("8.5" for 8 hours 30 minutes)."""
    try:
        return float(text.strip())
    except ValueError as exc:
        raise ValueError(f"bad duration entered: {text!r}") from exc


def string_to_int(text: str, label: str) -> int:
    try:
        return int(text.strip())
    except ValueError as exc:
        raise ValueError(f"bad {label} entered: {text!r}") from exc


def display_types(types: tuple[str, ...]) -> None:
    print("Available types...")
    for task_type in types:
        print(task_type)


def _request_common(types: tuple[str, ...] | None) -> tuple[str, str, int, float, float]:
    name = ask("Enter task name: ")
    task_type = ""
    if types is not None:
        display_types(types)
        task_type = ask("Enter task type: ")
    date = string_to_date_int(ask("Enter date (eg. 2020-11-14): "))
    start_time = string_to_time(ask("Enter start time (eg. 15:30): "))
    duration = string_to_hours(ask("Enter duration (eg. '8.5' for 8 hours 30 min): "))
    return name, task_type, date, start_time, duration


def request_task_info() -> TaskInfo:
    """Ask for the fields of a transient task."""
    return TaskInfo(*_request_common(TRANSIENT_TYPES))


def request_anti_info() -> TaskInfo:
    """Ask for the fields of an anti-task; the type is always the anti type."""
    name, _, date, start_time, duration = _request_common(None)
    return TaskInfo(name, CANCELLATION, date, start_time, duration)


def request_recurring_info() -> RecurringInfo:
    """Ask for the fields of a recurring task."""
    name, task_type, date, start_time, duration = _request_common(RECURRING_TYPES)
    end_date = string_to_date_int(ask("Enter end date (eg. 2020-11-14): "))
    frequency = string_to_int(ask("Enter frequency (1-7): "), "frequency")
    return RecurringInfo(name, task_type, date, start_time, duration, end_date, frequency)


def request_month() -> int:
    return string_to_int(ask("Enter a month (1-12): "), "month")


def request_month_day() -> tuple[int, int]:
    month = request_month()
    day = string_to_int(ask("Enter a day (1-31): "), "day")
    return month, day
