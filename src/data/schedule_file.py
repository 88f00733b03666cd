"""
PSS — Schedule File Storage.

A schedule is stored as a flat JSON array, one object per task, and is
always read and written whole. Two record shapes exist, told apart first by
key count and then by the "Type" field:

    5 keys: {"Name", "Type", "Date", "StartTime", "Duration"}
    7 keys: {"Name", "Type", "StartDate", "StartTime", "Duration",
             "EndDate", "Frequency"}

Recurring tasks call their date "StartDate"; every other shape uses "Date".
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

from src.core.errors import InvalidTaskError, ScheduleFileError
from src.data.models import RecurringTask, Task, TaskFamily, family_of

logger = logging.getLogger(__name__)

TASK_KEY_COUNT = 5
RECURRING_KEY_COUNT = 7


# ---------------------------------------------------------------------------
# Record shapes
# ---------------------------------------------------------------------------


class TaskRecord(BaseModel):
    """File shape of transient tasks, anti-tasks and single occurrences.

    JSON example:
    {
        "Name": "Holiday",
        "Type": "Cancellation",
        "Date": 20200421,
        "StartTime": 19,
        "Duration": 1.25
    }
    """
    model_config = ConfigDict(extra="forbid", strict=True)

    Name: str
    Type: str
    Date: int          # YYYYMMDD
    StartTime: float
    Duration: float


class RecurringTaskRecord(BaseModel):
    """File shape of recurring tasks.

    JSON example:
    {
        "Name": "CS3560-Tu",
        "Type": "Class",
        "StartDate": 20200414,
        "StartTime": 19,
        "Duration": 1.25,
        "EndDate": 20200505,
        "Frequency": 7
    }
    """
    model_config = ConfigDict(extra="forbid", strict=True)

    Name: str
    Type: str
    StartDate: int     # YYYYMMDD
    StartTime: float
    Duration: float
    EndDate: int       # YYYYMMDD
    Frequency: int


@dataclass
class TaskFileContents:
    """Records read from a file, partitioned in the order they must be loaded."""

    recurring: list[RecurringTaskRecord] = field(default_factory=list)
    anti: list[TaskRecord] = field(default_factory=list)
    transient: list[TaskRecord] = field(default_factory=list)
    subtasks: list[TaskRecord] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.recurring) + len(self.anti) + len(self.transient) + len(self.subtasks)


def task_to_record(task: Task) -> TaskRecord:
    return TaskRecord(
        Name=task.name,
        Type=task.task_type,
        Date=task.date,
        StartTime=task.start_time,
        Duration=task.duration,
    )


def recurring_to_record(task: RecurringTask) -> RecurringTaskRecord:
    return RecurringTaskRecord(
        Name=task.name,
        Type=task.task_type,
        StartDate=task.date,
        StartTime=task.start_time,
        Duration=task.duration,
        EndDate=task.end_date,
        Frequency=task.frequency,
    )


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def _parse_record(model: type[BaseModel], entry: dict, index: int) -> BaseModel:
    try:
        return model.model_validate(entry)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "entry"
        raise ScheduleFileError(
            f"error parsing task #{index + 1}: {location}: {first['msg']}"
        ) from exc


def read_task_file(path: str | Path) -> TaskFileContents:
    """Read and validate a schedule file without touching any schedule.

    Raises ScheduleFileError if the file cannot be read, is not a JSON array
    of objects, or any entry has the wrong shape, a wrong-typed value or an
    unknown type.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ScheduleFileError(f"error reading file {str(path)!r}: {exc}") from exc

    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ScheduleFileError(f"error decoding json in {str(path)!r}: {exc}") from exc

    if not isinstance(entries, list):
        raise ScheduleFileError("expected a json array of tasks at the top level")

    contents = TaskFileContents()
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ScheduleFileError(f"error parsing task #{index + 1}: not a json object")

        if len(entry) == RECURRING_KEY_COUNT:
            contents.recurring.append(_parse_record(RecurringTaskRecord, entry, index))
            continue

        if len(entry) != TASK_KEY_COUNT:
            raise ScheduleFileError(
                f"error parsing task #{index + 1}: wrong number of keys ({len(entry)})"
            )

        record = _parse_record(TaskRecord, entry, index)
        try:
            family = family_of(record.Type)
        except InvalidTaskError as exc:
            raise ScheduleFileError(
                f"error parsing task #{index + 1}: bad type found: {record.Type!r}"
            ) from exc

        if family is TaskFamily.TRANSIENT:
            contents.transient.append(record)
        elif family is TaskFamily.ANTI:
            contents.anti.append(record)
        else:
            contents.subtasks.append(record)

    logger.debug(
        "Read %d task records from %s (%d recurring, %d anti, %d transient, %d subtasks)",
        len(contents), path, len(contents.recurring), len(contents.anti),
        len(contents.transient), len(contents.subtasks),
    )
    return contents


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def write_task_file(
    path: str | Path,
    records: list[TaskRecord | RecurringTaskRecord],
    indent: int | None = None,
) -> None:
    """Write records as a pretty-printed JSON array, replacing any existing file."""
    if indent is None:
        from src.config import settings
        indent = settings.JSON_INDENT

    content = json.dumps([record.model_dump() for record in records], indent=indent)
    try:
        Path(path).write_text(content + "\n", encoding="utf-8")
    except OSError as exc:
        raise ScheduleFileError(f"error writing file {str(path)!r}: {exc}") from exc
    logger.info("Wrote %d tasks to %s", len(records), path)
