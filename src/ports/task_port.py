"""Task capability ports — the behaviors the schedule dispatches on.

The schedule talks to tasks through these protocols, never through
concrete-type checks.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from src.data.models import Task


@runtime_checkable
class Overlappable(Protocol):
    """Anything occupying a single interval on the calendar."""

    name: str
    date: int
    start_time: float
    duration: float

    def start_instant(self) -> datetime: ...

    def overlaps(self, other: Overlappable) -> bool: ...


@runtime_checkable
class Cancellable(Protocol):
    """A record able to cancel a concrete occurrence."""

    def cancels(self, task: Overlappable) -> bool: ...

    def get_cancelled_occurrence(self, recurring: Recurring) -> Task | None: ...


@runtime_checkable
class Recurring(Protocol):
    """A definition expanding into a series of occurrences."""

    name: str
    start_time: float
    duration: float
    end_date: int
    frequency: int

    def occurrence_on(self, date: int) -> Task | None: ...

    def get_occurrences(self) -> list[Task]: ...

    def get_overlapping_occurrences(self, task: Overlappable) -> list[Task]: ...

    def overlaps_recurring(self, other: Recurring) -> bool: ...
