"""Shared test fixtures and configuration.

Sets predictable environment variables before any src imports, and provides
common fixtures like an empty schedule and the base CS3560 schedule file.
"""

import json
import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("SCHEDULE_FILE", "")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("MENU_ESCAPE", "quit")
os.environ.setdefault("JSON_INDENT", "4")

import pytest


CS3560_TU = {
    "Name": "CS3560-Tu",
    "Type": "Class",
    "StartDate": 20200414,
    "StartTime": 19,
    "Duration": 1.25,
    "EndDate": 20200505,
    "Frequency": 7,
}


@pytest.fixture
def schedule():
    """Return an empty Schedule."""
    from src.core.schedule import Schedule
    return Schedule()


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON payload to a temp file and return its path."""
    def _write(payload, name="schedule.json"):
        path = tmp_path / name
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def base_file(write_json):
    """Schedule file holding the weekly CS3560-Tu class."""
    return write_json([dict(CS3560_TU)], name="base.json")


@pytest.fixture
def base_schedule(schedule, base_file):
    """Schedule loaded from the base file."""
    schedule.load_file(base_file)
    return schedule


@pytest.fixture
def take_snapshot():
    """Return a function copying all three collections, for rollback assertions."""
    def _snapshot(schedule):
        return (
            dict(schedule.transient_tasks),
            dict(schedule.anti_tasks),
            dict(schedule.recurring_tasks),
        )
    return _snapshot
