"""
PSS — Menu Options.

Each option collects raw input through the prompts, calls exactly one
Schedule operation and prints what it returns. Errors propagate to the menu
loop, which prints them.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

from src.cli import prompts
from src.cli.menu import Menu, MenuOption

if TYPE_CHECKING:
    from src.core.schedule import Schedule
    from src.data.models import Task


SEPARATOR = "-" * 40


def make_menu(schedule: Schedule, escape: str | None = None) -> Menu:
    """Build the main menu bound to `schedule`."""
    hooks = [
        ("Create a task", create_task),
        ("Delete a task", delete_task),
        ("Edit a task", edit_task),
        ("View a task", view_task),
        ("View by month", view_by_month),
        ("View by week", view_by_week),
        ("View by day", view_by_day),
        ("Read schedule from file", read_file),
        ("Write schedule to file", write_file),
        ("Write by month", write_by_month),
        ("Write by week", write_by_week),
        ("Write by day", write_by_day),
    ]
    options = [MenuOption(title, partial(hook, schedule)) for title, hook in hooks]
    return Menu(options, escape=escape)


def print_tasks(tasks: list[Task]) -> None:
    if not tasks:
        print("No tasks found")
        return
    for i, task in enumerate(tasks):
        print(task)
        if i < len(tasks) - 1:
            print(SEPARATOR)


# ---------------------------------------------------------------------------
# Create / delete / edit / view
# ---------------------------------------------------------------------------


def create_task(schedule: Schedule) -> None:
    print("Select the type of task to add")
    print("1. Transient task")
    print("2. Anti task")
    print("3. Recurring task")
    while True:
        choice = prompts.ask("Enter an option: ")
        if choice == "1":
            info = prompts.request_task_info()
            schedule.add_transient_task(
                info.name, info.task_type, info.date, info.start_time, info.duration
            )
            return
        if choice == "2":
            info = prompts.request_anti_info()
            schedule.add_anti_task(
                info.name, info.task_type, info.date, info.start_time, info.duration
            )
            return
        if choice == "3":
            info = prompts.request_recurring_info()
            schedule.add_recurring_task(
                info.name, info.task_type, info.date, info.start_time, info.duration,
                info.end_date, info.frequency,
            )
            return
        print("Invalid option. Try again.")


def delete_task(schedule: Schedule) -> None:
    schedule.delete_task(prompts.ask("Enter task name: "))


def edit_task(schedule: Schedule) -> None:
    name = prompts.ask("Enter the name of the task to edit: ")
    if name in schedule.transient_tasks:
        info = prompts.request_task_info()
        schedule.edit_transient_task(
            name, info.name, info.task_type, info.date, info.start_time, info.duration
        )
    elif name in schedule.anti_tasks:
        info = prompts.request_anti_info()
        schedule.edit_anti_task(name, info.name, info.date, info.start_time, info.duration)
    elif name in schedule.recurring_tasks:
        info = prompts.request_recurring_info()
        schedule.edit_recurring_task(
            name, info.name, info.task_type, info.date, info.start_time, info.duration,
            info.end_date, info.frequency,
        )
    else:
        # Let the schedule raise its not-found error
        schedule.get_task(name)


def view_task(schedule: Schedule) -> None:
    print(schedule.get_task(prompts.ask("Enter a task name: ")))


def view_by_month(schedule: Schedule) -> None:
    print_tasks(schedule.get_tasks_by_month(prompts.request_month()))


def view_by_week(schedule: Schedule) -> None:
    print_tasks(schedule.get_tasks_by_week(*prompts.request_month_day()))


def view_by_day(schedule: Schedule) -> None:
    print_tasks(schedule.get_tasks_by_day(*prompts.request_month_day()))


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def _ask_path() -> str:
    path = prompts.ask("Enter a file path: ")
    if not path:
        raise ValueError("file path cannot be empty")
    return path


def read_file(schedule: Schedule) -> None:
    schedule.load_file(_ask_path())


def write_file(schedule: Schedule) -> None:
    schedule.write_tasks(_ask_path())


def write_by_month(schedule: Schedule) -> None:
    tasks = schedule.get_tasks_by_month(prompts.request_month())
    schedule.write_task_list(_ask_path(), tasks)


def write_by_week(schedule: Schedule) -> None:
    tasks = schedule.get_tasks_by_week(*prompts.request_month_day())
    schedule.write_task_list(_ask_path(), tasks)


def write_by_day(schedule: Schedule) -> None:
    tasks = schedule.get_tasks_by_day(*prompts.request_month_day())
    schedule.write_task_list(_ask_path(), tasks)
