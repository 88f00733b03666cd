"""Tests for the console front end — src.cli.menu, src.cli.options, src.cli.prompts."""

import json

import pytest

from src.cli import prompts
from src.cli.menu import Menu, MenuOption
from src.cli.options import SEPARATOR, make_menu
from src.core.errors import TaskNotFoundError


@pytest.fixture
def feed(monkeypatch):
    """Replace input() with a scripted list of answers; EOF once exhausted."""
    def _feed(*answers):
        remaining = iter(answers)

        def fake_input(prompt=""):
            try:
                return next(remaining)
            except StopIteration:
                raise EOFError from None

        monkeypatch.setattr("builtins.input", fake_input)
    return _feed


# ---------------------------------------------------------------------------
# Menu loop
# ---------------------------------------------------------------------------


class TestMenu:
    def test_runs_option_and_reports_success(self, feed, capsys):
        calls = []
        menu = Menu([MenuOption("Record", lambda: calls.append(1))], escape="quit")
        feed("1", "", "quit")
        menu.run()
        out = capsys.readouterr().out
        assert calls == [1]
        assert "Welcome to PSS!" in out
        assert "1. Record" in out
        assert "Success!" in out

    def test_reports_schedule_errors(self, feed, capsys):
        def fail():
            raise TaskNotFoundError("task 'Ghost' does not exist in schedule")

        feed("1", "", "quit")
        Menu([MenuOption("Fail", fail)], escape="quit").run()
        out = capsys.readouterr().out
        assert "Error: task 'Ghost' does not exist in schedule" in out
        assert "Success!" not in out

    def test_non_numeric_option(self, feed, capsys):
        feed("abc", "quit")
        Menu([MenuOption("Noop", lambda: None)], escape="quit").run()
        assert "Error: bad option" in capsys.readouterr().out

    def test_out_of_range_option(self, feed, capsys):
        feed("7", "", "quit")
        Menu([MenuOption("Noop", lambda: None)], escape="quit").run()
        assert "Error: input out of range" in capsys.readouterr().out

    def test_end_of_input_stops(self, feed):
        feed()
        Menu([MenuOption("Noop", lambda: None)], escape="quit").run()

    def test_escape_defaults_to_settings(self):
        assert Menu([]).escape == "quit"

    def test_process_rejects_zero(self):
        with pytest.raises(ValueError):
            Menu([MenuOption("Noop", lambda: None)], escape="quit").process(0)


# ---------------------------------------------------------------------------
# Options bound to a schedule
# ---------------------------------------------------------------------------


class TestOptions:
    def test_create_transient(self, schedule, feed):
        feed("1", "1", "Dentist", "Appointment", "2020-04-21", "09:30", "1", "", "quit")
        make_menu(schedule, escape="quit").run()
        task = schedule.get_task("Dentist")
        assert task.start_time == 9.5
        assert task.task_type == "Appointment"

    def test_create_retries_invalid_choice(self, schedule, feed, capsys):
        feed("1", "4", "1", "Dentist", "Appointment", "2020-04-21", "09:30", "1", "", "quit")
        make_menu(schedule, escape="quit").run()
        assert "Invalid option. Try again." in capsys.readouterr().out
        assert "Dentist" in schedule

    def test_create_anti_task(self, base_schedule, feed):
        feed("1", "2", "Holiday", "2020-04-21", "19:00", "1.25", "", "quit")
        make_menu(base_schedule, escape="quit").run()
        assert base_schedule.anti_tasks["Holiday"].task_type == "Cancellation"

    def test_create_recurring(self, schedule, feed):
        feed(
            "1", "3", "Gym", "Exercise", "2020-04-14", "07:00", "1",
            "2020-04-30", "2", "", "quit",
        )
        make_menu(schedule, escape="quit").run()
        assert schedule.recurring_tasks["Gym"].frequency == 2

    def test_bad_time_reported(self, schedule, feed, capsys):
        feed("1", "1", "Dentist", "Appointment", "2020-04-21", "25:00", "", "quit")
        make_menu(schedule, escape="quit").run()
        assert "Error: invalid hour: 25" in capsys.readouterr().out
        assert len(schedule) == 0

    def test_delete_unknown(self, schedule, feed, capsys):
        feed("2", "Ghost", "", "quit")
        make_menu(schedule, escape="quit").run()
        assert "Error: task 'Ghost' does not exist in schedule" in capsys.readouterr().out

    def test_edit_recurring(self, base_schedule, feed):
        feed(
            "3", "CS3560-Tu", "CS3560", "Class", "2020-04-14", "19:00", "1.25",
            "2020-05-05", "7", "", "quit",
        )
        make_menu(base_schedule, escape="quit").run()
        assert list(base_schedule.recurring_tasks) == ["CS3560"]

    def test_edit_unknown(self, schedule, feed, capsys):
        feed("3", "Ghost", "", "quit")
        make_menu(schedule, escape="quit").run()
        assert "does not exist in schedule" in capsys.readouterr().out

    def test_view_task(self, base_schedule, feed, capsys):
        feed("4", "CS3560-Tu", "", "quit")
        make_menu(base_schedule, escape="quit").run()
        assert "Frequency: 7" in capsys.readouterr().out

    def test_view_by_month(self, base_schedule, feed, capsys):
        feed("5", "4", "", "quit")
        make_menu(base_schedule, escape="quit").run()
        out = capsys.readouterr().out
        assert "Start Date: 2020-04-14" in out
        assert "Start Date: 2020-04-28" in out
        assert out.count(SEPARATOR) == 2

    def test_view_empty_day(self, base_schedule, feed, capsys):
        feed("7", "4", "22", "", "quit")
        make_menu(base_schedule, escape="quit").run()
        assert "No tasks found" in capsys.readouterr().out

    def test_read_and_write_files(self, schedule, base_file, tmp_path, feed):
        out_path = tmp_path / "out.json"
        feed("8", str(base_file), "", "9", str(out_path), "", "quit")
        make_menu(schedule, escape="quit").run()
        assert [e["Name"] for e in json.loads(out_path.read_text(encoding="utf-8"))] == ["CS3560-Tu"]

    def test_write_by_week(self, base_schedule, tmp_path, feed):
        out_path = tmp_path / "week.json"
        feed("11", "4", "20", str(out_path), "", "quit")
        make_menu(base_schedule, escape="quit").run()
        entries = json.loads(out_path.read_text(encoding="utf-8"))
        assert [e["Date"] for e in entries] == [20200421]

    def test_empty_path_rejected(self, schedule, feed, capsys):
        feed("9", "", "", "quit")
        make_menu(schedule, escape="quit").run()
        assert "Error: file path cannot be empty" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------


class TestPromptParsing:
    def test_date(self):
        assert prompts.string_to_date_int("2020-11-14") == 20201114
        assert prompts.string_to_date_int(" 2020-4-7 ") == 20200407

    @pytest.mark.parametrize("text", ["2020/11/14", "", "tomorrow"])
    def test_bad_date(self, text):
        with pytest.raises(ValueError):
            prompts.string_to_date_int(text)

    def test_time(self):
        assert prompts.string_to_time("15:30") == 15.5
        assert prompts.string_to_time("7:15") == 7.25

    @pytest.mark.parametrize("text", ["24:00", "12:60", "1530", "ab:cd"])
    def test_bad_time(self, text):
        with pytest.raises(ValueError):
            prompts.string_to_time(text)

    def test_hours(self):
        assert prompts.string_to_hours("8.5") == 8.5
        with pytest.raises(ValueError, match="bad duration"):
            prompts.string_to_hours("eight")

    def test_int(self):
        assert prompts.string_to_int(" 7 ", "frequency") == 7
        with pytest.raises(ValueError, match="bad frequency"):
            prompts.string_to_int("seven", "frequency")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


class TestMain:
    def test_unreadable_start_file_is_reported(self, monkeypatch, feed, capsys, tmp_path):
        import main

        monkeypatch.setattr(main.settings, "SCHEDULE_FILE", str(tmp_path / "missing.json"))
        feed("quit")
        main.main()
        assert "Error: could not load" in capsys.readouterr().out
