"""
PSS — Console Menu.

A numbered menu loop. The console is the only user interface; every option
calls straight into the Schedule and reports "Success!" or the error message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from src.core.errors import ScheduleError

logger = logging.getLogger(__name__)

_BANNER = "=" * 50


@dataclass
class MenuOption:
    """A titled menu entry running `hook` when selected."""

    title: str
    hook: Callable[[], None]


class Menu:
    """Manages a list of menu options until the escape string is entered."""

    def __init__(self, options: list[MenuOption], escape: str | None = None) -> None:
        if escape is None:
            from src.config import settings
            escape = settings.MENU_ESCAPE
        self.options = options
        self.escape = escape

    def display_header(self) -> None:
        print(_BANNER)
        print("Welcome to PSS!")
        print(f"Enter {self.escape!r} to quit")
        print(_BANNER)

    def display(self) -> None:
        for i, option in enumerate(self.options, start=1):
            print(f"{i}. {option.title}")
        print("\nEnter an option: ", end="")

    def process(self, choice: int) -> None:
        """Run the option numbered `choice` (1-based)."""
        if not 1 <= choice <= len(self.options):
            raise ValueError("input out of range")
        option = self.options[choice - 1]
        logger.debug("Running menu option '%s'", option.title)
        option.hook()

    def run(self) -> None:
        """Loop until the escape string (or end of input) is read."""
        self.display_header()
        self.display()
        while True:
            try:
                text = input().strip()
            except EOFError:
                return
            if text == self.escape:
                return

            try:
                choice = int(text)
            except ValueError:
                print("Error: bad option")
                self.display_header()
                self.display()
                continue

            try:
                self.process(choice)
            except EOFError:
                return
            except (ScheduleError, ValueError) as exc:
                print(f"Error: {exc}")
            else:
                print("Success!")

            try:
                input("Press enter to continue...")
            except EOFError:
                return
            self.display_header()
            self.display()
