"""
PSS — Entry Point.

Single entry point: `python main.py` (or the `pss` script) starts the menu.
"""

import logging

from src.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.cli.options import make_menu
from src.core.errors import ScheduleError
from src.core.schedule import Schedule

logger = logging.getLogger(__name__)


def main() -> None:
    schedule = Schedule()
    if settings.SCHEDULE_FILE:
        try:
            schedule.load_file(settings.SCHEDULE_FILE)
        except ScheduleError as exc:
            logger.error("Could not load %s: %s", settings.SCHEDULE_FILE, exc)
            print(f"Error: could not load {settings.SCHEDULE_FILE}: {exc}")
    make_menu(schedule).run()


if __name__ == "__main__":
    main()
