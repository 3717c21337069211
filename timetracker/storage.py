"""
Day log files under ``~/.tt``.

One UTF-8 file per calendar day, named by its ISO date. Files are only ever
appended to by the tool; the user may edit them by hand between reads.
"""
import logging
from datetime import date
from pathlib import Path
from typing import List

from timetracker.log_parser import parse_lines
from timetracker.models import LogEntry

log = logging.getLogger(__name__)


class LogStore:
    def __init__(self, home: Path):
        self.home = home

    def path_for(self, day: date) -> Path:
        return self.home / day.isoformat()

    def read_lines(self, day: date) -> List[str]:
        """Lines of the day's log; a day without a file has no lines."""
        path = self.path_for(day)
        if not path.exists():
            return []
        with path.open("r", encoding="utf-8") as f:
            return f.read().splitlines()

    def read_entries(self, day: date) -> List[LogEntry]:
        return parse_lines(self.read_lines(day))

    def append(self, day: date, line: str) -> None:
        path = self.path_for(day)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        log.debug(f"Appended to {path}: {line}")
