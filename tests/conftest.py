import pytest
from datetime import date, datetime
from pathlib import Path
from typing import List

from timetracker.activities import Activity, ActivityRegistry
from timetracker.config import Settings
from timetracker.storage import LogStore
from timetracker.tracker import Tracker

TODAY = date(2024, 3, 6)  # a Wednesday


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, hour: int, minute: int, second: int = 0) -> None:
        self.now = self.now.replace(hour=hour, minute=minute, second=second)


@pytest.fixture(autouse=True)
def tt_home(tmp_path, monkeypatch) -> Path:
    """Keep the user's ~/.tt and TT_* environment out of every test."""
    for var in ("TT_PREFIX", "TT_WATCH_I3__GRANULARITY", "TT_WATCH_I3__TIMEBOX", "TT_WATCH_I3__LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("TT_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 6, 9, 0))


@pytest.fixture
def make_tracker(tt_home, clock):
    def make(prefix=None, activities: List[Activity] = ()) -> Tracker:
        settings = Settings(home=tt_home, prefix=prefix)
        return Tracker(settings, LogStore(tt_home), ActivityRegistry(activities), clock=clock)
    return make


@pytest.fixture
def write_log(tt_home):
    def write(lines: List[str], day: date = TODAY) -> Path:
        path = tt_home / day.isoformat()
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path
    return write


@pytest.fixture
def read_log(tt_home):
    def read(day: date = TODAY) -> List[str]:
        path = tt_home / day.isoformat()
        if not path.exists():
            return []
        return path.read_text(encoding="utf-8").splitlines()
    return read
