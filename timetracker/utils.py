"""Time formatting helpers shared by the parser, the reports and the CLI."""
from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

TIME_RE = re.compile(r"^\d{1,2}:\d{2}$")
# Log lines only carry zero-padded times so they serialize back unchanged.
LOG_TIME_RE = re.compile(r"^\d{2}:\d{2}$")
EFFECTIVE_TIME_RE = re.compile(r"^\d{2}_\d{2}$")


def parse_time(s: str, padded: bool = False) -> time:
    """Parse ``HH:MM`` (``H:MM`` unless ``padded``); raises ``ValueError`` for anything else."""
    if not (LOG_TIME_RE if padded else TIME_RE).match(s):
        raise ValueError(f"not a HH:MM time: {s!r}")
    return datetime.strptime(s, "%H:%M").time()


def parse_effective_time(s: str) -> time:
    """Parse the single-token ``HH_MM`` form used for effective times."""
    if not EFFECTIVE_TIME_RE.match(s):
        raise ValueError(f"not a HH_MM time: {s!r}")
    return datetime.strptime(s, "%H_%M").time()


def format_time(t: time | datetime) -> str:
    return t.strftime("%H:%M")


def format_effective_time(t: time) -> str:
    return t.strftime("%H_%M")


def parse_duration(s: str) -> timedelta:
    """Parse a ``H:MM`` duration, e.g. ``"01:54"`` -> 114 minutes."""
    t = parse_time(s)
    return timedelta(hours=t.hour, minutes=t.minute)


def format_duration(duration: timedelta) -> str:
    """Format as ``H:MM``, rounded to the nearest minute."""
    mins = int((duration.total_seconds() + 30) // 60)
    hours = mins // 60
    return f"{hours}:{mins - hours * 60:02d}"


def at_day(day: date, t: time) -> datetime:
    return datetime.combine(day, t)


def to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)
