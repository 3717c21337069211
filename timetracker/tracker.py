"""
High-level operations on the day log.

``Tracker`` is the single append path: the CLI, interactive mode and the i3
watcher all add entries through it. Every write re-validates the complete
day including the new line, so a failing add leaves the file untouched.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterable, List, Optional

from timetracker.activities import (
    Activity,
    ActivityRegistry,
    append_activity,
    canonical_reference,
    read_activities,
    resolve_reference,
)
from timetracker.config import Settings
from timetracker.errors import UsageError
from timetracker.models import (
    SHORTNAME_TAG_PREFIX,
    Interval,
    LogEntry,
    is_break,
    is_internal,
    is_start,
    shortname_from_tags,
)
from timetracker.storage import LogStore
from timetracker.summary.daily import DaySummary, summarize_days
from timetracker.timeline import Timeline
from timetracker.utils import at_day, to_minute

log = logging.getLogger(__name__)


class Tracker:
    """Reads and appends the log for one process invocation."""

    def __init__(
        self,
        settings: Settings,
        store: Optional[LogStore] = None,
        registry: Optional[ActivityRegistry] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.store = store or LogStore(settings.home)
        self.registry = registry if registry is not None else read_activities(settings.activities_file)
        self.clock = clock

    # --------------- reading ---------------------------------------------
    def today(self) -> date:
        return self.clock().date()

    def _canonical(self, ref: str) -> str:
        return canonical_reference(ref, self.registry, self.settings.prefix)

    def _build(self, entries: Iterable[LogEntry], day: date) -> Timeline:
        now = self.clock()
        return Timeline.from_entries(
            entries,
            day,
            now=now if day == now.date() else None,
            resolve=self._canonical,
        )

    def timeline(self, day: Optional[date] = None) -> Timeline:
        day = day or self.today()
        return self._build(self.store.read_entries(day), day)

    def current(self) -> Optional[Interval]:
        """The activity currently (or most recently) running today."""
        return self.timeline().current

    def is_active(self) -> bool:
        return self.timeline().is_active()

    def implied_really(self) -> bool:
        """After a ``start`` placeholder the next add corrects it."""
        current = self.current()
        return current is not None and is_start(current.activity_id)

    def summaries(self, days: Iterable[date]) -> List[DaySummary]:
        return summarize_days(self.timeline(day) for day in days)

    # --------------- writing ---------------------------------------------
    def _effective(self, log_dt: datetime, at: Optional[time], ago: int) -> datetime:
        base = at_day(log_dt.date(), at) if at is not None else log_dt
        effective = base - timedelta(minutes=ago)
        if effective.date() != log_dt.date():
            raise UsageError("the start time would fall on another day")
        return effective

    def make_entry(
        self,
        activity: Optional[str],
        tags: Iterable[str] = (),
        really: bool = False,
        at: Optional[time] = None,
        ago: int = 0,
    ) -> LogEntry:
        """Turn add options into a log entry, resolving the activity."""
        log_dt = to_minute(self.clock())
        tags = list(tags)

        if really and activity is None:
            if tags:
                raise UsageError("a time correction cannot have tags")
            if at is None and ago <= 0:
                raise UsageError("really either needs an activity or a manual time (--time or --ago)")
            return LogEntry(
                log_time=log_dt.time(),
                effective_time=self._effective(log_dt, at, ago).time(),
                is_correction=True,
            )
        if activity is None:
            raise UsageError("please provide an activity")
        if really and (at is not None or ago):
            raise UsageError("really with an activity cannot take a manual time")

        resolved = resolve_reference(activity, self.registry, self.settings.prefix)
        effective = self._effective(log_dt, at, ago)
        return LogEntry(
            log_time=log_dt.time(),
            effective_time=effective.time() if effective != log_dt else None,
            activity_ref=resolved.activity_id,
            tags=resolved.line_tags(tags),
            is_correction=really,
        )

    def _learn_shortname(self, entry: LogEntry) -> None:
        """``+id =short`` defines a new shortname in the activities file."""
        activity_id = entry.activity_ref
        if activity_id is None or is_internal(activity_id) or is_break(activity_id) or is_start(activity_id):
            return
        shortname = shortname_from_tags(entry.tags)
        if shortname is None:
            return
        known = self.registry.lookup(shortname)
        if known is not None and known.canonical_id == activity_id:
            return
        other_tags = [t for t in entry.tags if not t.startswith(SHORTNAME_TAG_PREFIX)]
        self.registry.add(activity_id, shortname, other_tags)
        append_activity(
            self.settings.activities_file,
            Activity(canonical_id=activity_id, shortname=shortname, tags=other_tags),
        )

    def append(self, entry: LogEntry, learn: bool = True) -> LogEntry:
        """Validate the day with ``entry`` added, then write it."""
        day = self.today()
        self._build(self.store.read_entries(day) + [entry], day)
        self.store.append(day, entry.to_line())
        log.info(f"Logged: {entry.to_line()}")
        # Only once the log line is written.
        if learn:
            self._learn_shortname(entry)
        return entry

    def add(
        self,
        activity: Optional[str],
        tags: Iterable[str] = (),
        really: bool = False,
        at: Optional[time] = None,
        ago: int = 0,
    ) -> LogEntry:
        entry = self.make_entry(activity, tags, really=really, at=at, ago=ago)
        learn = activity is not None and activity.startswith("+")
        return self.append(entry, learn=learn)

    def resume(self, n: int = 1, really: bool = False, at: Optional[time] = None) -> Optional[LogEntry]:
        """
        Re-open the ``n``-th previous activity (1 = most recent).

        Returns ``None`` when there is nothing to resume.
        """
        stack = self.timeline().resume_stack()
        if not stack:
            log.info("Nothing to resume.")
            return None
        if n < 1 or n > len(stack):
            raise UsageError(f"cannot resume #{n}, the resume stack has {len(stack)} entries")
        frame = stack[n - 1]
        if really:
            # A correction does not open a new interval, so the jump is one shorter.
            frame = frame.model_copy(update={"offset": frame.offset - 1})
        entry = self.make_entry(f"+{frame.activity_id}", frame.resume_tags(), really=really, at=at)
        return self.append(entry, learn=False)


def report_days(today: date, day: Optional[date] = None, yesterday: bool = False, week: bool = False) -> List[date]:
    """
    The days a report covers.

    ``day`` (default today) is shifted back one day by ``yesterday``; ``week``
    extends the window back to the Monday of that week.
    """
    base = day or today
    if yesterday:
        base -= timedelta(days=1)
    offset = base.weekday() if week else 0
    first = base - timedelta(days=offset)
    return [first + timedelta(days=i) for i in range(offset + 1)]
