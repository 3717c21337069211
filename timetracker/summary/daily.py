from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from timetracker.models import Interval, is_break, is_internal
from timetracker.timeline import Timeline

log = logging.getLogger(__name__)


# --- Pydantic Schemas ---
class ActivityTotal(BaseModel):
    duration: timedelta = timedelta(0)
    tags: Dict[str, timedelta] = Field(default_factory=dict)


class DaySummary(BaseModel):
    day: date
    start: datetime
    end: datetime
    breaks: timedelta = timedelta(0)
    work_time: timedelta = timedelta(0)  # includes internal time
    internal: timedelta = timedelta(0)
    activities: Dict[str, ActivityTotal] = Field(default_factory=dict)
    current: Interval = Field(description="Last interval of the day, possibly still open.")


def summarize_day(timeline: Timeline) -> Optional[DaySummary]:
    """Aggregate a day's intervals; ``None`` when nothing was logged."""
    current = timeline.current
    if current is None:
        return None

    summary = DaySummary(day=timeline.day, start=timeline.start, end=timeline.end, current=current)
    for interval in timeline:
        if interval.end is None:
            continue
        duration = interval.duration
        total = summary.activities.setdefault(interval.activity_id, ActivityTotal())
        total.duration += duration
        for tag in interval.tags:
            total.tags[tag] = total.tags.get(tag, timedelta(0)) + duration
        if is_break(interval.activity_id):
            summary.breaks += duration
        else:
            summary.work_time += duration
        if is_internal(interval.activity_id):
            summary.internal += duration
    return summary


def distribute(summary: DaySummary, cutoff: Optional[timedelta] = None) -> Dict[str, timedelta]:
    """
    Per-activity totals with internal time spread evenly.

    Internal time (and, with ``cutoff``, every activity shorter than it) is
    split in equal shares over the remaining non-break activities with
    nonzero time. Without any such activity the internal time stays under
    its own ids. Breaks never appear in the result.
    """
    billable: Dict[str, timedelta] = {}
    internal: Dict[str, timedelta] = {}
    for activity, total in summary.activities.items():
        if is_break(activity) or total.duration <= timedelta(0):
            continue
        if is_internal(activity):
            internal[activity] = total.duration
        else:
            billable[activity] = total.duration

    pool = sum(internal.values(), timedelta(0))
    if cutoff is not None:
        small = {a: d for a, d in billable.items() if d < cutoff}
        # Never distribute everything away.
        if small and len(small) < len(billable):
            pool += sum(small.values(), timedelta(0))
            for activity in small:
                del billable[activity]

    if not billable:
        return internal

    share = pool / len(billable)
    return {activity: duration + share for activity, duration in billable.items()}


def summarize_days(timelines: Iterable[Timeline]) -> List[DaySummary]:
    summaries = [s for s in (summarize_day(t) for t in timelines) if s is not None]
    log.debug(f"Summarized {len(summaries)} days with activity.")
    return summaries


def combine(summaries: Iterable[DaySummary], cutoff: Optional[timedelta] = None) -> Dict[str, timedelta]:
    """Distributed totals over several days; each day is distributed on its own."""
    totals: Dict[str, timedelta] = {}
    for summary in summaries:
        for activity, duration in distribute(summary, cutoff).items():
            totals[activity] = totals.get(activity, timedelta(0)) + duration
    return totals
