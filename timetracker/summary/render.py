"""
Report rendering.

``activity`` (a single token naming the current activity) and ``long``
(per-activity totals) are the formats scripts and users rely on; the others
are conveniences. ``table`` is the week view and is built with polars.
"""
from __future__ import annotations

import enum
import logging
from datetime import timedelta
from typing import List, Optional, Sequence, Tuple

import polars as pl

from timetracker.activities import ActivityRegistry
from timetracker.models import is_break, is_internal
from timetracker.summary.daily import DaySummary, distribute
from timetracker.utils import format_duration, format_time

log = logging.getLogger(__name__)

NO_ACTIVITIES = "No activities found."


class SummaryFormat(str, enum.Enum):
    STATUS = "status"      # one line for a status bar
    SHORT = "short"        # what `add` prints after writing
    LONG = "long"          # full summary
    TICKETS = "tickets"    # the activity ids of the day
    TABLE = "table"        # one column per day, nice for weeks
    ACTIVITY = "activity"  # current activity, shortname if present
    TICKET = "ticket"      # current activity id, never the shortname
    WORKTIME = "worktime"  # minutes worked


def short_report(summary: DaySummary) -> str:
    return (
        f"start: {format_time(summary.start)}, end: {format_time(summary.end)}, "
        f"breaks: {format_duration(summary.breaks)}, work time: {format_duration(summary.work_time)}, "
        f"internal: {format_duration(summary.internal)}"
    )


def long_report_lines(summary: DaySummary, cutoff: Optional[timedelta] = None) -> List[Tuple[str, str]]:
    """(line, activity) pairs; billable activities show ``own + share = total``."""
    distributed = distribute(summary, cutoff)
    ordered = sorted(
        summary.activities.items(),
        key=lambda kv: (is_break(kv[0]), is_internal(kv[0]), -kv[1].duration),
    )
    lines = []
    for name, total in ordered:
        if is_break(name) or is_internal(name) or name not in distributed:
            lines.append((f"- {name:16}({format_duration(total.duration)})", name))
            continue
        share = distributed[name] - total.duration
        tag_report = ", ".join(
            tag if tag.startswith("=") or tag_duration == total.duration
            else f"{tag}({format_duration(tag_duration)})"
            for tag, tag_duration in sorted(total.tags.items())
            if not tag.startswith("resume:")
        )
        lines.append((
            f"- {name:16} {format_duration(total.duration)} + {format_duration(share)} "
            f"= {format_duration(distributed[name])}  {tag_report}".rstrip(),
            name,
        ))
    return lines


def render(summary: Optional[DaySummary], fmt: SummaryFormat, cutoff: Optional[timedelta] = None) -> List[str]:
    """Render one day in any format but ``table``."""
    if summary is None:
        return [NO_ACTIVITIES]
    current = summary.current
    if fmt is SummaryFormat.STATUS:
        own = summary.activities.get(current.activity_id)
        shortname = f" ={current.shortname}" if current.shortname else ""
        return [
            f"{current.activity_id}{shortname} since {format_time(current.start)} "
            f"({format_duration(own.duration if own else timedelta(0))}) "
            f"wt: {format_duration(summary.work_time)} dt: {format_duration(summary.internal)}"
        ]
    if fmt is SummaryFormat.TICKETS:
        return sorted(summary.activities)
    if fmt is SummaryFormat.ACTIVITY:
        return [current.shortname or current.activity_id]
    if fmt is SummaryFormat.TICKET:
        return [current.activity_id]
    if fmt is SummaryFormat.WORKTIME:
        return [str(int(summary.work_time.total_seconds() // 60))]
    lines = [short_report(summary)]
    if fmt is SummaryFormat.LONG:
        lines.extend(line for line, _activity in long_report_lines(summary, cutoff))
    return lines


def _totals_frame(summaries: Sequence[DaySummary], cutoff: Optional[timedelta]) -> pl.DataFrame:
    rows = [
        {"day": s.day.isoformat(), "activity": activity, "seconds": duration.total_seconds()}
        for s in summaries
        for activity, duration in distribute(s, cutoff).items()
    ]
    return pl.DataFrame(rows, schema={"day": pl.Utf8, "activity": pl.Utf8, "seconds": pl.Float64})


def render_table(
    summaries: Sequence[DaySummary],
    registry: Optional[ActivityRegistry] = None,
    cutoff: Optional[timedelta] = None,
) -> List[str]:
    """
    One column per day plus a total:

        (dates)   start / end / breaks / worktime
        (blank)
        one row per activity, distributed
    """
    if not summaries:
        return [NO_ACTIVITIES]
    registry = registry or ActivityRegistry()
    days = [s.day.isoformat() for s in summaries]

    df = _totals_frame(summaries, cutoff)
    if df.is_empty():
        wide = pl.DataFrame(schema={"activity": pl.Utf8, "total": pl.Float64})
    else:
        totals = df.group_by("activity").agg(pl.col("seconds").sum().alias("total"))
        wide = (
            df.pivot(on="day", index="activity", values="seconds", aggregate_function="sum")
            .join(totals, on="activity")
            .sort("activity")
        )

    names = wide["activity"].to_list()
    name_width = max((len(n) for n in names), default=0)
    short_width = max((len(registry.shortname_for(n) or "") + 2 for n in names), default=0)
    label_width = max(name_width + short_width, len("worktime"))

    def row(label: str, cells: Sequence[str], total: str = "") -> str:
        return f"{label:<{label_width}}" + "".join(f" {c:>10}" for c in cells) + f"  {total:>5}"

    lines = [
        row("", days, "total"),
        row("start", [format_time(s.start) for s in summaries]),
        row("end", [format_time(s.end) for s in summaries]),
        row("breaks", [format_duration(s.breaks) for s in summaries]),
        row(
            "worktime",
            [format_duration(s.work_time) for s in summaries],
            format_duration(sum((s.work_time for s in summaries), timedelta(0))),
        ),
        "",
    ]
    for record in wide.iter_rows(named=True):
        name = record["activity"]
        shortname = registry.shortname_for(name)
        label = f"{name:<{name_width}} ={shortname}" if shortname else name
        cells = [
            format_duration(timedelta(seconds=record[day])) if record.get(day) is not None else "-"
            for day in days
        ]
        lines.append(row(label, cells, format_duration(timedelta(seconds=record["total"]))))
    return lines
