"""
Timeline reconstruction.

Folds one day's entries into a chronological list of intervals and derives
the resume stack from it. Nothing here is persisted: both are recomputed
from the log on every call.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional

from pydantic import BaseModel, Field

from timetracker.errors import CorrectionWithoutTarget, OutOfOrderEntry
from timetracker.models import RESUME_TAG_PREFIX, Interval, LogEntry, is_break, is_start
from timetracker.utils import at_day

log = logging.getLogger(__name__)


class ResumeFrame(BaseModel):
    activity_id: str
    tags: List[str] = Field(default_factory=list)
    offset: int  # intervals between the frame and the entry that resumes it

    def resume_tags(self) -> List[str]:
        tags = [t for t in self.tags if not t.startswith(RESUME_TAG_PREFIX)]
        tags.append(f"{RESUME_TAG_PREFIX}{self.offset}")
        return tags


def _resume_jump(tags: List[str]) -> int:
    for tag in tags:
        if tag.startswith(RESUME_TAG_PREFIX):
            try:
                return max(1, int(tag[len(RESUME_TAG_PREFIX):]))
            except ValueError:
                return 1
    return 1


class Timeline:
    """The intervals of one day, in chronological order."""

    def __init__(self, day: date, intervals: List[Interval]) -> None:
        self.day = day
        self.intervals = intervals

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[LogEntry],
        day: date,
        now: Optional[datetime] = None,
        resolve: Callable[[str], str] = lambda ref: ref,
    ) -> "Timeline":
        """
        Build the timeline for ``day``.

        ``now`` closes the last interval (pass it for today only); ``resolve``
        maps activity references to canonical ids.
        """
        intervals: List[Interval] = []
        previous: Optional[LogEntry] = None

        for entry in entries:
            if previous is not None and entry.log_time < previous.log_time:
                raise OutOfOrderEntry(entry.to_line(), previous.to_line())

            if entry.is_correction:
                if not intervals:
                    raise CorrectionWithoutTarget(entry.to_line())
                current = intervals[-1]
                if entry.is_time_correction:
                    new_start = at_day(day, entry.starts_at)
                    if len(intervals) > 1:
                        before = intervals[-2]
                        if new_start < before.start:
                            raise OutOfOrderEntry(entry.to_line(), previous.to_line())
                        before.end = new_start
                    current.start = new_start
                else:
                    current.activity_id = resolve(entry.activity_ref)
                    current.tags = list(entry.tags)
                previous = entry
                continue

            start = at_day(day, entry.starts_at)
            if intervals:
                if start < intervals[-1].start:
                    raise OutOfOrderEntry(entry.to_line(), previous.to_line())
                intervals[-1].end = start
            intervals.append(Interval(activity_id=resolve(entry.activity_ref), start=start, tags=list(entry.tags)))
            previous = entry

        if intervals and now is not None:
            intervals[-1].end = max(now, intervals[-1].start)
        log.debug(f"Reconstructed {len(intervals)} intervals for {day}.")
        return cls(day, intervals)

    # --------------- queries ---------------------------------------------
    @property
    def current(self) -> Optional[Interval]:
        """The most recently opened interval, if anything was logged."""
        return self.intervals[-1] if self.intervals else None

    @property
    def start(self) -> Optional[datetime]:
        return self.intervals[0].start if self.intervals else None

    @property
    def end(self) -> Optional[datetime]:
        if not self.intervals:
            return None
        last = self.intervals[-1]
        return last.end or last.start

    def is_active(self) -> bool:
        current = self.current
        return current is not None and not is_break(current.activity_id)

    def resume_stack(self) -> List[ResumeFrame]:
        """
        Previously active activities, most recent first.

        Consecutive repeats collapse into one frame; breaks and start
        placeholders are skipped. An interval written by ``resume`` carries
        ``resume:<k>`` and makes the scan jump back over the frame it
        resumed, so that frame is consumed.
        """
        intervals = self.intervals
        size = len(intervals)
        frames: List[ResumeFrame] = []
        if size <= 1:
            return frames
        pos = size - 1
        current_activity = intervals[pos].activity_id
        while True:
            interval = intervals[pos]
            activity = interval.activity_id
            if activity != current_activity and not is_break(activity) and not is_start(activity):
                frames.append(ResumeFrame(activity_id=activity, tags=interval.tags, offset=size - pos))
                current_activity = activity
            jump = _resume_jump(interval.tags)
            if pos < jump:
                break
            pos -= jump
        return frames

    def __len__(self) -> int:
        return len(self.intervals)

    def __iter__(self):
        return iter(self.intervals)
