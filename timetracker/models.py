from __future__ import annotations
from datetime import datetime, time, timedelta
from typing import List, Optional

from pydantic import BaseModel, Field

from timetracker.utils import format_effective_time, format_time

BREAK_ACTIVITIES = ("break", "end")
START_ACTIVITIES = ("start", "_start")
RESERVED_ACTIVITIES = BREAK_ACTIVITIES + START_ACTIVITIES

SHORTNAME_TAG_PREFIX = "="
RESUME_TAG_PREFIX = "resume:"


def is_internal(activity: str) -> bool:
    """Internal time is distributed over the other activities of the day."""
    return activity.startswith("_")


def is_break(activity: str) -> bool:
    return activity in BREAK_ACTIVITIES


def is_start(activity: str) -> bool:
    """A placeholder for something not yet known, corrected later."""
    return activity in START_ACTIVITIES


def shortname_from_tags(tags: List[str]) -> Optional[str]:
    for tag in tags:
        if tag.startswith(SHORTNAME_TAG_PREFIX) and len(tag) > 1:
            return tag[1:]
    return None


class Comment(BaseModel):
    """A line every downstream component ignores (``# ...`` or blank)."""
    text: str = ""

    def to_line(self) -> str:
        return self.text


class LogEntry(BaseModel):
    """
    One non-comment line of a day log.

    ``effective_time`` is only set when the line carries a second timestamp;
    use ``starts_at`` for the time the activity actually started.
    A correction without ``activity_ref`` is a time correction.
    """
    log_time: time = Field(..., description="Wall-clock time the line was written")
    effective_time: Optional[time] = Field(None, description="Explicit start time, HH_MM in the file")
    activity_ref: Optional[str] = Field(None, description="Activity as written, without a leading '+'")
    tags: List[str] = Field(default_factory=list)
    is_correction: bool = False
    explicit_override: bool = False

    @property
    def starts_at(self) -> time:
        return self.effective_time or self.log_time

    @property
    def is_time_correction(self) -> bool:
        return self.is_correction and self.activity_ref is None

    @property
    def is_internal(self) -> bool:
        return self.activity_ref is not None and is_internal(self.activity_ref)

    def to_line(self) -> str:
        """Serialize to a log line (without trailing newline)."""
        words = [format_time(self.log_time)]
        if self.is_correction:
            words.append("really")
        if self.effective_time is not None:
            words.append(format_effective_time(self.effective_time))
        if self.activity_ref is not None:
            words.append(("+" if self.explicit_override else "") + self.activity_ref)
        words.extend(self.tags)
        return " ".join(words)


class Interval(BaseModel):
    """A reconstructed stretch of one activity. Never persisted."""
    activity_id: str
    start: datetime
    end: Optional[datetime] = None  # open interval of a past day
    tags: List[str] = Field(default_factory=list)

    @property
    def duration(self) -> timedelta:
        if self.end is None:
            return timedelta(0)
        return self.end - self.start

    @property
    def shortname(self) -> Optional[str]:
        return shortname_from_tags(self.tags)

    @property
    def is_break(self) -> bool:
        return is_break(self.activity_id)

    @property
    def is_internal(self) -> bool:
        return is_internal(self.activity_id)
