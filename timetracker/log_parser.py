"""
Parser for the line-oriented day log.

Grammar, tried in this order:

    HH:MM really <activity> [tags...]     correction of the previous entry
    HH:MM really HH_MM                    start-time correction
    HH:MM HH_MM <activity> [tags...]      entry with explicit start time
    HH:MM <activity> [tags...]            plain entry

Blank lines and lines starting with ``#`` (or whose second word does) are
comments. Parsing is purely syntactic; activity names are resolved by
``timetracker.activities``. ``parse_line(line).to_line() == line`` for every
canonical line.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from timetracker.errors import MalformedLine
from timetracker.models import Comment, LogEntry
from timetracker.utils import parse_effective_time, parse_time

log = logging.getLogger(__name__)

ParsedLine = Union[LogEntry, Comment]


def _split_override(token: str, line: str, lineno: Optional[int]) -> tuple[str, bool]:
    if token.startswith("+"):
        if len(token) == 1:
            raise MalformedLine("'+' without an activity", line, lineno)
        return token[1:], True
    return token, False


def parse_line(line: str, lineno: Optional[int] = None) -> ParsedLine:
    line = line.rstrip("\r\n")
    words = line.split()
    if not words or words[0].startswith("#"):
        return Comment(text=line)

    try:
        log_time = parse_time(words[0], padded=True)
    except ValueError:
        raise MalformedLine("cannot parse start time", line, lineno) from None

    if len(words) < 2:
        raise MalformedLine("line does not contain at least 2 words", line, lineno)
    if words[1].startswith("#"):
        return Comment(text=line)

    rest = words[1:]
    is_correction = rest[0] == "really"
    if is_correction:
        rest = rest[1:]
        if not rest:
            raise MalformedLine("really does not contain an activity", line, lineno)

    effective_time = None
    try:
        effective_time = parse_effective_time(rest[0])
    except ValueError:
        pass
    if effective_time is not None:
        rest = rest[1:]
        if is_correction:
            if rest:
                raise MalformedLine(
                    "time correction cannot have further data, use only <time> really <HH_MM>",
                    line,
                    lineno,
                )
            return LogEntry(log_time=log_time, effective_time=effective_time, is_correction=True)
        if not rest:
            raise MalformedLine("start time is not followed by an activity", line, lineno)

    activity_ref, explicit_override = _split_override(rest[0], line, lineno)
    return LogEntry(
        log_time=log_time,
        effective_time=effective_time,
        activity_ref=activity_ref,
        tags=rest[1:],
        is_correction=is_correction,
        explicit_override=explicit_override,
    )


def parse_lines(lines: Iterable[str]) -> List[LogEntry]:
    """Parse a whole day; comments are dropped, the first bad line is fatal."""
    entries: List[LogEntry] = []
    for lineno, line in enumerate(lines, start=1):
        parsed = parse_line(line, lineno)
        if isinstance(parsed, LogEntry):
            entries.append(parsed)
    log.debug(f"Parsed {len(entries)} entries.")
    return entries


def serialize(parsed: ParsedLine) -> str:
    return parsed.to_line()
