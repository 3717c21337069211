"""
Interactive menu, what ``tt`` without arguments opens.

Shows today's short summary and the registered shortnames, then reads one
reply:

    number        start that shortname
    r             pick an entry of the resume stack
    e / a         edit today's log / the activities file
    +x ... / _x   add that activity (and tags)
    (empty)       pick one of today's activities again
"""
import logging
from typing import Callable, List, Optional

from timetracker.errors import UsageError
from timetracker.models import LogEntry
from timetracker.summary.daily import summarize_day
from timetracker.summary.render import long_report_lines, short_report
from timetracker.tracker import Tracker

log = logging.getLogger(__name__)

PROMPT = "number, r(esume), e(dit), a(ctivitiesfile), (+,_)add, (enter) (for day list)? "


def _pick(reply: str, choices: List[str]) -> str:
    try:
        return choices[int(reply)]
    except (ValueError, IndexError):
        raise UsageError(f"I did not understand your reply {reply!r}, aborting.")


def run_interactive(tracker: Tracker, input_fn: Callable[[str], str] = input) -> int:
    from timetracker.cli import edit_file

    timeline = tracker.timeline()
    summary = summarize_day(timeline)
    really = tracker.implied_really()
    shortnames = sorted(
        activity.shortname for activity in tracker.registry.activities() if activity.shortname
    )

    if summary is not None:
        print(short_report(summary))
    print("Configured activities:")
    for i, shortname in enumerate(shortnames):
        print(f"{i:>2} {shortname}")
    if really:
        print("--really implied")

    cmd = input_fn(PROMPT).strip()
    first = cmd[:1]
    entry = None
    if first.isdigit():
        entry = tracker.add(_pick(cmd, shortnames), really=really)
    elif first == "r":
        stack = timeline.resume_stack()
        if not stack:
            print("Nothing to resume.")
            return 0
        for i, frame in enumerate(stack, start=1):
            print(f"{i:>2} {frame.activity_id} {' '.join(frame.tags)}".rstrip())
        reply = input_fn("Resume which? ").strip()
        try:
            n = int(reply)
        except ValueError:
            raise UsageError(f"I did not understand your reply {reply!r}, aborting.")
        entry = tracker.resume(n, really=really)
    elif first == "e":
        return edit_file(tracker.store.path_for(tracker.today()))
    elif first == "a":
        return edit_file(tracker.settings.activities_file)
    elif first in ("+", "_"):
        words = cmd.split()
        entry = tracker.add(words[0], words[1:], really=really)
    elif not cmd:
        if summary is None:
            raise UsageError("Nothing logged yet.")
        print("Activities of the day:")
        report_lines = long_report_lines(summary)
        for i, (line, _activity) in enumerate(report_lines):
            print(f"{i:>2} {line}")
        activity = _pick(input_fn("Which one (pick a number)? ").strip(), [a for _line, a in report_lines])
        entry = tracker.add(f"+{activity}", really=really)
    else:
        raise UsageError(f"I did not understand your reply {cmd!r}, aborting.")

    _print_result(tracker, entry)
    return 0


def _print_result(tracker: Tracker, entry: Optional[LogEntry]) -> None:
    if entry is None:
        return
    print(entry.to_line())
    summary = summarize_day(tracker.timeline())
    if summary is not None:
        print(short_report(summary))
