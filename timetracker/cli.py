# timetracker/cli.py

import argparse
import logging
import os
import shlex
import subprocess
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from timetracker.config import Settings, load_settings
from timetracker.errors import TimeTrackerError, UsageError
from timetracker.storage import LogStore
from timetracker.summary.daily import summarize_day
from timetracker.summary.render import SummaryFormat, render, render_table
from timetracker.tracker import Tracker, report_days
from timetracker.utils import parse_duration, parse_time

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"
log = logging.getLogger("timetracker.cli")

COMMANDS = ("add", "report", "resume", "list", "edit", "is-active", "watch-i3", "interactive")
GLOBAL_OPTIONS = ("--debug",)


def normalize_argv(argv: List[str]) -> List[str]:
    """
    Shortcuts of the ``tt`` command line:

        tt                 -> tt interactive
        tt -y [...]        -> tt report -y [...]
        tt ACTIVITY [...]  -> tt add ACTIVITY [...]
    """
    i = 0
    while i < len(argv) and argv[i] in GLOBAL_OPTIONS:
        i += 1
    head, rest = argv[:i], argv[i:]
    if not rest:
        return head + ["interactive"]
    if rest[0] == "-y":
        return head + ["report"] + rest
    if rest[0] in COMMANDS or rest[0] in ("-h", "--help"):
        return argv
    return head + ["add"] + rest


def _time_arg(s: str):
    try:
        return parse_time(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _duration_arg(s: str) -> timedelta:
    try:
        return parse_duration(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def print_lines(lines: List[str]) -> None:
    for line in lines:
        print(line)


def print_short_summary(tracker: Tracker) -> None:
    print_lines(render(summarize_day(tracker.timeline()), SummaryFormat.SHORT))


# ---------------------------------------------------------------------------
# HANDLERS
# ---------------------------------------------------------------------------
def handle_add(args_ns, tracker: Tracker) -> int:
    entry = tracker.add(
        args_ns.activity,
        args_ns.tags,
        really=args_ns.really,
        at=args_ns.time,
        ago=args_ns.ago,
    )
    print(entry.to_line())
    print_short_summary(tracker)
    return 0


def handle_report(args_ns, tracker: Tracker) -> int:
    days = report_days(tracker.today(), day=args_ns.date, yesterday=args_ns.yesterday, week=args_ns.week)
    fmt = args_ns.format or (SummaryFormat.TABLE if args_ns.week else SummaryFormat.LONG)
    log.debug(f"Report for {days[0]}..{days[-1]} as {fmt.value}")
    summaries = tracker.summaries(days)
    if fmt is SummaryFormat.TABLE:
        print_lines(render_table(summaries, tracker.registry, args_ns.cutoff))
        return 0
    if not summaries:
        print_lines(render(None, fmt))
        return 0
    for summary in summaries:
        if len(days) > 1:
            print(f"{summary.day}:\n")
        print_lines(render(summary, fmt, args_ns.cutoff))
    return 0


def handle_resume(args_ns, tracker: Tracker) -> int:
    entry = tracker.resume(args_ns.n, really=args_ns.really, at=args_ns.time)
    if entry is None:
        print("Nothing to resume.")
        return 0
    print(entry.to_line())
    print_short_summary(tracker)
    return 0


def handle_list(args_ns, tracker: Tracker) -> int:
    for activity in tracker.registry.activities():
        print(activity.to_line())
    return 0


def edit_target(args_ns, tracker: Tracker) -> Path:
    if args_ns.activities:
        if args_ns.date or args_ns.yesterday:
            raise UsageError("edit --activities does not allow dates")
        return tracker.settings.activities_file
    if args_ns.date and args_ns.yesterday:
        raise UsageError("You can either specify a --date or --yesterday, but you specified both.")
    day = args_ns.date or tracker.today()
    if args_ns.yesterday:
        day -= timedelta(days=1)
    return tracker.store.path_for(day)


def launch_editor(path: Path) -> int:
    editor = os.environ.get("EDITOR") or "vi"
    path.parent.mkdir(parents=True, exist_ok=True)
    log.debug(f"Launching {editor} on {path}")
    return subprocess.run(shlex.split(editor) + [str(path)]).returncode


def edit_file(path: Path) -> int:
    returncode = launch_editor(path)
    if returncode != 0:
        raise UsageError(f"editor exited with status {returncode}")
    return 0


def handle_edit(args_ns, tracker: Tracker) -> int:
    return edit_file(edit_target(args_ns, tracker))


def handle_is_active(args_ns, tracker: Tracker) -> int:
    return 0 if tracker.is_active() else 1


def handle_watch_i3(args_ns, tracker: Tracker) -> int:
    from timetracker.watcher.daemon import run_watcher
    return run_watcher(tracker.settings, tracker)


def handle_interactive(args_ns, tracker: Tracker) -> int:
    from timetracker.interactive import run_interactive
    return run_interactive(tracker)


# ---------------------------------------------------------------------------
# PARSER
# ---------------------------------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tt",
        description="tt: plain-text time tracking with per-day logs"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging for all timetracker modules."
    )
    subparsers = parser.add_subparsers(dest="command", title="Available Commands", required=True)

    # --- Add Subcommand ---
    parser_add = subparsers.add_parser("add", help="Log the start of an activity (the default command).")
    parser_add.add_argument("-r", "--really", action="store_true", help="Correct the current activity instead of starting a new one.")
    parser_add.add_argument("-t", "--time", type=_time_arg, default=None, help="Start time HH:MM (default: now).")
    parser_add.add_argument("-a", "--ago", type=int, default=0, help="Started this many minutes ago.")
    parser_add.add_argument("activity", nargs="?", help="Shortname, id, +id to bypass the registry, _internal, break or start.")
    parser_add.add_argument("tags", nargs="*", help="Free-text tags, '=short' names the activity.")
    parser_add.set_defaults(func=handle_add)

    # --- Report Subcommand ---
    parser_report = subparsers.add_parser("report", help="Summarize a day or a week.")
    parser_report.add_argument("-f", "--format", type=SummaryFormat, choices=list(SummaryFormat), default=None,
                               metavar="{" + ",".join(f.value for f in SummaryFormat) + "}",
                               help="Output format (default: long, table for --week).")
    parser_report.add_argument("--date", type=date.fromisoformat, default=None, help="Day YYYY-MM-DD (default: today).")
    parser_report.add_argument("-y", "--yesterday", action="store_true", help="Report the day before.")
    parser_report.add_argument("-w", "--week", action="store_true", help="Report the calendar week up to the day.")
    parser_report.add_argument("-c", "--cutoff", type=_duration_arg, default=None,
                               help="Distribute activities shorter than H:MM like internal time.")
    parser_report.set_defaults(func=handle_report)

    # --- Resume Subcommand ---
    parser_resume = subparsers.add_parser("resume", help="Resume a previous activity of today.")
    parser_resume.add_argument("-r", "--really", action="store_true", help="Resume as a correction of the current activity.")
    parser_resume.add_argument("-t", "--time", type=_time_arg, default=None, help="Start time HH:MM (default: now).")
    parser_resume.add_argument("n", nargs="?", type=int, default=1, help="How far back to go (default: 1).")
    parser_resume.set_defaults(func=handle_resume)

    # --- List Subcommand ---
    parser_list = subparsers.add_parser("list", help="List the registered activities.")
    parser_list.set_defaults(func=handle_list)

    # --- Edit Subcommand ---
    parser_edit = subparsers.add_parser("edit", help="Open a log or the activities file in $EDITOR.")
    parser_edit.add_argument("--date", type=date.fromisoformat, default=None, help="Edit the log of this day.")
    parser_edit.add_argument("-y", "--yesterday", action="store_true", help="Edit yesterday's log.")
    parser_edit.add_argument("-a", "--activities", action="store_true", help="Edit the activities file.")
    parser_edit.set_defaults(func=handle_edit)

    # --- Is-Active Subcommand ---
    parser_active = subparsers.add_parser("is-active", help="Exit 0 when a non-break activity is open, else 1.")
    parser_active.set_defaults(func=handle_is_active)

    # --- Watch-I3 Subcommand ---
    parser_watch = subparsers.add_parser("watch-i3", help="Label and track i3 workspaces by focus time.")
    parser_watch.set_defaults(func=handle_watch_i3)

    # --- Interactive Subcommand ---
    parser_interactive = subparsers.add_parser("interactive", help="Pick an activity from a menu.")
    parser_interactive.set_defaults(func=handle_interactive)

    return parser


def main(argv: Optional[List[str]] = None, tracker: Optional[Tracker] = None) -> int:
    load_dotenv()
    argv = sys.argv[1:] if argv is None else argv

    parser = build_parser()
    args = parser.parse_args(normalize_argv(argv))

    logging.basicConfig(format=LOG_FORMAT, level=logging.WARNING)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        log.debug("Debug logging enabled via CLI.")

    try:
        if tracker is None:
            settings: Settings = load_settings()
            tracker = Tracker(settings, LogStore(settings.home))
        return args.func(args, tracker)
    except (TimeTrackerError, OSError) as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
