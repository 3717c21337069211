import pytest
from datetime import time

from timetracker.errors import MalformedLine
from timetracker.log_parser import parse_line, parse_lines, serialize
from timetracker.models import Comment, LogEntry


@pytest.mark.parametrize("line", [
    "09:00 start",
    "09:15 really JIRA-1",
    "09:15 really JIRA-1 =one review",
    "09:20 really 09_05",
    "10:00 09_45 JIRA-2 =two",
    "10:30 +JIRA-3 =three",
    "11:00 _admin mail",
    "12:00 break",
    "# a comment",
    "",
    "13:00 # commented out entry",
])
def test_round_trip(line):
    assert serialize(parse_line(line)) == line


def test_plain_entry():
    entry = parse_line("09:00 JIRA-1 =one review")
    assert isinstance(entry, LogEntry)
    assert entry.log_time == time(9, 0)
    assert entry.effective_time is None
    assert entry.starts_at == time(9, 0)
    assert entry.activity_ref == "JIRA-1"
    assert entry.tags == ["=one", "review"]
    assert not entry.is_correction
    assert not entry.explicit_override


def test_effective_time_entry():
    entry = parse_line("10:00 09_45 JIRA-2")
    assert entry.log_time == time(10, 0)
    assert entry.effective_time == time(9, 45)
    assert entry.starts_at == time(9, 45)


def test_really_entry():
    entry = parse_line("09:15 really JIRA-1")
    assert entry.is_correction
    assert not entry.is_time_correction
    assert entry.activity_ref == "JIRA-1"


def test_time_correction():
    entry = parse_line("09:20 really 09_05")
    assert entry.is_time_correction
    assert entry.activity_ref is None
    assert entry.starts_at == time(9, 5)


def test_explicit_override():
    entry = parse_line("10:30 +JIRA-3")
    assert entry.explicit_override
    assert entry.activity_ref == "JIRA-3"


def test_internal_entry():
    assert parse_line("11:00 _admin").is_internal


@pytest.mark.parametrize("line", ["# note", "   ", "", "12:00 #later"])
def test_comments(line):
    assert isinstance(parse_line(line), Comment)


@pytest.mark.parametrize("line, reason", [
    ("nine JIRA-1", "cannot parse start time"),
    ("9.00 JIRA-1", "cannot parse start time"),
    ("9:00 start", "cannot parse start time"),
    ("09:00", "at least 2 words"),
    ("09:00 really", "really does not contain an activity"),
    ("09:20 really 09_05 JIRA-1", "time correction cannot have further data"),
    ("10:00 09_45", "not followed by an activity"),
    ("10:00 + tag", "'+' without an activity"),
])
def test_malformed_lines(line, reason):
    with pytest.raises(MalformedLine) as excinfo:
        parse_line(line, lineno=3)
    assert reason in str(excinfo.value)
    assert excinfo.value.lineno == 3


def test_parse_lines_drops_comments():
    entries = parse_lines(["# morning", "09:00 start", "", "09:15 really JIRA-1"])
    assert [e.to_line() for e in entries] == ["09:00 start", "09:15 really JIRA-1"]


def test_parse_lines_reports_line_number():
    with pytest.raises(MalformedLine) as excinfo:
        parse_lines(["09:00 start", "oops"])
    assert excinfo.value.lineno == 2


def test_unpadded_effective_time_is_not_a_time():
    entry = parse_line("10:00 9_45 review")
    assert entry.effective_time is None
    assert entry.activity_ref == "9_45"
    assert serialize(entry) == "10:00 9_45 review"
