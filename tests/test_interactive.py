import pytest
from unittest.mock import patch

from timetracker.activities import Activity
from timetracker.errors import UsageError
from timetracker.interactive import run_interactive


def replies(*answers):
    it = iter(answers)
    return lambda prompt: next(it)


@pytest.fixture
def tracker(make_tracker):
    return make_tracker(activities=[
        Activity(canonical_id="JIRA-2", shortname="two"),
        Activity(canonical_id="JIRA-1", shortname="one"),
        Activity(canonical_id="_admin"),
    ])


def test_pick_by_number(tracker, read_log, capsys):
    assert run_interactive(tracker, replies("0")) == 0
    assert read_log() == ["09:00 JIRA-1 =one"]
    out = capsys.readouterr().out
    assert " 0 one" in out and " 1 two" in out


def test_start_implies_really(tracker, write_log, clock, read_log, capsys):
    write_log(["08:00 start"])
    clock.set(9, 0)
    run_interactive(tracker, replies("1"))
    assert "--really implied" in capsys.readouterr().out
    assert read_log() == ["08:00 start", "09:00 really JIRA-2 =two"]


def test_add_with_plus(tracker, read_log):
    run_interactive(tracker, replies("+JIRA-5 review"))
    assert read_log() == ["09:00 JIRA-5 review"]


def test_resume(tracker, write_log, clock, read_log):
    write_log(["07:00 JIRA-1 =one", "08:00 _admin"])
    clock.set(9, 0)
    run_interactive(tracker, replies("r", "1"))
    assert read_log()[-1] == "09:00 JIRA-1 =one resume:2"


def test_pick_from_day(tracker, write_log, clock, read_log):
    write_log(["07:00 JIRA-1 =one", "08:00 _admin"])
    clock.set(9, 0)
    run_interactive(tracker, replies("", "1"))
    assert read_log()[-1] == "09:00 _admin"


def test_edit(tracker, tt_home):
    with patch("timetracker.cli.launch_editor", return_value=0) as launch:
        assert run_interactive(tracker, replies("a")) == 0
    launch.assert_called_once_with(tt_home / "activities")


@pytest.mark.parametrize("reply", ["e", "a"])
def test_failed_editor_is_an_error(tracker, reply):
    with patch("timetracker.cli.launch_editor", return_value=1):
        with pytest.raises(UsageError, match="status 1"):
            run_interactive(tracker, replies(reply))


@pytest.mark.parametrize("answers", [("7",), ("x",), ("",)])
def test_bad_replies(tracker, answers):
    with pytest.raises(UsageError):
        run_interactive(tracker, replies(*answers))
