import pytest

from timetracker.activities import (
    Activity,
    ActivityRegistry,
    append_activity,
    canonical_reference,
    expand_prefix,
    parse_activity_line,
    read_activities,
    resolve_reference,
)
from timetracker.errors import ActivityFileError, NoPrefixConfigured, UnknownActivity


@pytest.fixture
def registry():
    return ActivityRegistry([
        Activity(canonical_id="JIRA-1", shortname="one"),
        Activity(canonical_id="JIRA-2", shortname="two", tags=["billable"]),
        Activity(canonical_id="_admin"),
    ])


def test_resolve_shortname_and_id(registry):
    assert registry.resolve("one") == "JIRA-1"
    assert registry.resolve("JIRA-1") == "JIRA-1"
    with pytest.raises(UnknownActivity):
        registry.resolve("three")


def test_add_overwrites_and_keeps_shortname(registry):
    registry.add("JIRA-1", "uno")
    assert registry.resolve("uno") == "JIRA-1"
    assert registry.resolve("one") == "JIRA-1"
    registry.add("JIRA-1")
    assert registry.shortname_for("JIRA-1") == "uno"


def test_list(registry):
    assert registry.list() == [("one", "JIRA-1"), ("two", "JIRA-2"), (None, "_admin")]
    assert len(registry) == 3
    assert "two" in registry
    assert "three" not in registry


def test_expand_prefix():
    assert expand_prefix("123", "JIRA") == "JIRA-123"
    assert expand_prefix("JIRA-1", None) == "JIRA-1"
    with pytest.raises(NoPrefixConfigured):
        expand_prefix("123", None)


def test_resolve_numeric_with_prefix(registry):
    resolved = resolve_reference("123", registry, "JIRA")
    assert resolved.activity_id == "JIRA-123"


def test_resolve_numeric_without_prefix(registry):
    with pytest.raises(NoPrefixConfigured):
        resolve_reference("123", registry, None)


def test_resolve_numeric_known_gets_shortname(registry):
    resolved = resolve_reference("2", registry, "JIRA")
    assert resolved.activity_id == "JIRA-2"
    assert resolved.line_tags() == ["=two", "billable"]


@pytest.mark.parametrize("token", ["_meeting", "break", "start", "end", "_start"])
def test_reserved_and_internal_always_accepted(registry, token):
    assert resolve_reference(token, registry, None).activity_id == token


def test_explicit_override(registry):
    resolved = resolve_reference("+JIRA-9", registry, None)
    assert resolved.activity_id == "JIRA-9"
    assert resolved.explicit_override
    with pytest.raises(UnknownActivity):
        resolve_reference("JIRA-9", registry, None)


def test_line_tags_keep_user_shortname(registry):
    resolved = resolve_reference("two", registry, None)
    assert resolved.line_tags(["review"]) == ["=two", "review", "billable"]
    assert resolved.line_tags(["=deux"]) == ["=deux", "billable"]


def test_canonical_reference_is_lenient(registry):
    assert canonical_reference("one", registry, None) == "JIRA-1"
    assert canonical_reference("whatever", registry, None) == "whatever"
    assert canonical_reference("7", registry, "JIRA") == "JIRA-7"
    assert canonical_reference("7", registry, None) == "7"


def test_parse_activity_line():
    assert parse_activity_line("JIRA-1 one billable") == Activity(canonical_id="JIRA-1", shortname="one", tags=["billable"])
    assert parse_activity_line("_admin") == Activity(canonical_id="_admin")
    assert parse_activity_line("# comment") is None
    assert parse_activity_line("") is None
    with pytest.raises(ActivityFileError):
        parse_activity_line("=one JIRA-1")


def test_read_and_append_activities(tmp_path):
    path = tmp_path / "activities"
    assert len(read_activities(path)) == 0

    path.write_text("# id shortname\nJIRA-1 one\n", encoding="utf-8")
    append_activity(path, Activity(canonical_id="JIRA-2", shortname="two"))

    assert path.read_text(encoding="utf-8").splitlines() == ["# id shortname", "JIRA-1 one", "JIRA-2 two"]
    registry = read_activities(path)
    assert registry.resolve("two") == "JIRA-2"
