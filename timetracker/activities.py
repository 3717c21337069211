"""
Activity registry
-----------------
* maps shortnames (and canonical ids) to canonical activity ids
* applies the configured numeric prefix (``123`` -> ``JIRA-123``)
* persisted as ``~/.tt/activities``: ``<canonical_id> [<shortname> [tags...]]``
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

from timetracker.errors import ActivityFileError, NoPrefixConfigured, UnknownActivity
from timetracker.models import RESERVED_ACTIVITIES, SHORTNAME_TAG_PREFIX, is_internal

log = logging.getLogger(__name__)


class Activity(BaseModel):
    canonical_id: str
    shortname: Optional[str] = None
    tags: List[str] = Field(default_factory=list)  # added to every log line of this activity

    @property
    def is_internal(self) -> bool:
        return is_internal(self.canonical_id)

    def to_line(self) -> str:
        words = [self.canonical_id]
        if self.shortname:
            words.append(self.shortname)
        words.extend(self.tags)
        return " ".join(words)


class ResolvedActivity(BaseModel):
    activity_id: str
    shortname: Optional[str] = None
    explicit_override: bool = False
    default_tags: List[str] = Field(default_factory=list)

    def line_tags(self, user_tags: Iterable[str] = ()) -> List[str]:
        """``=shortname`` first, then the user's tags, then registry defaults."""
        tags = [t for t in user_tags]
        if self.shortname and not any(t.startswith(SHORTNAME_TAG_PREFIX) for t in tags):
            tags.insert(0, f"{SHORTNAME_TAG_PREFIX}{self.shortname}")
        tags.extend(t for t in self.default_tags if t not in tags)
        return tags


class ActivityRegistry:
    """In-memory shortname -> canonical id lookup over an already loaded file."""

    def __init__(self, activities: Iterable[Activity] = ()) -> None:
        self._by_id: Dict[str, Activity] = {}
        self._by_shortname: Dict[str, str] = {}
        for activity in activities:
            self.add(activity.canonical_id, activity.shortname, activity.tags)

    # --------------- public API -------------------------------------------
    def add(self, canonical_id: str, shortname: Optional[str] = None, tags: Iterable[str] = ()) -> Activity:
        """Add or overwrite; never removes an existing shortname."""
        previous = self._by_id.get(canonical_id)
        tags = list(tags)
        activity = Activity(
            canonical_id=canonical_id,
            shortname=shortname or (previous.shortname if previous else None),
            tags=tags or (previous.tags if previous else []),
        )
        self._by_id[canonical_id] = activity
        if shortname:
            self._by_shortname[shortname] = canonical_id
        return activity

    def resolve(self, token: str) -> str:
        activity = self.lookup(token)
        if activity is None:
            raise UnknownActivity(token)
        return activity.canonical_id

    def lookup(self, token: str) -> Optional[Activity]:
        # 1) shortname
        if token in self._by_shortname:
            return self._by_id[self._by_shortname[token]]
        # 2) canonical id
        return self._by_id.get(token)

    def canonical(self, token: str) -> str:
        """Lenient resolve: unknown tokens come back unchanged."""
        activity = self.lookup(token)
        return activity.canonical_id if activity else token

    def shortname_for(self, canonical_id: str) -> Optional[str]:
        activity = self._by_id.get(canonical_id)
        return activity.shortname if activity else None

    def list(self) -> List[Tuple[Optional[str], str]]:
        return [(a.shortname, a.canonical_id) for a in self._by_id.values()]

    def activities(self) -> List[Activity]:
        return list(self._by_id.values())

    def __contains__(self, token: str) -> bool:
        return self.lookup(token) is not None

    def __len__(self) -> int:
        return len(self._by_id)


def expand_prefix(token: str, prefix: Optional[str]) -> str:
    """``"234"`` -> ``"<prefix>-234"``; raises if no prefix is configured."""
    if not token.isdigit():
        return token
    if not prefix:
        raise NoPrefixConfigured(token)
    return f"{prefix}-{token}"


def resolve_reference(token: str, registry: ActivityRegistry, prefix: Optional[str]) -> ResolvedActivity:
    """
    Resolve an activity as typed by the user.

    ``+name`` bypasses the registry check, ``_name`` (internal) and the
    reserved keywords are always accepted, bare numbers get the prefix,
    everything else must be a known shortname or id.
    """
    explicit_override = token.startswith("+")
    if explicit_override:
        token = token[1:]
    if not token:
        raise UnknownActivity("+")

    if is_internal(token) or token in RESERVED_ACTIVITIES:
        return ResolvedActivity(activity_id=token, explicit_override=explicit_override)

    if token.isdigit():
        activity_id = expand_prefix(token, prefix)
        known = registry.lookup(activity_id)
        return ResolvedActivity(
            activity_id=activity_id,
            shortname=known.shortname if known else None,
            explicit_override=explicit_override,
            default_tags=known.tags if known else [],
        )

    if explicit_override:
        return ResolvedActivity(activity_id=token, explicit_override=True)

    known = registry.lookup(token)
    if known is None:
        raise UnknownActivity(token)
    return ResolvedActivity(
        activity_id=known.canonical_id,
        shortname=known.shortname,
        default_tags=known.tags,
    )


def canonical_reference(token: str, registry: ActivityRegistry, prefix: Optional[str]) -> str:
    """Resolution for reading the log back: never fails."""
    if token.isdigit() and prefix:
        token = f"{prefix}-{token}"
    return registry.canonical(token)


# --------------- persistence -----------------------------------------
def parse_activity_line(line: str) -> Optional[Activity]:
    words = line.split()
    if not words or words[0].startswith("#"):
        return None
    if words[0].startswith("+") or words[0].startswith("="):
        raise ActivityFileError("correct format is <activity> [<shortname> [tags...]]", line)
    shortname = words[1] if len(words) > 1 else None
    return Activity(canonical_id=words[0], shortname=shortname, tags=words[2:])


def read_activities(path: Path) -> ActivityRegistry:
    if not path.exists():
        log.debug(f"No activities file at {path}, starting with an empty registry.")
        return ActivityRegistry()
    activities = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            activity = parse_activity_line(line)
            if activity is not None:
                activities.append(activity)
    log.debug(f"Loaded {len(activities)} activities from {path}.")
    return ActivityRegistry(activities)


def append_activity(path: Path, activity: Activity) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(activity.to_line() + "\n")
    log.info(f"Added to activities file: {activity.to_line()}")
