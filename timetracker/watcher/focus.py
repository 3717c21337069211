"""
Workspace focus state machine.

Each tick adds ``granularity`` to the focused workspace's dwell time. Once
a workspace has been focused for ``timebox`` without the current activity
changing, the watcher either labels it with the current activity or, if
the workspace already carries a title, logs that title as the new activity.
"""
from __future__ import annotations

import enum
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from timetracker.models import Interval, LogEntry, is_start
from timetracker.tracker import Tracker
from timetracker.utils import to_minute
from timetracker.watcher.i3 import Workspace, WorkspaceIPC

log = logging.getLogger(__name__)


class WatcherAction(str, enum.Enum):
    LABELED = "labeled"
    LOGGED = "logged"
    SKIPPED = "skipped"  # timebox reached, nothing to do


class WorkspaceFocusState(BaseModel):
    # output -> workspace number -> focused time since the last reset
    dwell: Dict[str, Dict[int, timedelta]] = Field(default_factory=dict)
    last_activity_id: Optional[str] = None
    reset_at: Optional[datetime] = None

    def reset(self, now: datetime) -> None:
        self.dwell.clear()
        self.reset_at = now

    def accumulate(self, workspace: Workspace, granularity: timedelta) -> timedelta:
        per_output = self.dwell.setdefault(workspace.output, {})
        per_output[workspace.num] = per_output.get(workspace.num, timedelta(0)) + granularity
        return per_output[workspace.num]


class FocusWatcher:
    def __init__(
        self,
        tracker: Tracker,
        ipc: WorkspaceIPC,
        granularity: timedelta,
        timebox: timedelta,
    ):
        self.tracker = tracker
        self.ipc = ipc
        self.granularity = granularity
        self.timebox = timebox
        self.state = WorkspaceFocusState()

    def display_name(self, interval: Interval) -> str:
        """Workspace title for an activity; the shortname when there is one."""
        return interval.shortname or self.tracker.registry.shortname_for(interval.activity_id) or interval.activity_id

    def tick(self) -> Optional[WatcherAction]:
        """One poll. Returns the action taken when the timebox was reached."""
        now = self.tracker.clock()
        current = self.tracker.current()
        activity_id = current.activity_id if current else None
        if activity_id != self.state.last_activity_id:
            log.debug(f"Activity changed to {activity_id}, resetting focus counters.")
            self.state.reset(now)
            self.state.last_activity_id = activity_id

        workspaces = self.ipc.workspaces()
        focused = next((ws for ws in workspaces if ws.focused), None)
        if focused is None:
            return None
        if self.state.accumulate(focused, self.granularity) < self.timebox:
            return None

        try:
            return self._act(focused, workspaces, current, now)
        finally:
            # A failed action still starts a new timebox.
            self.state.reset(now)

    def _act(
        self,
        focused: Workspace,
        workspaces: List[Workspace],
        current: Optional[Interval],
        now: datetime,
    ) -> WatcherAction:
        if current is None or current.is_break:
            return WatcherAction.SKIPPED

        title = focused.title
        if title is None:
            if is_start(current.activity_id):
                return WatcherAction.SKIPPED
            label = self.display_name(current)
            if any(
                ws.output == focused.output and ws.num != focused.num and ws.title == label
                for ws in workspaces
            ):
                return WatcherAction.SKIPPED
            log.info(f"Workspace {focused.num}: {label}")
            self.ipc.set_title(focused, label)
            return WatcherAction.LABELED

        if title == self.display_name(current) or self.tracker.registry.canonical(title) == current.activity_id:
            return WatcherAction.SKIPPED
        self._log_title(title, current, now)
        return WatcherAction.LOGGED

    def _log_title(self, title: str, current: Interval, now: datetime) -> LogEntry:
        # Titles are free text; unknown ones are logged as explicit overrides.
        ref = title if self.tracker.registry.lookup(title) is not None or title.startswith("_") else f"+{title}"
        if is_start(current.activity_id):
            return self.tracker.add(ref, really=True)
        # Never before the start of the running interval.
        since = max(to_minute(now - self.timebox), current.start)
        return self.tracker.add(ref, at=since.time())
