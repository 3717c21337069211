from timetracker.watcher.focus import FocusWatcher, WatcherAction, WorkspaceFocusState
from timetracker.watcher.i3 import I3WorkspaceIPC, Workspace, WorkspaceIPC, WorkspaceIPCError

__all__ = [
    "FocusWatcher",
    "I3WorkspaceIPC",
    "WatcherAction",
    "Workspace",
    "WorkspaceFocusState",
    "WorkspaceIPC",
    "WorkspaceIPCError",
]
