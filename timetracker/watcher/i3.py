"""
i3 workspace IPC.

The watcher only needs two calls: list the workspaces and rename one.
Workspace names follow the ``"<num>: <title>"`` convention; a workspace
without a title is named by its number alone.
"""
import logging
import re
from typing import List, Optional, Protocol

import i3ipc
from pydantic import BaseModel

log = logging.getLogger(__name__)

WORKSPACE_TITLE_RE = re.compile(r"^(?:\d*:)?\s*([A-Za-z_].*)$")


class WorkspaceIPCError(RuntimeError):
    """A workspace query or command failed; the watcher skips the tick."""


class Workspace(BaseModel):
    num: int
    name: str
    output: str
    focused: bool = False

    @property
    def title(self) -> Optional[str]:
        """The activity-like part of the name, ``None`` for bare numbers."""
        match = WORKSPACE_TITLE_RE.match(self.name)
        return match.group(1) if match else None


class WorkspaceIPC(Protocol):
    def workspaces(self) -> List[Workspace]:
        ...

    def set_title(self, workspace: Workspace, title: str) -> None:
        ...


def rename_command(workspace: Workspace, title: str) -> str:
    return f'rename workspace "{workspace.name}" to "{workspace.num}: {title}"'


class I3WorkspaceIPC:
    """``WorkspaceIPC`` over an ``i3ipc.Connection``, opened lazily."""

    def __init__(self, connection: Optional[i3ipc.Connection] = None):
        self._connection = connection

    @property
    def connection(self) -> i3ipc.Connection:
        if self._connection is None:
            try:
                self._connection = i3ipc.Connection()
            except Exception as e:
                raise WorkspaceIPCError(f"cannot connect to i3: {e}") from e
            log.info("Connected to i3 IPC socket.")
        return self._connection

    def workspaces(self) -> List[Workspace]:
        try:
            replies = self.connection.get_workspaces()
        except WorkspaceIPCError:
            raise
        except Exception as e:
            # Reconnect on the next tick.
            self._connection = None
            raise WorkspaceIPCError(f"get_workspaces failed: {e}") from e
        return [
            Workspace(num=reply.num, name=reply.name, output=reply.output, focused=reply.focused)
            for reply in replies
        ]

    def set_title(self, workspace: Workspace, title: str) -> None:
        command = rename_command(workspace, title)
        log.debug(f"i3 command: {command}")
        replies = self.connection.command(command)
        failed = [reply.error for reply in replies if not reply.success]
        if failed:
            raise WorkspaceIPCError(f"rename of workspace {workspace.num} failed: {'; '.join(map(str, failed))}")
