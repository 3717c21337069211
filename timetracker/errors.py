"""
Error taxonomy for timetracker.

Every error the tool reports to the user derives from ``TimeTrackerError``.
The CLI turns them into a message on stderr and a nonzero exit status.
"""
from __future__ import annotations

from typing import Optional


class TimeTrackerError(Exception):
    """Base class for all user-visible timetracker failures."""


class MalformedLine(TimeTrackerError):
    def __init__(self, reason: str, line: str, lineno: Optional[int] = None):
        self.reason = reason
        self.line = line
        self.lineno = lineno
        where = f" (line {lineno})" if lineno is not None else ""
        super().__init__(f"parse error{where}: {reason} at: {line!r}")


class OutOfOrderEntry(TimeTrackerError):
    def __init__(self, line: str, previous: str):
        self.line = line
        self.previous = previous
        super().__init__(
            f"entry {line!r} lies before {previous!r}; "
            "the log must be in chronological order, please edit it by hand"
        )


class CorrectionWithoutTarget(TimeTrackerError):
    def __init__(self, line: str):
        self.line = line
        super().__init__(f"correction {line!r} has no previous entry to correct")


class UnknownActivity(TimeTrackerError):
    def __init__(self, activity: str):
        self.activity = activity
        super().__init__(
            f"activity {activity!r} not known, you can add it using the prefix '+'"
        )


class NoPrefixConfigured(TimeTrackerError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(
            f"cannot expand numeric activity {token!r}: no 'prefix' set in the config file"
        )


class ActivityFileError(TimeTrackerError):
    def __init__(self, reason: str, line: str):
        self.line = line
        super().__init__(f"activity file error: {reason} at: {line!r}")


class ConfigError(TimeTrackerError):
    pass


class UsageError(TimeTrackerError):
    def __init__(self, message: str):
        super().__init__(f"usage error: {message}")
