"""
timetracker package.

Plain-text, per-day activity log with shortname resolution, timeline
reconstruction, reports and an i3 workspace watcher.
"""
import logging

# Applications using this package should configure their own logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

VERSION = "0.3.0"
