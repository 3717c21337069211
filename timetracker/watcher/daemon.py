"""
Long-running driver for the workspace focus watcher.

One APScheduler job calls ``FocusWatcher.tick`` every ``granularity``.
Ticks never overlap; a failing tick is logged and the next one runs as
scheduled. The loop ends only when the process is interrupted.
"""
import logging
import sys
from typing import Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from timetracker.config import Settings
from timetracker.tracker import Tracker
from timetracker.watcher.focus import FocusWatcher
from timetracker.watcher.i3 import I3WorkspaceIPC, WorkspaceIPC

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"


# ---------------------------------------------------------------------------
# LOGGING SETUP
# ---------------------------------------------------------------------------
def setup_logging(settings: Settings) -> None:
    """Configures logging for the watcher."""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    log_file = settings.watch_i3.log_file
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(file_handler)
        log.info(f"Logging to file: {log_file}")

    logging.getLogger("apscheduler.scheduler").setLevel(logging.WARNING)
    logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# JOB
# ---------------------------------------------------------------------------
def watch_job(watcher: FocusWatcher) -> None:
    """Scheduled job: one watcher tick, errors are logged and the tick skipped."""
    try:
        action = watcher.tick()
    except Exception as e:
        log.error(f"Error during watcher tick, skipping: {e}", exc_info=True)
        return
    if action is not None:
        log.info(f"Timebox reached: {action.value}")


def build_scheduler(watcher: FocusWatcher) -> BlockingScheduler:
    scheduler = BlockingScheduler()
    scheduler.add_job(
        watch_job,
        args=(watcher,),
        trigger=IntervalTrigger(seconds=watcher.granularity.total_seconds()),
        id="workspace_focus_job",
        name="Workspace Focus Watcher",
        max_instances=1,
        coalesce=True,  # If multiple runs are due, only run the latest one
    )
    return scheduler


# ---------------------------------------------------------------------------
# LIFECYCLE
# ---------------------------------------------------------------------------
def run_watcher(settings: Settings, tracker: Tracker, ipc: Optional[WorkspaceIPC] = None) -> int:
    setup_logging(settings)
    watcher = FocusWatcher(
        tracker,
        ipc or I3WorkspaceIPC(),
        granularity=settings.watch_i3.granularity,
        timebox=settings.watch_i3.timebox,
    )
    log.info(
        f"--- Starting workspace watcher (granularity {settings.watch_i3.granularity}, "
        f"timebox {settings.watch_i3.timebox}) ---"
    )
    scheduler = build_scheduler(watcher)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        log.info("Shutdown signal received.")
    finally:
        if scheduler.running:
            scheduler.shutdown(wait=False)
    log.info("Workspace watcher stopped.")
    return 0
