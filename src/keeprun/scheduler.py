"""Background scheduler for periodic maintenance."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.background import BackgroundScheduler as APScheduler
from apscheduler.triggers.cron import CronTrigger

from .services.cleanup import CleanupAlreadyRunning, run_archived_cleanup

if TYPE_CHECKING:
    from .context import AppContext

logger = logging.getLogger("keeprun.scheduler")

CLEANUP_JOB_ID = "archived_cleanup"


class CleanupScheduler:
    """Runs the archived-data cleanup nightly."""

    def __init__(self, ctx: AppContext, *, hour: int = 3, minute: int = 30):
        self.ctx = ctx
        self.hour = hour
        self.minute = minute
        self.scheduler: APScheduler | None = None

    def start(self) -> None:
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = APScheduler(timezone=self.ctx.config.TIMEZONE)
        self.scheduler.add_job(
            func=self.run_cleanup,
            trigger=CronTrigger(hour=self.hour, minute=self.minute),
            id=CLEANUP_JOB_ID,
            name="Archived data cleanup",
            replace_existing=True,
            # never stack a second run behind a slow one
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info(
            "Background scheduler started",
            extra={"job": CLEANUP_JOB_ID, "at": f"{self.hour:02d}:{self.minute:02d}"},
        )

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def run_cleanup(self) -> None:
        """Job body; failures are logged and left for the next nightly run."""
        try:
            run_archived_cleanup(
                self.ctx.session_factory,
                retention_days=self.ctx.config.CLEANUP_RETENTION_DAYS,
            )
        except CleanupAlreadyRunning:
            logger.warning("Skipped scheduled cleanup: previous run still in progress")
        except Exception as exc:
            logger.error(f"Scheduled cleanup failed: {exc}", exc_info=True)


def create_scheduler(ctx: AppContext, *, auto_start: bool = False) -> CleanupScheduler:
    """Create and optionally start the cleanup scheduler."""
    scheduler = CleanupScheduler(ctx)
    if auto_start:
        scheduler.start()
    return scheduler
