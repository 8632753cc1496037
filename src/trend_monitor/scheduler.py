"""Periodic timeline updates.

Uses APScheduler's asyncio scheduler so the job runs on the same event loop
as the API and shares the service's update lock.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from trend_monitor.core import UpdateSummary
from trend_monitor.use_cases import TimelineService

logger = logging.getLogger(__name__)

JOB_ID = "update_timeline"


class TrendScheduler:
    """Run TimelineService.run_update on a fixed interval."""

    def __init__(
        self,
        service: TimelineService,
        interval_minutes: int = 15,
        run_on_start: bool = True,
    ) -> None:
        self.service = service
        self.interval_minutes = interval_minutes
        self.run_on_start = run_on_start
        self.last_run: Optional[datetime] = None
        self.last_summary: Optional[UpdateSummary] = None
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def scheduled_update(self) -> Optional[UpdateSummary]:
        """One scheduled cycle. Never raises, so the job keeps firing."""
        logger.info("Running scheduled trend update...")
        try:
            summary = await self.service.run_update()
        except Exception:
            logger.exception("Scheduled update failed")
            return None

        self.last_run = datetime.now(timezone.utc)
        self.last_summary = summary
        logger.info(
            "Update complete: %d active, %d new, %d total tracked",
            summary.active, summary.new, summary.total,
        )
        return summary

    def start(self) -> None:
        """Start the scheduler. Must be called from a running event loop."""
        if self.running:
            logger.warning("Scheduler already running")
            return

        job_options = {}
        if self.run_on_start:
            # An explicit None would add the job paused, so only pass a real time
            job_options["next_run_time"] = datetime.now(timezone.utc)

        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            self.scheduled_update,
            "interval",
            minutes=self.interval_minutes,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            **job_options,
        )
        self._scheduler.start()
        logger.info("Scheduler started: every %d minutes", self.interval_minutes)

    def shutdown(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
        self._scheduler = None
