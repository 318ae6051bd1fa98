"""Scheduled expiry status sweep."""

from __future__ import annotations

import logging

from .result import Err, Ok

logger = logging.getLogger(__name__)


class ExpiryScheduler:
    """Runs the pantry status sweep on a cron schedule.

    Uses APScheduler for cron-based scheduling.
    """

    def __init__(self, config) -> None:
        """Initialize scheduler with a ScannerConfig.

        Raises:
            ImportError: If apscheduler is not installed.
        """
        try:
            from apscheduler.schedulers.asyncio import AsyncIOScheduler
            from apscheduler.triggers.cron import CronTrigger
        except ImportError:
            raise ImportError(
                "apscheduler is required: pip install apscheduler"
            ) from None

        self._config = config
        self._scheduler = AsyncIOScheduler()
        self._CronTrigger = CronTrigger
        self._running = False

    def setup_jobs(self) -> None:
        expr = self._config.scheduler.expiry_schedule
        self._scheduler.add_job(
            self.refresh_statuses,
            trigger=self._parse_cron(expr),
            id="refresh_statuses",
            name="Expiry status sweep",
            replace_existing=True,
        )
        logger.info("Registered expiry status sweep: %s", expr)

    def start(self) -> None:
        self.setup_jobs()
        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    @property
    def running(self) -> bool:
        return self._running

    def get_jobs(self) -> list[dict]:
        """Return info about scheduled jobs."""
        jobs = []
        for job in self._scheduler.get_jobs():
            # pending jobs have no next_run_time before start()
            next_run = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": str(next_run) if next_run else None,
            })
        return jobs

    def _parse_cron(self, expr: str):
        parts = expr.split()
        if len(parts) == 5:
            return self._CronTrigger(
                minute=parts[0],
                hour=parts[1],
                day=parts[2],
                month=parts[3],
                day_of_week=parts[4],
            )
        raise ValueError(f"Invalid cron expression: {expr}")

    async def refresh_statuses(self) -> None:
        logger.info("Running expiry status sweep...")

        try:
            from .db import InventoryDB

            db = InventoryDB(self._config.database.path)
            try:
                result = db.refresh_statuses(
                    expiring_soon_days=self._config.scheduler.expiring_soon_days
                )
            finally:
                db.close()
        except Exception:
            logger.exception("Expiry status sweep failed")
            return

        match result:
            case Ok(value=count) if count:
                logger.info("Updated the status of %d item(s)", count)
            case Err(error=err):
                logger.error("Expiry status sweep failed: %s", err.message)
