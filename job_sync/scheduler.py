"""Periodic sync trigger backed by APScheduler."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger("job_sync.scheduler")

SYNC_JOB_ID = "job_sync_cycle"


class SyncScheduler(ABC):
    """Fires a callable every ``interval_minutes`` until stopped."""

    @abstractmethod
    def start(self, func: Callable[[], object], interval_minutes: float) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        ...

    @property
    @abstractmethod
    def running(self) -> bool:
        ...

    @property
    @abstractmethod
    def interval_minutes(self) -> Optional[float]:
        ...

    @property
    @abstractmethod
    def next_run_time(self) -> Optional[datetime]:
        ...


def _job_listener(event):
    """Log scheduler job events for debugging."""
    if event.exception:
        logger.error("Scheduled job %s FAILED: %s", event.job_id, event.exception)
        logger.error("Traceback: %s", event.traceback)
    elif hasattr(event, "job_id"):
        if event.code == EVENT_JOB_MISSED:
            logger.warning("Scheduled job %s MISSED its fire time", event.job_id)
        else:
            logger.info("Scheduled job %s executed successfully", event.job_id)


class IntervalScheduler(SyncScheduler):
    """APScheduler ``BackgroundScheduler`` running one interval job.

    Runs coalesce and never overlap. Stopping does not wait for a cycle that
    is already executing.
    """

    def __init__(self):
        self._scheduler: BackgroundScheduler | None = None
        self._interval: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    @property
    def interval_minutes(self) -> Optional[float]:
        return self._interval if self.running else None

    @property
    def next_run_time(self) -> Optional[datetime]:
        if not self.running:
            return None
        job = self._scheduler.get_job(SYNC_JOB_ID)
        return job.next_run_time if job else None

    def start(self, func: Callable[[], object], interval_minutes: float) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")

        if self.running and self._interval == interval_minutes:
            return

        if self._scheduler is None:
            self._scheduler = BackgroundScheduler()
            self._scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED)
            self._scheduler.start()
            logger.info("APScheduler started")

        self._scheduler.add_job(
            func,
            trigger=IntervalTrigger(minutes=interval_minutes),
            id=SYNC_JOB_ID,
            name="Job sync cycle",
            coalesce=True,
            max_instances=1,
            replace_existing=True,
        )
        self._interval = interval_minutes
        logger.info("Scheduled job sync every %s minutes", interval_minutes)

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        self._interval = None
        logger.info("APScheduler stopped")
