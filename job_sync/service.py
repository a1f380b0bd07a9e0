"""Sync orchestrator: fetch from every source, normalize, dedupe, cache, notify."""

import dataclasses
import logging
import math
import threading
import traceback
from datetime import timedelta
from typing import Callable, Optional

import requests

from job_sync.cache import JobCache, JobFilters, JobStatistics
from job_sync.config import AppConfig, RateLimitConfig, SyncConfig, apply_sync_changes
from job_sync.errors import ProviderError, ProviderUnavailable
from job_sync.jobs import build_sources
from job_sync.jobs.base import JobSource
from job_sync.jobs.dedup import collapse_ids, deduplicate
from job_sync.jobs.fallback import FallbackProvider, SampleFallbackProvider
from job_sync.jobs.models import CanonicalJob, RawJobRecord, SyncStatus
from job_sync.jobs.normalizer import normalize_records
from job_sync.jobs.rate_limiter import RateLimitedSource
from job_sync.notifier import SubscriberRegistry, Subscription
from job_sync.scheduler import IntervalScheduler, SyncScheduler
from job_sync.utils.clock import SystemClock

logger = logging.getLogger("job_sync.service")


class JobSyncService:
    """Owns the job cache, the sync status and the periodic refresh.

    A cycle walks the configured sources one after another. A source that
    fails is recorded in the status and skipped; the others still land in
    the cache. Only one cycle runs at a time: a trigger that arrives while
    one is in progress gets the in-progress status back.
    """

    def __init__(
        self,
        config: Optional[SyncConfig],
        sources: dict[str, JobSource],
        clock=None,
        fallback: Optional[FallbackProvider] = None,
        scheduler: Optional[SyncScheduler] = None,
        rate_limit: Optional[RateLimitConfig] = None,
    ):
        self._config = (config or SyncConfig()).copy()
        self.clock = clock or SystemClock()
        self.fallback = fallback or SampleFallbackProvider()
        self.scheduler = scheduler
        rate_limit = rate_limit or RateLimitConfig()

        self._limiters = {
            source_id.lower(): RateLimitedSource(
                source,
                self.fallback,
                clock=self.clock,
                min_interval=rate_limit.min_interval_seconds,
                cooldown=rate_limit.cooldown_minutes * 60,
            )
            for source_id, source in sources.items()
        }

        self._cache = JobCache()
        self._subscribers = SubscriberRegistry()
        self._status = SyncStatus()
        self._sync_lock = threading.Lock()
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self, **changes) -> SyncStatus:
        """Apply config changes, run the first sync and start the timer if enabled."""
        if self._initialized:
            logger.info("Job sync service already initialized")
            if changes:
                self.update_configuration(**changes)
            return self.get_sync_status()

        if changes:
            self._config = apply_sync_changes(self._config, changes)

        logger.info(
            "Initializing job sync: sources=%s, %d queries, %d locations",
            self._config.sources, len(self._config.search_queries), len(self._config.locations),
        )
        status = self.perform_sync()
        if self._config.auto_refresh:
            self._start_scheduler()
        self._initialized = True
        return status

    # -- sync cycle ---------------------------------------------------------

    def perform_sync(self) -> SyncStatus:
        """Run one full cycle and return a copy of the resulting status."""
        if not self._sync_lock.acquire(blocking=False):
            logger.info("Sync already in progress")
            return self._status.copy()
        try:
            self._run_cycle()
        finally:
            self._status.is_running = False
            self._sync_lock.release()
        return self._status.copy()

    def _run_cycle(self) -> None:
        config = self._config.copy()
        previous = self._status
        status = SyncStatus(
            last_sync_time=previous.last_sync_time,
            next_sync_time=previous.next_sync_time,
            total_jobs_synced=previous.total_jobs_synced,
            is_running=True,
        )
        self._status = status
        logger.info("Starting job synchronization...")

        records: list[RawJobRecord] = []
        for source_id in config.sources:
            try:
                source_records, degraded = self._sync_from_source(source_id, config)
            except Exception as e:
                message = str(e) if isinstance(e, ProviderError) else f"{source_id}: {e}"
                logger.error("Failed to sync from %s: %s", source_id, e)
                status.failed_sources.append(source_id)
                status.errors.append(message)
                continue

            records.extend(source_records)
            status.successful_sources.append(source_id)
            if degraded:
                status.degraded_sources.append(source_id)
                logger.warning("%s served sample data during this sync", source_id)
            logger.info("Successfully synced %d records from %s", len(source_records), source_id)

        try:
            jobs = normalize_records(records, self.clock.now())
            if config.enable_deduplication:
                jobs = deduplicate(jobs)
            jobs = collapse_ids(jobs)

            self._cache.replace(jobs)

            finished = self.clock.now()
            self._status = SyncStatus(
                last_sync_time=finished,
                next_sync_time=finished + timedelta(minutes=config.sync_interval_minutes),
                total_jobs_synced=len(jobs),
                successful_sources=status.successful_sources,
                failed_sources=status.failed_sources,
                degraded_sources=status.degraded_sources,
                errors=status.errors,
                is_running=True,
            )

            self._subscribers.notify(jobs)
            logger.info(
                "Sync complete: %d jobs (%d sources ok, %d failed)",
                len(jobs), len(status.successful_sources), len(status.failed_sources),
            )
        except Exception as e:
            logger.error("Sync failed: %s\n%s", e, traceback.format_exc())
            self._status.errors.append(f"General sync error: {e}")

    def _sync_from_source(self, source_id: str, config: SyncConfig) -> tuple[list[RawJobRecord], bool]:
        """Fetch every (query, location) pair from one source.

        Returns the records, capped at ``max_jobs_per_source``, and whether any
        of them came from the fallback provider. ProviderUnavailable aborts the
        whole source.
        """
        limiter = self._limiters.get(source_id.lower())
        if limiter is None:
            raise ProviderUnavailable(source_id, "no adapter registered for this source")

        limit = config.max_jobs_per_source
        if not config.search_queries or not config.locations:
            return [], False
        page_size = math.ceil(limit / len(config.search_queries))

        records: list[RawJobRecord] = []
        degraded = False
        calls = 0
        for query in config.search_queries:
            for location in config.locations:
                for page in range(1, config.max_pages_per_query + 1):
                    if len(records) >= limit:
                        return records[:limit], degraded
                    if calls:
                        self.clock.sleep(config.request_delay_seconds)
                    calls += 1

                    result = limiter.fetch(query, location, page_size, page)
                    degraded = degraded or result.from_fallback
                    records.extend(result.records[:page_size])
                    if not result.has_more:
                        break

        return records[:limit], degraded

    def refresh_from_source(self, source_id: str) -> list[CanonicalJob]:
        """Sync a single source on demand. The cache is left untouched."""
        if source_id.lower() not in self._limiters:
            raise ValueError(f"Unknown job source '{source_id}'")

        config = self._config.copy()
        records, degraded = self._sync_from_source(source_id, config)
        jobs = normalize_records(records, self.clock.now())
        if config.enable_deduplication:
            jobs = deduplicate(jobs)
        jobs = collapse_ids(jobs)
        logger.info(
            "Refreshed %d jobs from %s%s", len(jobs), source_id, " (sample data)" if degraded else "",
        )
        return jobs

    # -- queries ------------------------------------------------------------

    def get_cached_jobs(self) -> list[CanonicalJob]:
        return self._cache.all_jobs()

    def get_filtered_jobs(self, filters: Optional[JobFilters] = None, **criteria) -> list[CanonicalJob]:
        """Query the cache. ``criteria`` are JobFilters fields and override ``filters``."""
        filters = filters or JobFilters()
        if criteria:
            filters = dataclasses.replace(filters, **criteria)
        return self._cache.query(filters)

    def get_job_statistics(self) -> JobStatistics:
        return self._cache.get_stats()

    def get_sync_status(self) -> SyncStatus:
        return self._status.copy()

    def subscribe(self, handler: Callable[[list[CanonicalJob]], None]) -> Subscription:
        return self._subscribers.subscribe(handler)

    # -- configuration & scheduling -------------------------------------------

    def get_configuration(self) -> SyncConfig:
        return self._config.copy()

    def update_configuration(self, **changes) -> SyncConfig:
        """Validate and apply config changes, then start/stop/restart the timer."""
        old = self._config
        self._config = apply_sync_changes(old, changes)
        logger.info("Sync configuration updated: %s", ", ".join(sorted(changes)) or "no changes")

        if self._initialized:
            new = self._config
            if not new.auto_refresh:
                self._stop_scheduler()
            elif self.scheduler is None:
                if not old.auto_refresh:
                    self._start_scheduler()
            elif self.scheduler.running and new.sync_interval_minutes != old.sync_interval_minutes:
                self._stop_scheduler()
                self._start_scheduler()
            else:
                self._start_scheduler()
        return self._config.copy()

    def _scheduled_sync(self) -> None:
        logger.info("=== SCHEDULER FIRING job sync ===")
        status = self.perform_sync()
        logger.info(
            "=== SCHEDULER COMPLETED job sync: %d jobs, %d failed sources ===",
            status.total_jobs_synced, len(status.failed_sources),
        )

    def _start_scheduler(self) -> None:
        if self.scheduler is None:
            logger.warning("auto_refresh is enabled but no scheduler is configured")
            return
        self.scheduler.start(self._scheduled_sync, self._config.sync_interval_minutes)

    def _stop_scheduler(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()

    def cleanup(self) -> None:
        """Stop the timer and drop cached jobs and subscribers."""
        self._stop_scheduler()
        self._cache.clear()
        self._subscribers.clear()
        self._initialized = False
        logger.info("Job sync service cleaned up")


def create_service(app_config: AppConfig, session: Optional[requests.Session] = None) -> JobSyncService:
    """Wire a production service from the loaded app config."""
    return JobSyncService(
        app_config.sync,
        build_sources(app_config, session=session),
        clock=SystemClock(),
        fallback=SampleFallbackProvider(),
        scheduler=IntervalScheduler(),
        rate_limit=app_config.rate_limit,
    )
