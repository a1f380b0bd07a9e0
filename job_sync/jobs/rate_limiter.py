"""Per-source throttling and 429 circuit breaker."""

import logging
import threading
from typing import Optional

from job_sync.errors import RateLimited
from job_sync.jobs.base import JobSource
from job_sync.jobs.fallback import FallbackProvider
from job_sync.jobs.models import FetchResult
from job_sync.utils.clock import SystemClock

logger = logging.getLogger("job_sync.rate_limiter")

DEFAULT_MIN_INTERVAL_SECONDS = 2.0
DEFAULT_COOLDOWN_SECONDS = 5 * 60


class RateLimitedSource:
    """Wraps one adapter so its calls are spaced out and a 429 pauses it.

    While the cool-down window is open no request is sent and the fallback
    provider answers instead. The window closes on its own once it passes.
    """

    def __init__(
        self,
        source: JobSource,
        fallback: FallbackProvider,
        clock=None,
        min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
    ):
        self.source = source
        self.fallback = fallback
        self.clock = clock or SystemClock()
        self.min_interval = min_interval
        self.cooldown = cooldown
        self.last_call_at: Optional[float] = None
        self.cooldown_until: float = 0.0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.source.name

    def in_cooldown(self) -> bool:
        return self.clock.time() < self.cooldown_until

    def fetch(self, query: str, location: str, page_size: int, page: int = 1) -> FetchResult:
        with self._lock:
            if self.in_cooldown():
                logger.debug(
                    "%s cooling down for %.0fs more, serving fallback data",
                    self.name, self.cooldown_until - self.clock.time(),
                )
                return self._fallback(query, location, page_size, page)

            if self.last_call_at is not None:
                wait = self.min_interval - (self.clock.time() - self.last_call_at)
                if wait > 0:
                    self.clock.sleep(wait)

            self.last_call_at = self.clock.time()
            try:
                return self.source.fetch(query, location, page_size, page)
            except RateLimited:
                self.cooldown_until = self.clock.time() + self.cooldown
                logger.warning(
                    "%s rate limited, pausing requests for %d minutes",
                    self.name, round(self.cooldown / 60),
                )
                return self._fallback(query, location, page_size, page)

    def _fallback(self, query: str, location: str, page_size: int, page: int) -> FetchResult:
        # Sample data is served once per query, not once per page
        if page > 1:
            return FetchResult(from_fallback=True)
        records = self.fallback.records_for(self.name, query, location, page_size)
        return FetchResult(records=records, has_more=False, from_fallback=True)
