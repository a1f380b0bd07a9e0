"""Wall-clock abstraction so timing can be replaced in tests."""

import time
from datetime import datetime, timezone


class SystemClock:
    """Real time: timezone-aware UTC datetimes, epoch seconds, blocking sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def time(self) -> float:
        return time.time()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)
