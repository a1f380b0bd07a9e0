"""Shared fixtures: controllable time, scripted job sources and timers."""

from datetime import datetime, timedelta, timezone

import pytest

from job_sync.jobs.base import JobSource
from job_sync.jobs.models import FetchResult, RawJobRecord
from job_sync.scheduler import SyncScheduler

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Time only moves when the test (or a sleep) moves it."""

    def __init__(self, start: datetime = NOW):
        self._now = start
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._now

    def time(self) -> float:
        return self._now.timestamp()

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        if seconds > 0:
            self.advance(seconds)

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)


def make_record(source: str = "stub", provider_id: str = "1", title: str = "Software Engineer", **kwargs) -> RawJobRecord:
    kwargs.setdefault("company", "Acme")
    kwargs.setdefault("location", "San Francisco, CA")
    kwargs.setdefault("description", "Build services in Python and Docker.")
    return RawJobRecord(source=source, provider_id=provider_id, title=title, **kwargs)


class StubSource(JobSource):
    """Job source that replays scripted results instead of calling an API.

    ``script`` items are FetchResults, record lists or exceptions, consumed one
    per call; once it runs out ``records`` is returned for every call.
    """

    def __init__(self, name: str, records=None, script=None, on_fetch=None):
        super().__init__(session=None)
        self.name = name
        self.records = list(records or [])
        self.script = list(script or [])
        self.on_fetch = on_fetch
        self.calls: list[tuple] = []

    def fetch(self, query, location, page_size, page=1):
        self.calls.append((query, location, page_size, page))
        if self.on_fetch:
            self.on_fetch(query, location, page_size, page)
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            if isinstance(item, FetchResult):
                return item
            return FetchResult(records=list(item))
        return FetchResult(records=list(self.records))

    def parse_item(self, item):
        return item


class ManualScheduler(SyncScheduler):
    """Scheduler that only fires when the test calls ``fire``."""

    def __init__(self):
        self.func = None
        self._interval = None
        self.start_calls = 0
        self.stop_calls = 0

    @property
    def running(self):
        return self.func is not None

    @property
    def interval_minutes(self):
        return self._interval

    @property
    def next_run_time(self):
        return None

    def start(self, func, interval_minutes):
        self.start_calls += 1
        self.func = func
        self._interval = interval_minutes

    def stop(self):
        self.stop_calls += 1
        self.func = None
        self._interval = None

    def fire(self):
        assert self.func is not None, "scheduler is not running"
        return self.func()


class FakeResponse:
    def __init__(self, payload=None, status_code=200, reason="OK"):
        self.payload = payload
        self.status_code = status_code
        self.reason = reason

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """Stands in for requests.Session; returns queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.headers = {}
        self.requests: list[dict] = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.requests.append({"url": url, "params": params or {}, "headers": headers or {}})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def manual_scheduler():
    return ManualScheduler()
