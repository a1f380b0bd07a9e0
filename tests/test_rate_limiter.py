"""Tests for throttling, the 429 breaker and fallback data."""

import pytest

from conftest import StubSource, make_record
from job_sync.errors import ProviderUnavailable, RateLimited
from job_sync.jobs.fallback import EmptyFallbackProvider, SampleFallbackProvider
from job_sync.jobs.rate_limiter import RateLimitedSource


@pytest.fixture
def source():
    return StubSource("rapidapi", records=[make_record(source="rapidapi")])


@pytest.fixture
def limiter(source, clock):
    return RateLimitedSource(source, SampleFallbackProvider(), clock=clock, min_interval=2.0, cooldown=300)


class TestThrottle:
    def test_first_call_not_delayed(self, limiter, clock):
        limiter.fetch("python", "remote", 10)
        assert clock.sleeps == []

    def test_second_call_waits_for_min_interval(self, limiter, clock):
        limiter.fetch("python", "remote", 10)
        clock.advance(0.5)
        limiter.fetch("python", "remote", 10)
        assert clock.sleeps == [pytest.approx(1.5)]

    def test_no_wait_after_interval_passed(self, limiter, clock):
        limiter.fetch("python", "remote", 10)
        clock.advance(3)
        limiter.fetch("python", "remote", 10)
        assert clock.sleeps == []

    def test_unavailable_propagates(self, source, limiter):
        source.script = [ProviderUnavailable("rapidapi", "HTTP 500")]
        with pytest.raises(ProviderUnavailable):
            limiter.fetch("python", "remote", 10)


class TestCircuitBreaker:
    def test_rate_limit_returns_fallback(self, source, limiter):
        source.script = [RateLimited("rapidapi", "HTTP 429")]
        result = limiter.fetch("python", "remote", 10)
        assert result.from_fallback
        assert result.records
        assert all(r.is_fallback for r in result.records)
        assert all(r.provider_id.startswith("sample_") for r in result.records)
        assert all(r.source == "rapidapi" for r in result.records)

    def test_cooldown_skips_network(self, source, limiter, clock):
        source.script = [RateLimited("rapidapi", "HTTP 429")]
        limiter.fetch("python", "remote", 10)

        for _ in range(100):
            result = limiter.fetch("python", "remote", 10)
            assert result.from_fallback
            clock.advance(1)

        assert len(source.calls) == 1

    def test_resets_after_cooldown(self, source, limiter, clock):
        source.script = [RateLimited("rapidapi", "HTTP 429")]
        limiter.fetch("python", "remote", 10)

        clock.advance(299)
        limiter.fetch("python", "remote", 10)
        assert len(source.calls) == 1

        clock.advance(1)
        result = limiter.fetch("python", "remote", 10)
        assert not result.from_fallback
        assert len(source.calls) == 2

    def test_fallback_only_on_first_page(self, source, limiter):
        source.script = [RateLimited("rapidapi", "HTTP 429")]
        limiter.fetch("python", "remote", 10)
        result = limiter.fetch("python", "remote", 10, page=2)
        assert result.from_fallback
        assert result.records == []

    def test_empty_fallback(self, source, clock):
        source.script = [RateLimited("rapidapi", "HTTP 429")]
        limiter = RateLimitedSource(source, EmptyFallbackProvider(), clock=clock)
        result = limiter.fetch("python", "remote", 10)
        assert result.from_fallback
        assert result.records == []


class TestSampleFallback:
    def test_marked_as_sample(self):
        records = SampleFallbackProvider().records_for("indeed", "python", "remote", 10)
        assert records
        for record in records:
            assert record.is_fallback
            assert record.provider_id.startswith("sample_indeed_")
            assert "sample" in record.description.lower()

    def test_respects_page_size(self):
        assert len(SampleFallbackProvider().records_for("indeed", "python", "remote", 1)) == 1
