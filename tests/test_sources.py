"""Tests for provider adapters against canned payloads."""

from datetime import datetime, timezone

import pytest
import requests

from conftest import FakeResponse, FakeSession
from job_sync.config import AppConfig
from job_sync.errors import ProviderUnavailable, RateLimited
from job_sync.jobs import build_sources, get_source_class
from job_sync.jobs.indeed_source import IndeedSource
from job_sync.jobs.jsearch_source import JSearchSource
from job_sync.jobs.linkedin_source import LinkedInSource
from job_sync.jobs.remotive_source import RemotiveSource
from job_sync.utils.http_client import get_json

JSEARCH_PAYLOAD = {
    "status": "OK",
    "data": [
        {
            "job_id": "js-1",
            "job_title": "React Developer",
            "employer_name": "TechCorp Inc",
            "employer_website": "https://techcorp.example",
            "job_city": "Austin",
            "job_state": "TX",
            "job_country": "US",
            "job_is_remote": False,
            "job_description": "Build UIs with React.",
            "job_employment_type": "FULLTIME",
            "job_min_salary": 100000,
            "job_max_salary": 130000,
            "job_salary_currency": "USD",
            "job_posted_at_datetime_utc": "2024-05-30T10:00:00.000Z",
            "job_required_skills": ["react", "typescript"],
            "job_highlights": {"Qualifications": ["3+ years JavaScript"]},
            "job_apply_link": "https://techcorp.example/apply",
        },
        {"job_id": "js-2"},
        "not an object",
    ],
    "has_next_page": True,
}


class TestJSearchSource:
    def test_parses_results(self):
        session = FakeSession(FakeResponse(JSEARCH_PAYLOAD))
        result = JSearchSource("key", session=session).fetch("react developer", "austin", 10)

        assert len(result.records) == 1
        assert result.has_more
        record = result.records[0]
        assert record.source == "rapidapi"
        assert record.provider_id == "js-1"
        assert record.company == "TechCorp Inc"
        assert record.city == "Austin"
        assert record.salary_min == 100000.0
        assert record.skills == ["react", "typescript"]
        assert record.qualifications == ["3+ years JavaScript"]
        assert record.posted_at == datetime(2024, 5, 30, 10, tzinfo=timezone.utc)

    def test_request_parameters(self):
        session = FakeSession(FakeResponse({"status": "OK", "data": []}))
        JSearchSource("secret", session=session).fetch("python developer", "remote", 10, page=2)

        request = session.requests[0]
        assert request["params"]["query"] == "python developer"
        assert request["params"]["remote_jobs_only"] == "true"
        assert request["params"]["page"] == "2"
        assert request["headers"]["X-RapidAPI-Key"] == "secret"

    def test_location_added_to_query(self):
        session = FakeSession(FakeResponse({"status": "OK", "data": []}))
        JSearchSource("secret", session=session).fetch("python developer", "new york", 10)
        assert session.requests[0]["params"]["query"] == "python developer in new york"

    def test_missing_key(self):
        session = FakeSession()
        with pytest.raises(ProviderUnavailable):
            JSearchSource("", session=session).fetch("python", "remote", 10)
        assert session.requests == []

    def test_error_status(self):
        session = FakeSession(FakeResponse({"status": "ERROR", "data": []}))
        with pytest.raises(ProviderUnavailable):
            JSearchSource("key", session=session).fetch("python", "remote", 10)

    def test_mistyped_skills_skip_only_that_item(self):
        payload = {
            "status": "OK",
            "data": [
                {"job_id": "a1", "job_title": "Python Developer", "job_required_skills": 5},
                {"job_id": "a2", "job_title": "Go Developer"},
            ],
        }
        session = FakeSession(FakeResponse(payload))
        result = JSearchSource("key", session=session).fetch("developer", "remote", 10)
        assert [r.provider_id for r in result.records] == ["a2"]

    def test_single_skill_string(self):
        payload = {
            "status": "OK",
            "data": [{
                "job_id": "a1",
                "job_title": "Python Developer",
                "job_required_skills": "python",
                "job_highlights": {"Qualifications": "Django experience"},
            }],
        }
        session = FakeSession(FakeResponse(payload))
        record = JSearchSource("key", session=session).fetch("python", "remote", 10).records[0]
        assert record.skills == ["python"]
        assert record.qualifications == ["Django experience"]

    def test_mistyped_qualifications_skip_item(self):
        payload = {
            "status": "OK",
            "data": [{"job_id": "a1", "job_title": "Python Developer", "job_highlights": {"Qualifications": 3}}],
        }
        session = FakeSession(FakeResponse(payload))
        assert JSearchSource("key", session=session).fetch("python", "remote", 10).records == []


class TestIndeedSource:
    def test_parses_results(self):
        payload = {
            "totalResults": 25,
            "results": [
                {
                    "jobkey": "abc123",
                    "jobtitle": "Backend Developer",
                    "company": "DataSolutions Ltd",
                    "formattedLocation": "Remote",
                    "snippet": "<b>Python</b> and PostgreSQL",
                    "jobtype": "contract",
                    "date": "Mon, 27 May 2024 08:00:00 GMT",
                },
                {"jobtitle": "No key"},
            ],
        }
        session = FakeSession(FakeResponse(payload))
        result = IndeedSource("pub", session=session).fetch("backend", "remote", 10)

        assert [r.provider_id for r in result.records] == ["abc123"]
        assert result.has_more
        record = result.records[0]
        assert record.is_remote
        assert record.description == "Python and PostgreSQL"
        assert record.url == "https://www.indeed.com/viewjob?jk=abc123"
        assert session.requests[0]["params"]["publisher"] == "pub"

    def test_last_page(self):
        session = FakeSession(FakeResponse({"totalResults": 5, "results": []}))
        result = IndeedSource("pub", session=session).fetch("backend", "remote", 10)
        assert not result.has_more

    def test_missing_publisher_id(self):
        with pytest.raises(ProviderUnavailable):
            IndeedSource("", session=FakeSession()).fetch("backend", "remote", 10)


class TestLinkedInSource:
    def test_parses_results(self):
        payload = {
            "elements": [
                {
                    "id": 987,
                    "title": "Data Engineer",
                    "companyDetails": {"companyName": "Globex"},
                    "locationDescription": "Seattle, WA",
                    "description": {"text": "<p>Spark and SQL</p>"},
                    "employmentType": "FULL_TIME",
                    "listedAt": 1716796800000,
                }
            ],
            "paging": {"links": [{"rel": "next", "href": "/next"}]},
        }
        session = FakeSession(FakeResponse(payload))
        result = LinkedInSource("token", session=session).fetch("data", "seattle", 10)

        record = result.records[0]
        assert record.provider_id == "987"
        assert record.company == "Globex"
        assert record.description == "Spark and SQL"
        assert record.url == "https://www.linkedin.com/jobs/view/987"
        assert record.posted_at == datetime(2024, 5, 27, 8, tzinfo=timezone.utc)
        assert result.has_more
        assert session.requests[0]["headers"]["Authorization"] == "Bearer token"

    def test_missing_token(self):
        with pytest.raises(ProviderUnavailable):
            LinkedInSource("", session=FakeSession()).fetch("data", "seattle", 10)

    def test_skills_field_types(self):
        payload = {
            "elements": [
                {"id": 1, "title": "Data Engineer", "skills": {"name": "spark"}},
                {"id": 2, "title": "Data Analyst", "skills": "sql"},
            ],
        }
        session = FakeSession(FakeResponse(payload))
        result = LinkedInSource("token", session=session).fetch("data", "seattle", 10)
        assert [r.provider_id for r in result.records] == ["2"]
        assert result.records[0].skills == ["sql"]


class TestRemotiveSource:
    def test_parses_results(self):
        payload = {
            "jobs": [
                {
                    "id": 42,
                    "title": "Senior Django Developer",
                    "company_name": "Remote Co",
                    "candidate_required_location": "Worldwide",
                    "description": "<div><p>Django, Celery</p></div>",
                    "job_type": "full_time",
                    "salary": "$90k - $120k",
                    "tags": ["django", "python"],
                    "publication_date": "2024-05-29T12:00:00",
                    "url": "https://remotive.com/remote-jobs/42",
                }
            ]
        }
        session = FakeSession(FakeResponse(payload))
        result = RemotiveSource(session=session).fetch("django", "remote", 10)

        record = result.records[0]
        assert record.provider_id == "42"
        assert record.is_remote
        assert record.description == "Django, Celery"
        assert record.employment_type == "full time"
        assert record.skills == ["django", "python"]
        assert not result.has_more
        assert session.requests[0]["params"]["search"] == "django"

    def test_no_second_page(self):
        session = FakeSession()
        result = RemotiveSource(session=session).fetch("django", "remote", 10, page=2)
        assert result.records == []
        assert session.requests == []

    def test_tags_field_types(self):
        payload = {
            "jobs": [
                {"id": 1, "title": "Django Developer", "tags": True},
                {"id": 2, "title": "Flask Developer", "tags": "flask"},
                {"id": 3, "title": "Rails Developer"},
            ]
        }
        session = FakeSession(FakeResponse(payload))
        result = RemotiveSource(session=session).fetch("developer", "remote", 10)
        assert [r.provider_id for r in result.records] == ["2", "3"]
        assert [r.skills for r in result.records] == [["flask"], []]


class TestGetJson:
    def test_rate_limited(self):
        session = FakeSession(FakeResponse(status_code=429, reason="Too Many Requests"))
        with pytest.raises(RateLimited):
            get_json("rapidapi", "https://example.com", session=session)

    def test_http_error(self):
        session = FakeSession(FakeResponse(status_code=503, reason="Service Unavailable"))
        with pytest.raises(ProviderUnavailable, match="503"):
            get_json("rapidapi", "https://example.com", session=session)

    def test_transport_error_chained(self):
        session = FakeSession(requests.ConnectionError("boom"))
        with pytest.raises(ProviderUnavailable) as exc_info:
            get_json("indeed", "https://example.com", session=session)
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
        assert exc_info.value.source == "indeed"

    def test_invalid_json(self):
        session = FakeSession(FakeResponse(ValueError("bad json")))
        with pytest.raises(ProviderUnavailable):
            get_json("remotive", "https://example.com", session=session)


class TestRegistry:
    def test_lookup_case_insensitive(self):
        assert get_source_class("RapidAPI") is JSearchSource
        assert get_source_class(" remotive ") is RemotiveSource

    def test_unknown_source(self):
        with pytest.raises(ValueError, match="monster"):
            get_source_class("monster")

    def test_build_sources(self):
        config = AppConfig()
        config.api_keys.rapidapi_key = "key"
        session = FakeSession()
        sources = build_sources(config, session=session)
        assert set(sources) == {"rapidapi", "indeed", "linkedin", "remotive"}
        assert sources["rapidapi"].api_key == "key"
        assert sources["remotive"].session is session
