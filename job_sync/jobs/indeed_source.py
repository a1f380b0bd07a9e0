"""Indeed publisher search API."""

import logging
from typing import Any, Optional

import requests

from job_sync.errors import ProviderUnavailable
from job_sync.jobs.base import JobSource, optional_str, require_mapping, require_str
from job_sync.jobs.models import FetchResult, RawJobRecord
from job_sync.utils.text_processing import html_to_text, parse_timestamp
from job_sync.utils.http_client import get_json

logger = logging.getLogger("job_sync.jobs.indeed")

INDEED_API_URL = "https://api.indeed.com/ads/apisearch"
INDEED_BASE = "https://www.indeed.com"


class IndeedSource(JobSource):
    name = "indeed"

    def __init__(self, publisher_id: str, session: Optional[requests.Session] = None):
        super().__init__(session)
        self.publisher_id = publisher_id

    def fetch(self, query: str, location: str, page_size: int, page: int = 1) -> FetchResult:
        if not self.publisher_id:
            raise ProviderUnavailable(self.name, "Indeed publisher id not configured")

        start = (page - 1) * page_size
        params = {
            "publisher": self.publisher_id,
            "q": query,
            "l": location,
            "limit": page_size,
            "start": start,
            "format": "json",
            "v": "2",
        }

        data = get_json(self.name, INDEED_API_URL, session=self.session, params=params)
        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, "unexpected response shape")

        records = self.parse_items(data.get("results") or [])[:page_size]
        total = data.get("totalResults") or 0
        has_more = isinstance(total, int) and start + page_size < total

        logger.info("Fetched %d jobs from Indeed for '%s' in '%s'", len(records), query, location)
        return FetchResult(records=records, has_more=has_more)

    def parse_item(self, item: Any) -> RawJobRecord:
        item = require_mapping(item)
        job_key = require_str(item, "jobkey")
        location = optional_str(item, "formattedLocation")

        return RawJobRecord(
            source=self.name,
            provider_id=job_key,
            title=require_str(item, "jobtitle"),
            company=optional_str(item, "company"),
            location=location,
            city=optional_str(item, "city"),
            state=optional_str(item, "state"),
            country=optional_str(item, "country"),
            is_remote="remote" in location.lower(),
            description=html_to_text(optional_str(item, "snippet")),
            salary_text=optional_str(item, "salary"),
            employment_type=optional_str(item, "jobtype"),
            posted_at=parse_timestamp(item.get("date")),
            url=optional_str(item, "url") or f"{INDEED_BASE}/viewjob?jk={job_key}",
            payload=item,
        )
