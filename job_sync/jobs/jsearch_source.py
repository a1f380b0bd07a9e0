"""JSearch job search on RapidAPI (primary source)."""

import logging
from typing import Any, Optional

import requests

from job_sync.errors import ProviderUnavailable
from job_sync.jobs.base import (
    JobSource,
    optional_number,
    optional_str,
    optional_str_list,
    require_mapping,
    require_str,
)
from job_sync.jobs.models import FetchResult, RawJobRecord
from job_sync.utils.http_client import get_json
from job_sync.utils.text_processing import parse_timestamp

logger = logging.getLogger("job_sync.jobs.jsearch")

JSEARCH_HOST = "jsearch.p.rapidapi.com"
JSEARCH_URL = f"https://{JSEARCH_HOST}/search"
JSEARCH_PAGE_SIZE = 10  # JSearch returns ten results per page


class JSearchSource(JobSource):
    """Google-for-Jobs aggregate results through the RapidAPI JSearch endpoint."""

    name = "rapidapi"

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        date_posted: str = "week",
    ):
        super().__init__(session)
        self.api_key = api_key
        self.date_posted = date_posted

    def fetch(self, query: str, location: str, page_size: int, page: int = 1) -> FetchResult:
        if not self.api_key:
            raise ProviderUnavailable(self.name, "RapidAPI key not configured")

        remote_only = location.strip().lower() == "remote"
        params = {
            "query": query if remote_only or not location else f"{query} in {location}",
            "page": str(page),
            "num_pages": "1",
            "date_posted": self.date_posted,
            "remote_jobs_only": str(remote_only).lower(),
        }
        headers = {
            "X-RapidAPI-Key": self.api_key,
            "X-RapidAPI-Host": JSEARCH_HOST,
        }

        data = get_json(self.name, JSEARCH_URL, session=self.session, params=params, headers=headers)
        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, "unexpected response shape")
        if data.get("status") not in (None, "OK"):
            raise ProviderUnavailable(self.name, f"API status {data.get('status')}")

        items = data.get("data") or []
        records = self.parse_items(items)[:page_size]
        has_more = bool(data.get("has_next_page", len(items) >= JSEARCH_PAGE_SIZE))

        logger.info("Fetched %d jobs from JSearch for '%s' in '%s'", len(records), query, location)
        return FetchResult(records=records, has_more=has_more)

    def parse_item(self, item: Any) -> RawJobRecord:
        item = require_mapping(item)
        highlights = item.get("job_highlights") or {}
        qualifications = optional_str_list(highlights, "Qualifications") if isinstance(highlights, dict) else []

        return RawJobRecord(
            source=self.name,
            provider_id=require_str(item, "job_id"),
            title=require_str(item, "job_title"),
            company=optional_str(item, "employer_name"),
            city=optional_str(item, "job_city"),
            state=optional_str(item, "job_state"),
            country=optional_str(item, "job_country"),
            is_remote=bool(item.get("job_is_remote", False)),
            description=optional_str(item, "job_description"),
            qualifications=qualifications,
            salary_min=optional_number(item, "job_min_salary"),
            salary_max=optional_number(item, "job_max_salary"),
            salary_currency=optional_str(item, "job_salary_currency"),
            employment_type=optional_str(item, "job_employment_type"),
            posted_at=parse_timestamp(
                item.get("job_posted_at_datetime_utc") or item.get("job_posted_at_timestamp")
            ),
            skills=optional_str_list(item, "job_required_skills"),
            company_size_hint=optional_str(item, "employer_company_type"),
            company_website=optional_str(item, "employer_website"),
            url=optional_str(item, "job_apply_link"),
            payload=item,
        )
