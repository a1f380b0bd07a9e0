"""LinkedIn job postings API.

Access requires a partner access token; without one every fetch raises
ProviderUnavailable and the source is reported as failed.
"""

import logging
from typing import Any, Optional

import requests

from job_sync.errors import ProviderUnavailable
from job_sync.jobs.base import JobSource, optional_str, optional_str_list, require_mapping, require_str
from job_sync.jobs.models import FetchResult, RawJobRecord
from job_sync.utils.http_client import get_json
from job_sync.utils.text_processing import html_to_text, parse_timestamp

logger = logging.getLogger("job_sync.jobs.linkedin")

LINKEDIN_API_URL = "https://api.linkedin.com/v2/jobPostings"
LINKEDIN_JOB_VIEW = "https://www.linkedin.com/jobs/view"


class LinkedInSource(JobSource):
    name = "linkedin"

    def __init__(self, access_token: str, session: Optional[requests.Session] = None):
        super().__init__(session)
        self.access_token = access_token

    def fetch(self, query: str, location: str, page_size: int, page: int = 1) -> FetchResult:
        if not self.access_token:
            raise ProviderUnavailable(self.name, "LinkedIn access token not configured")

        params = {
            "keywords": query,
            "location": location,
            "count": page_size,
            "start": (page - 1) * page_size,
        }
        headers = {"Authorization": f"Bearer {self.access_token}"}

        data = get_json(self.name, LINKEDIN_API_URL, session=self.session, params=params, headers=headers)
        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, "unexpected response shape")

        records = self.parse_items(data.get("elements") or [])[:page_size]
        paging = data.get("paging") or {}
        links = paging.get("links") or []
        has_more = any(isinstance(link, dict) and link.get("rel") == "next" for link in links)

        logger.info("Fetched %d jobs from LinkedIn for '%s' in '%s'", len(records), query, location)
        return FetchResult(records=records, has_more=has_more)

    def parse_item(self, item: Any) -> RawJobRecord:
        item = require_mapping(item)
        job_id = require_str(item, "id")
        company = item.get("companyDetails") or {}
        salary = item.get("salaryInsight") or {}
        description = item.get("description") or {}
        location = optional_str(item, "locationDescription")

        return RawJobRecord(
            source=self.name,
            provider_id=job_id,
            title=require_str(item, "title"),
            company=optional_str(company, "companyName") if isinstance(company, dict) else "",
            location=location,
            is_remote=bool(item.get("workRemoteAllowed")) or location.lower() == "remote",
            description=html_to_text(optional_str(description, "text")) if isinstance(description, dict) else "",
            salary_text=optional_str(salary, "salaryRange") if isinstance(salary, dict) else "",
            employment_type=optional_str(item, "employmentType"),
            posted_at=parse_timestamp(item.get("listedAt")),
            skills=optional_str_list(item, "skills"),
            url=f"{LINKEDIN_JOB_VIEW}/{job_id}",
            payload=item,
        )
