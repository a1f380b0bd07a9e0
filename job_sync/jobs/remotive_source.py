"""Remotive public remote-jobs API (no key required).

Docs: https://remotive.com/api/remote-jobs

Every listing is remote. The endpoint returns the full result set in one
response, so there is never a second page.
"""

import logging
from typing import Any

from job_sync.errors import ProviderUnavailable
from job_sync.jobs.base import JobSource, optional_str, optional_str_list, require_mapping, require_str
from job_sync.jobs.models import FetchResult, RawJobRecord
from job_sync.utils.http_client import get_json
from job_sync.utils.text_processing import html_to_text, parse_timestamp

logger = logging.getLogger("job_sync.jobs.remotive")

REMOTIVE_URL = "https://remotive.com/api/remote-jobs"


class RemotiveSource(JobSource):
    name = "remotive"

    def fetch(self, query: str, location: str, page_size: int, page: int = 1) -> FetchResult:
        if page > 1:
            return FetchResult()

        params: dict[str, Any] = {"limit": page_size}
        if query:
            params["search"] = query

        data = get_json(self.name, REMOTIVE_URL, session=self.session, params=params)
        if not isinstance(data, dict):
            raise ProviderUnavailable(self.name, "unexpected response shape")

        records = self.parse_items(data.get("jobs") or [])[:page_size]
        logger.info("Fetched %d jobs from Remotive for '%s'", len(records), query)
        return FetchResult(records=records, has_more=False)

    def parse_item(self, item: Any) -> RawJobRecord:
        item = require_mapping(item)
        return RawJobRecord(
            source=self.name,
            provider_id=require_str(item, "id"),
            title=require_str(item, "title"),
            company=optional_str(item, "company_name"),
            location=optional_str(item, "candidate_required_location"),
            is_remote=True,
            description=html_to_text(optional_str(item, "description")),
            salary_text=optional_str(item, "salary"),
            employment_type=optional_str(item, "job_type").replace("_", " "),
            posted_at=parse_timestamp(item.get("publication_date")),
            skills=optional_str_list(item, "tags"),
            url=optional_str(item, "url"),
            payload=item,
        )
