"""Job source adapters and the registry that maps source ids to them."""

from typing import Optional

import requests

from job_sync.jobs.base import JobSource
from job_sync.jobs.indeed_source import IndeedSource
from job_sync.jobs.jsearch_source import JSearchSource
from job_sync.jobs.linkedin_source import LinkedInSource
from job_sync.jobs.remotive_source import RemotiveSource

SOURCE_CLASSES: dict[str, type[JobSource]] = {
    JSearchSource.name: JSearchSource,
    IndeedSource.name: IndeedSource,
    LinkedInSource.name: LinkedInSource,
    RemotiveSource.name: RemotiveSource,
}

# Sources that cannot be queried without a credential, and the ApiKeys field holding it
REQUIRED_KEYS = {
    JSearchSource.name: "rapidapi_key",
    IndeedSource.name: "indeed_publisher_id",
    LinkedInSource.name: "linkedin_access_token",
}


def get_source_class(source_id: str) -> type[JobSource]:
    try:
        return SOURCE_CLASSES[source_id.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(SOURCE_CLASSES))
        raise ValueError(f"Unknown job source '{source_id}' (known: {known})") from None


def build_sources(config, session: Optional[requests.Session] = None) -> dict[str, JobSource]:
    """Instantiate every registered adapter with credentials from ``config.api_keys``."""
    keys = config.api_keys
    return {
        JSearchSource.name: JSearchSource(keys.rapidapi_key, session=session),
        IndeedSource.name: IndeedSource(keys.indeed_publisher_id, session=session),
        LinkedInSource.name: LinkedInSource(keys.linkedin_access_token, session=session),
        RemotiveSource.name: RemotiveSource(session=session),
    }
