"""Base class for job source adapters."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

import requests

from job_sync.errors import MalformedRecord
from job_sync.jobs.models import FetchResult, RawJobRecord
from job_sync.utils.http_client import create_session

logger = logging.getLogger("job_sync.jobs")


class JobSource(ABC):
    """One external job provider.

    Subclasses own authentication, query-parameter mapping and response
    parsing. ``fetch`` raises ProviderUnavailable or RateLimited; individual
    malformed items are skipped.
    """

    name: str = ""

    def __init__(self, session: Optional[requests.Session] = None):
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = create_session()
        return self._session

    @abstractmethod
    def fetch(self, query: str, location: str, page_size: int, page: int = 1) -> FetchResult:
        """Fetch one page of results for a search term and location."""

    @abstractmethod
    def parse_item(self, item: Any) -> RawJobRecord:
        """Validate one provider item. Raises MalformedRecord when unusable."""

    def parse_items(self, items: Iterable[Any]) -> list[RawJobRecord]:
        records = []
        for item in items:
            try:
                records.append(self.parse_item(item))
            except MalformedRecord as e:
                logger.warning("Skipping malformed %s record: %s", self.name, e)
        return records


def require_str(item: dict, key: str) -> str:
    """Return a non-empty trimmed string field or raise MalformedRecord."""
    value = item.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MalformedRecord(f"missing '{key}'")
    if not isinstance(value, (str, int)):
        raise MalformedRecord(f"'{key}' has unexpected type {type(value).__name__}")
    return str(value).strip()


def optional_str(item: dict, key: str) -> str:
    value = item.get(key)
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def optional_number(item: dict, key: str) -> Optional[float]:
    value = item.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def require_mapping(item: Any) -> dict:
    if not isinstance(item, dict):
        raise MalformedRecord(f"expected an object, got {type(item).__name__}")
    return item


def optional_str_list(item: dict, key: str) -> list[str]:
    """Return the string entries of a list field.

    A missing value gives ``[]`` and a lone string is treated as a one-item
    list. Any other type raises MalformedRecord.
    """
    value = item.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise MalformedRecord(f"'{key}' has unexpected type {type(value).__name__}")
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]
