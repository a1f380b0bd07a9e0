"""HTTP client with retry logic, User-Agent rotation and provider error mapping."""

import logging
import random
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from job_sync.errors import ProviderUnavailable, RateLimited

logger = logging.getLogger("job_sync.http")

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
]

DEFAULT_TIMEOUT = 30


def create_session(max_retries: int = 3, backoff_factor: float = 1.0) -> requests.Session:
    """Create a requests session that retries transient server errors.

    429 is not retried here; ``get_json`` turns it into RateLimited.
    """
    session = requests.Session()

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=[500, 502, 503, 504],
        allowed_methods=["GET"],
        raise_on_status=False,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    session.headers.update({
        "User-Agent": random.choice(USER_AGENTS),
        "Accept": "application/json",
        "Accept-Language": "en-US,en;q=0.9",
    })

    return session


def get_json(
    source: str,
    url: str,
    session: Optional[requests.Session] = None,
    params: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> Any:
    """GET a JSON document on behalf of ``source``.

    Raises RateLimited on HTTP 429 and ProviderUnavailable on any other
    transport failure, non-2xx status or undecodable body.
    """
    if session is None:
        session = create_session()

    try:
        # Rotate User-Agent per request
        session.headers["User-Agent"] = random.choice(USER_AGENTS)
        response = session.get(url, params=params, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("HTTP request failed for %s: %s", url, e)
        raise ProviderUnavailable(source, f"request failed: {e}") from e

    if response.status_code == 429:
        logger.warning("%s answered 429 Too Many Requests", source)
        raise RateLimited(source, "HTTP 429 Too Many Requests")

    if response.status_code >= 400:
        raise ProviderUnavailable(source, f"HTTP {response.status_code} {response.reason or ''}".strip())

    try:
        return response.json()
    except ValueError as e:
        raise ProviderUnavailable(source, "response body is not valid JSON") from e
