"""Shared HTTP utilities for all platform probes."""

from typing import Any, Optional
from urllib.parse import urljoin, urlparse

import requests

from ..logger import get_logger
from ..retry import TransientHTTPError, exponential_backoff, should_retry_http_status

logger = get_logger()

PROBE_TIMEOUT = 10
PAGE_TIMEOUT = 15

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
HTML_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}
JSON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def _request(
    method: str,
    url: str,
    platform: str,
    timeout: float,
    headers: dict,
    **kwargs,
) -> Optional[requests.Response]:
    """Issue one request; any failure is a miss, returned as None.

    An identifier that does not exist on a platform is the common case,
    so misses are logged at debug level only.
    """
    logger.record_request()
    try:
        resp = requests.request(
            method, url, headers=headers, timeout=timeout, allow_redirects=True, **kwargs
        )
        resp.raise_for_status()
        return resp
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "HTTPError"
        logger.record_probe_miss(platform, f"HTTPError_{status}")
        logger.debug(f"{platform.capitalize()} returned an error status", url=url, status=status)
    except requests.exceptions.Timeout:
        logger.record_probe_miss(platform, "Timeout")
        logger.debug(f"{platform.capitalize()} request timed out", url=url)
    except requests.exceptions.RequestException as e:
        logger.record_probe_miss(platform, "RequestException")
        logger.debug(f"{platform.capitalize()} request error", url=url, error=str(e))
    return None


def fetch_json(
    url: str,
    platform: str,
    method: str = "GET",
    payload: Optional[dict] = None,
    timeout: float = PROBE_TIMEOUT,
) -> Optional[Any]:
    """Fetch and decode a JSON document, or None on any failure."""
    resp = _request(method, url, platform, timeout, JSON_HEADERS, json=payload)
    if resp is None:
        return None
    try:
        return resp.json()
    except ValueError:
        logger.record_probe_miss(platform, "InvalidJSON")
        logger.debug(f"{platform.capitalize()} returned a non-JSON body", url=url)
        return None


def fetch_page(
    url: str,
    platform: str,
    timeout: float = PROBE_TIMEOUT,
) -> Optional[requests.Response]:
    """Fetch an HTML page following redirects, or None on any failure."""
    return _request("GET", url, platform, timeout, HTML_HEADERS)


def fetch_text(url: str, platform: str, timeout: float = PROBE_TIMEOUT) -> Optional[str]:
    """Body text of an HTML page, or None on any failure."""
    resp = fetch_page(url, platform, timeout=timeout)
    return resp.text if resp is not None else None


def head_ok(url: str, timeout: float = PROBE_TIMEOUT) -> tuple[bool, Optional[str]]:
    """HEAD probe for existence.

    A 405 still proves a server is answering. Returns (ok, final_url) where
    final_url is set when redirects moved the request.
    """
    logger.record_request()
    try:
        resp = requests.head(url, headers=HTML_HEADERS, timeout=timeout, allow_redirects=True)
    except requests.exceptions.RequestException as e:
        logger.debug("HEAD probe failed", url=url, error=type(e).__name__)
        return False, None
    ok = resp.ok or resp.status_code == 405
    final_url = resp.url if resp.url and resp.url != url else None
    return ok, final_url


@exponential_backoff(
    max_retries=3,
    base_delay=1.0,
    exceptions=(requests.exceptions.Timeout, requests.exceptions.ConnectionError, TransientHTTPError),
)
def fetch_with_retry(url: str, timeout: float = PAGE_TIMEOUT) -> str:
    """Fetch a listing page, retrying timeouts and gateway errors.

    Raises:
        RetryError: When retries are exhausted
        requests.exceptions.HTTPError: On a non-retryable error status
    """
    logger.record_request()
    resp = requests.get(url, headers=HTML_HEADERS, timeout=timeout)
    if should_retry_http_status(resp.status_code):
        raise TransientHTTPError(resp.status_code, url)
    resp.raise_for_status()
    return resp.text


def absolute_url(href: str, base_url: str) -> Optional[str]:
    """Resolve a link against its page; None for non-navigable links."""
    href = (href or "").strip()
    if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
        return None
    resolved = urljoin(base_url, href)
    if urlparse(resolved).scheme not in ("http", "https"):
        return None
    return resolved


def as_dict(value: Any) -> dict:
    """A nested JSON object, or {} when the payload holds anything else."""
    return value if isinstance(value, dict) else {}


def as_text(value: Any) -> str:
    """A JSON string field, or "" for null, numbers and nested values."""
    return value if isinstance(value, str) else ""


def json_objects(items: Any) -> list:
    """Entries of a JSON array that are objects; other entries are skipped."""
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def raw_posting(
    title: str,
    url: str,
    source_key: str,
    organization: str = "",
    location: str = "",
    city: str = "",
    country: str = "",
    description: str = "",
    contract_hint: str = "",
    salary: Optional[str] = None,
    start_date: Optional[str] = None,
) -> dict:
    """Build the raw posting dict every probe returns."""
    return {
        "title": title,
        "organization": organization,
        "location": location,
        "city": city,
        "country": country,
        "description": description,
        "url": url,
        "source_key": source_key,
        "contract_hint": contract_hint,
        "salary": salary,
        "start_date": start_date,
    }
