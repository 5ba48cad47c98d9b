"""
Workday probe.

Workday is multi-tenant: a board is addressed by tenant, career-site id and
the numbered data-centre instance (wd1..wd5) the tenant lives on. A confirmed
board is stored as a single slug "tenant/site/instance".
"""

import re
from typing import Any, Dict, Iterator, List, Optional

from ..logger import get_logger
from ..search import grid
from .common import PROBE_TIMEOUT, as_dict, as_text, fetch_json, json_objects, raw_posting

logger = get_logger()

PLATFORM = "workday"

INSTANCES = (1, 2, 3, 4, 5)
PAGE_SIZE = 20
MAX_PAGES = 10

_EMBED = re.compile(
    r"([a-z0-9-]+)\.wd(\d+)\.myworkdayjobs\.com/(?:[a-z]{2}-[A-Z]{2}/)?([A-Za-z0-9_-]+)",
    re.I,
)


def site_names(tenant: str) -> List[str]:
    """Career-site ids to try for a tenant, most common first."""
    return [tenant, "External", "external", f"{tenant}_External", f"{tenant}_external"]


def make_slug(tenant: str, site: str, instance: int) -> str:
    return f"{tenant}/{site}/{instance}"


def parse_slug(slug: str) -> tuple[str, str, int]:
    """
    Split a stored slug into (tenant, site, instance).

    Raises:
        ValueError: If the slug is not of the form tenant/site/instance
    """
    parts = slug.split("/")
    if len(parts) != 3 or not parts[2].isdigit():
        raise ValueError(f"Invalid Workday slug: {slug!r}")
    return parts[0], parts[1], int(parts[2])


def candidate_slugs(tenant: str, site: Optional[str] = None) -> Iterator[str]:
    """Every tenant/site/instance combination in probe order (instance outermost).

    A known site id pins the site and only the instance is searched.
    """
    sites = [site] if site else site_names(tenant)
    for instance, site_id in grid(INSTANCES, sites):
        yield make_slug(tenant, site_id, instance)


def _host(tenant: str, instance: int) -> str:
    return f"https://{tenant}.wd{instance}.myworkdayjobs.com"


def api_url(slug: str) -> str:
    tenant, site, instance = parse_slug(slug)
    return f"{_host(tenant, instance)}/wday/cxs/{tenant}/{site}/jobs"


def board_url(slug: str) -> str:
    tenant, site, instance = parse_slug(slug)
    return f"{_host(tenant, instance)}/{site}"


def slug_from_html(html: str) -> Optional[str]:
    match = _EMBED.search(html or "")
    if not match:
        return None
    tenant, instance, site = match.group(1), match.group(2), match.group(3)
    if site.lower() == "wday":
        return None
    return make_slug(tenant.lower(), site, int(instance))


def probe(slug: str, timeout: float = PROBE_TIMEOUT) -> Optional[List[Dict[str, Any]]]:
    """
    Postings for one tenant/site/instance, or None if that board is absent.

    Pages of PAGE_SIZE are requested until the reported total is reached,
    bounded by MAX_PAGES.
    """
    try:
        tenant, site, _instance = parse_slug(slug)
    except ValueError:
        logger.debug("Skipping malformed Workday slug", slug=slug)
        return None

    logger.record_probe_attempt(PLATFORM)
    url = api_url(slug)
    postings: List[Dict[str, Any]] = []
    total = 0

    for page in range(MAX_PAGES):
        body = {"appliedFacets": {}, "limit": PAGE_SIZE, "offset": page * PAGE_SIZE, "searchText": ""}
        data = fetch_json(url, PLATFORM, method="POST", payload=body, timeout=timeout)
        if not isinstance(data, dict) or not isinstance(data.get("total"), int):
            if page == 0:
                return None
            break

        if page == 0:
            total = data["total"]
        jobs = json_objects(data.get("jobPostings"))
        for job in jobs:
            path = as_text(job.get("externalPath"))
            postings.append(raw_posting(
                title=as_text(job.get("title")),
                url=f"{board_url(slug)}{path}",
                source_key=f"workday-{tenant}-{path.rsplit('/', 1)[-1] or len(postings)}",
                location=as_text(job.get("locationsText")),
                contract_hint=as_text(job.get("timeType")),
            ))

        if not jobs or len(postings) >= total:
            break

    logger.record_probe_match(PLATFORM)
    return postings
