"""
TES job board parser.

TES search pages are rendered by Next.js; the listing data is embedded in
the page as JSON inside <script id="__NEXT_DATA__">, so no HTML scraping of
the visible list is needed.
"""

import json
import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..logger import get_logger
from .common import as_dict, as_text, json_objects, raw_posting

logger = get_logger()

PLATFORM = "tes"

SOURCE_ID = "tes-international"
BASE_URL = "https://www.tes.com"
SEARCH_URL = "https://www.tes.com/jobs/search?keywords=&location=Worldwide&radius=0&jobType=International"
MAX_PAGES = 10

_ISO_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})")


def page_url(page: int, search_url: str = SEARCH_URL) -> str:
    """Search URL for a 1-based page number."""
    return search_url if page == 1 else f"{search_url}&page={page}"


def _jobs_array(next_data: dict) -> List[dict]:
    trpc = as_dict(as_dict(as_dict(next_data.get("props")).get("pageProps")).get("trpcState"))
    for query in json_objects(as_dict(trpc.get("json")).get("queries")):
        data = as_dict(as_dict(query.get("state")).get("data"))
        if isinstance(data.get("jobs"), list):
            return data["jobs"]
    return []


def _start_date(advert: Any) -> Optional[str]:
    value = as_dict(advert).get("startDate")
    if not isinstance(value, str):
        return None
    match = _ISO_DATE.match(value.strip())
    return match.group(1) if match else None


def _salary(salary: Any) -> Optional[str]:
    salary = as_dict(salary)
    for key in ("description", "range"):
        value = salary.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def parse_listing(html: str, base_url: str = BASE_URL) -> List[Dict[str, Any]]:
    """
    Raw postings from one TES search results page.

    Entries missing a title, employer or canonical URL are skipped. A page
    without embedded data yields an empty list, which ends pagination.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    script = soup.find("script", id="__NEXT_DATA__")
    if script is None or not script.string:
        logger.debug("No __NEXT_DATA__ found in page")
        return []

    try:
        next_data = json.loads(script.string)
    except ValueError as e:
        logger.warning("Failed to parse __NEXT_DATA__ JSON", error=str(e))
        return []
    if not isinstance(next_data, dict):
        return []

    postings = []
    for job in json_objects(_jobs_array(next_data)):
        title = as_text(job.get("title")).strip()
        employer = as_text(as_dict(job.get("employer")).get("name")).strip()
        canonical = as_text(job.get("canonicalUrl"))
        if not title or not employer or not canonical:
            continue

        hints = [
            h for key in ("contractTypes", "contractTerms")
            for h in (job.get(key) if isinstance(job.get(key), list) else [])
        ]
        postings.append(raw_posting(
            title=title,
            url=f"{base_url}{canonical}",
            source_key=f"tes-{job.get('id')}",
            organization=employer,
            location=as_text(job.get("displayLocation")),
            description=as_text(job.get("shortDescription")).strip(),
            contract_hint=" | ".join(str(h) for h in hints),
            salary=_salary(job.get("salary")),
            start_date=_start_date(job.get("advert")),
        ))
    return postings
