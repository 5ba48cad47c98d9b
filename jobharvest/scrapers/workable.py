import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..logger import get_logger
from .common import PROBE_TIMEOUT, as_dict, as_text, fetch_json, json_objects, raw_posting

logger = get_logger()

PLATFORM = "workable"

# Empty filters: the same body the public job widget sends
SEARCH_BODY = {"query": "", "location": [], "department": [], "worktype": [], "remote": False}

_EMBED_SLUG = re.compile(r"apply\.workable\.com/(?:api/v\d+/accounts/)?([a-zA-Z0-9_-]+)", re.I)
_RESERVED = {"api", "embed", "j"}


def api_url(slug: str) -> str:
    return f"https://apply.workable.com/api/v3/accounts/{quote(slug)}/jobs"


def board_url(slug: str) -> str:
    return f"https://apply.workable.com/{quote(slug)}/"


def slug_from_html(html: str) -> Optional[str]:
    for match in _EMBED_SLUG.finditer(html or ""):
        slug = match.group(1)
        if slug.lower() not in _RESERVED:
            return slug
    return None


def probe(slug: str, timeout: float = PROBE_TIMEOUT) -> Optional[List[Dict[str, Any]]]:
    """Postings on a Workable account (POST search endpoint)."""
    logger.record_probe_attempt(PLATFORM)
    data = fetch_json(api_url(slug), PLATFORM, method="POST", payload=SEARCH_BODY, timeout=timeout)
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        return None
    logger.record_probe_match(PLATFORM)

    postings = []
    for job in json_objects(data["results"]):
        location = as_dict(job.get("location"))
        shortcode = job.get("shortcode")
        postings.append(raw_posting(
            title=as_text(job.get("title")),
            url=f"https://apply.workable.com/{slug}/j/{shortcode}/",
            source_key=f"workable-{slug}-{shortcode}",
            organization=as_text(data.get("company_title")),
            city=as_text(location.get("city")),
            country=as_text(location.get("country")),
            description=as_text(job.get("description")),
            contract_hint=as_text(job.get("employment_type")),
        ))
    return postings
