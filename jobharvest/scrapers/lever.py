import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..logger import get_logger
from .common import PROBE_TIMEOUT, as_dict, as_text, fetch_json, json_objects, raw_posting

logger = get_logger()

PLATFORM = "lever"

_EMBED_SLUG = re.compile(r"(?:jobs|api)\.lever\.co/(?:v0/postings/)?([a-zA-Z0-9_-]+)", re.I)
_RESERVED = {"embed", "v0"}


def api_url(slug: str) -> str:
    return f"https://api.lever.co/v0/postings/{quote(slug)}?mode=json"


def board_url(slug: str) -> str:
    return f"https://jobs.lever.co/{quote(slug)}"


def slug_from_html(html: str) -> Optional[str]:
    for match in _EMBED_SLUG.finditer(html or ""):
        slug = match.group(1)
        if slug.lower() not in _RESERVED:
            return slug
    return None


def probe(slug: str, timeout: float = PROBE_TIMEOUT) -> Optional[List[Dict[str, Any]]]:
    """Postings on a Lever account; the API answers with a bare list."""
    logger.record_probe_attempt(PLATFORM)
    data = fetch_json(api_url(slug), PLATFORM, timeout=timeout)
    if not isinstance(data, list):
        return None
    logger.record_probe_match(PLATFORM)

    postings = []
    for job in json_objects(data):
        categories = as_dict(job.get("categories"))
        job_id = job.get("id")
        postings.append(raw_posting(
            title=as_text(job.get("text")),
            url=as_text(job.get("hostedUrl")) or f"{board_url(slug)}/{job_id}",
            source_key=f"lever-{slug}-{job_id}",
            location=as_text(categories.get("location")),
            description=as_text(job.get("descriptionPlain")) or as_text(job.get("description")),
            contract_hint=as_text(categories.get("commitment")),
        ))
    return postings
