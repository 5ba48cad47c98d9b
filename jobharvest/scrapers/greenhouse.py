import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..logger import get_logger
from .common import PROBE_TIMEOUT, as_dict, as_text, fetch_json, json_objects, raw_posting

logger = get_logger()

PLATFORM = "greenhouse"

# boards.greenhouse.io/<slug>, job-boards.greenhouse.io/<slug>, embed/job_board?for=<slug>
_EMBED_SLUG = re.compile(
    r"(?:job-boards|boards)\.greenhouse\.io/(?:embed/job_board(?:/js)?\?for=)?([a-zA-Z0-9_-]+)",
    re.I,
)
_RESERVED = {"embed", "v1"}


def api_url(slug: str) -> str:
    return f"https://boards-api.greenhouse.io/v1/boards/{quote(slug)}/jobs?content=true"


def board_url(slug: str) -> str:
    return f"https://boards.greenhouse.io/{quote(slug)}"


def slug_from_html(html: str) -> Optional[str]:
    """Board slug referenced by an embedded Greenhouse widget, if any."""
    for match in _EMBED_SLUG.finditer(html or ""):
        slug = match.group(1)
        if slug.lower() not in _RESERVED:
            return slug
    return None


def probe(slug: str, timeout: float = PROBE_TIMEOUT) -> Optional[List[Dict[str, Any]]]:
    """Postings on a Greenhouse board, or None if the board does not exist.

    The API returns {"jobs": [...], "meta": {...}}; anything else is a miss.
    """
    logger.record_probe_attempt(PLATFORM)
    data = fetch_json(api_url(slug), PLATFORM, timeout=timeout)
    if not isinstance(data, dict) or not isinstance(data.get("jobs"), list):
        return None
    logger.record_probe_match(PLATFORM)

    postings = []
    for job in json_objects(data["jobs"]):
        job_id = job.get("id")
        postings.append(raw_posting(
            title=as_text(job.get("title")),
            url=as_text(job.get("absolute_url")) or f"{board_url(slug)}/jobs/{job_id}",
            source_key=f"greenhouse-{slug}-{job_id}",
            location=as_text(as_dict(job.get("location")).get("name")),
            description=as_text(job.get("content")),
        ))
    return postings
