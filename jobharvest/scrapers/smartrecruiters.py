import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..logger import get_logger
from .common import PROBE_TIMEOUT, as_dict, as_text, fetch_json, fetch_page, json_objects, raw_posting

logger = get_logger()

PLATFORM = "smartrecruiters"

_EMBED_SLUG = re.compile(
    r"(?:jobs|careers)\.smartrecruiters\.com/(?:embed/)?([A-Za-z0-9_-]+)", re.I
)


def api_url(company_id: str) -> str:
    return f"https://api.smartrecruiters.com/v1/companies/{quote(company_id)}/postings?limit=100"


def board_url(company_id: str) -> str:
    return f"https://jobs.smartrecruiters.com/{quote(company_id)}"


def slug_from_html(html: str) -> Optional[str]:
    match = _EMBED_SLUG.search(html or "")
    return match.group(1) if match else None


def company_exists(company_id: str, timeout: float = PROBE_TIMEOUT) -> bool:
    """Check the public company page.

    The postings API answers 200 with an empty list for any identifier,
    so existence has to be proven here. Unknown companies redirect to the
    SmartRecruiters home page or render a not-found page.
    """
    resp = fetch_page(board_url(company_id), PLATFORM, timeout=timeout)
    if resp is None:
        return False
    final_url = (resp.url or "").lower()
    if company_id.lower() not in final_url and "/company/" not in final_url:
        logger.record_probe_miss(PLATFORM, "RedirectedAway")
        return False
    html = resp.text or ""
    if "smartrecruiters" not in html.lower() or "Page not found" in html:
        logger.record_probe_miss(PLATFORM, "NotFoundPage")
        return False
    return True


def probe(company_id: str, timeout: float = PROBE_TIMEOUT) -> Optional[List[Dict[str, Any]]]:
    logger.record_probe_attempt(PLATFORM)
    if not company_exists(company_id, timeout=timeout):
        return None

    data = fetch_json(api_url(company_id), PLATFORM, timeout=timeout)
    if not isinstance(data, dict) or not isinstance(data.get("content"), list):
        return None
    logger.record_probe_match(PLATFORM)

    postings = []
    for job in json_objects(data["content"]):
        location = as_dict(job.get("location"))
        job_id = job.get("id")
        postings.append(raw_posting(
            title=as_text(job.get("name")),
            url=f"{board_url(company_id)}/{job_id}",
            source_key=f"smartrecruiters-{company_id}-{job_id}",
            organization=as_text(as_dict(job.get("company")).get("name")),
            city=as_text(location.get("city")),
            country=as_text(location.get("country")),
            contract_hint=as_text(as_dict(job.get("typeOfEmployment")).get("label")),
        ))
    return postings
