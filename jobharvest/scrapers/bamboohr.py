import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..logger import get_logger
from .common import PROBE_TIMEOUT, as_dict, as_text, fetch_json, fetch_text, json_objects, raw_posting

logger = get_logger()

PLATFORM = "bamboohr"

_SUBDOMAIN = re.compile(r"https?://([a-z0-9-]+)\.bamboohr\.com", re.I)
_RESERVED = {"www", "api", "static", "resources"}


def board_url(subdomain: str) -> str:
    return f"https://{subdomain}.bamboohr.com/careers"


def slug_from_html(html: str) -> Optional[str]:
    """BambooHR subdomain linked from a career page."""
    for match in _SUBDOMAIN.finditer(html or ""):
        subdomain = match.group(1).lower()
        if subdomain not in _RESERVED:
            return subdomain
    return None


def _from_list(subdomain: str, data: dict) -> List[Dict[str, Any]]:
    postings = []
    for job in json_objects(data["result"]):
        location = as_dict(job.get("location"))
        job_id = job.get("id")
        postings.append(raw_posting(
            title=as_text(job.get("jobOpeningName")),
            url=f"https://{subdomain}.bamboohr.com/careers/{job_id}",
            source_key=f"bamboohr-{subdomain}-{job_id}",
            city=as_text(location.get("city")),
            country=as_text(location.get("country")),
            contract_hint=as_text(job.get("employmentStatusLabel")),
        ))
    return postings


def _from_embed(subdomain: str, html: str) -> List[Dict[str, Any]]:
    soup = BeautifulSoup(html, "html.parser")
    postings = []
    for a in soup.find_all("a", href=True):
        href = a["href"]
        title = a.get_text(" ", strip=True)
        if "bamboohr.com" not in href or not title or "apply" in title.lower():
            continue
        if href.startswith("//"):
            href = f"https:{href}"
        postings.append(raw_posting(
            title=title,
            url=href,
            source_key=f"bamboohr-{subdomain}-{href.rstrip('/').rsplit('/', 1)[-1]}",
        ))
    return postings


def probe(subdomain: str, timeout: float = PROBE_TIMEOUT) -> Optional[List[Dict[str, Any]]]:
    """Openings from the public careers list, falling back to the HTML embed."""
    logger.record_probe_attempt(PLATFORM)
    data = fetch_json(f"https://{subdomain}.bamboohr.com/careers/list", PLATFORM, timeout=timeout)
    if isinstance(data, dict) and isinstance(data.get("result"), list):
        logger.record_probe_match(PLATFORM)
        return _from_list(subdomain, data)

    html = fetch_text(f"https://{subdomain}.bamboohr.com/jobs/embed2.php", PLATFORM, timeout=timeout)
    if html is None:
        return None
    logger.record_probe_match(PLATFORM)
    return _from_embed(subdomain, html)
