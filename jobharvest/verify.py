"""
Identity verification for probed candidates.

A slug that answers on a platform may belong to an unrelated employer that
happens to share the name. A candidate is only accepted when a significant
word of the school's name appears on the platform's public board page.
"""

import re
from typing import List
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from .logger import get_logger
from .lookups import SCHOOL_VOCABULARY, SELF_VERIFYING_SUFFIXES, VERIFY_STOP_WORDS
from .scrapers import get_probe
from .scrapers.common import PROBE_TIMEOUT, fetch_text

logger = get_logger()

MIN_SIGNIFICANT_LENGTH = 4

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def significant_words(name: str) -> List[str]:
    """Words of the name longer than three characters that are not generic."""
    words = _NON_ALNUM.sub("", (name or "").lower()).split()
    return [w for w in words if len(w) >= MIN_SIGNIFICANT_LENGTH and w not in VERIFY_STOP_WORDS]


def page_identity(html: str) -> str:
    """Lowercased employer name shown on a board page.

    Combines <title>, a company-name h1 (or the first h1) and og:site_name.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    parts = []

    title = soup.find("title")
    if title and title.get_text(strip=True):
        parts.append(title.get_text(" ", strip=True))

    h1 = soup.find("h1", class_=re.compile("company", re.I)) or soup.find("h1")
    if h1 and h1.get_text(strip=True):
        parts.append(h1.get_text(" ", strip=True))

    site_name = soup.find("meta", attrs={"property": "og:site_name"})
    if site_name and site_name.get("content"):
        parts.append(site_name["content"])

    return " ".join(parts).lower()


def name_matches(text: str, org_name: str) -> bool:
    """True when at least one significant word of org_name occurs in text."""
    words = significant_words(org_name)
    if not words:
        return False
    text = (text or "").lower()
    return any(w in text for w in words)


def verify_candidate(
    platform: str,
    slug: str,
    org_name: str,
    timeout: float = PROBE_TIMEOUT,
) -> bool:
    """
    Confirm that a platform slug belongs to the organization.

    Names with no significant words cannot be verified and are rejected.
    """
    if not significant_words(org_name):
        logger.debug("Organization name too generic to verify", org=org_name)
        return False

    module = get_probe(platform)
    if module is None:
        return False

    html = fetch_text(module.board_url(slug), platform, timeout=timeout)
    if html is None:
        return False

    identity = page_identity(html)
    accepted = name_matches(identity, org_name)
    logger.debug(
        "Verified candidate" if accepted else "Rejected candidate",
        platform=platform, slug=slug, org=org_name, page=identity[:120],
    )
    return accepted


def is_self_verifying_domain(url: str) -> bool:
    """Locally scoped educational suffixes (ac., edu., sch., k12., .school)."""
    host = urlparse(url).netloc or url
    host = host.lower().split(":")[0]
    # "ac." style entries match a whole inner label; ".edu" style entries end the host
    padded = f".{host}"
    for suffix in SELF_VERIFYING_SUFFIXES:
        if suffix.startswith("."):
            if host.endswith(suffix):
                return True
        elif f".{suffix}" in padded:
            return True
    return False


def looks_like_school_site(html: str, name: str) -> bool:
    """Homepage check for generic domains (.com, .org).

    The page must use school vocabulary, and mention a significant word of
    the name when the name has any.
    """
    lower = (html or "").lower()
    if not any(word in lower for word in SCHOOL_VOCABULARY):
        return False
    words = significant_words(name)
    return not words or any(w in lower for w in words)
