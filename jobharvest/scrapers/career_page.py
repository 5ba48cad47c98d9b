"""
School career page extraction.

Career pages have no shared structure, so postings are pulled out with
heuristics. Pages that embed a known ATS are handed to that platform's
probe instead, since its structured data is always better than scraped text.
"""

import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ..logger import get_logger
from ..lookups import JOB_TITLE_KEYWORDS, NAVIGATION_TEXT
from . import get_probe
from .common import PAGE_TIMEOUT, absolute_url, fetch_text, raw_posting

logger = get_logger()

PLATFORM = "career-page"

ANCHOR_TEXT_MIN, ANCHOR_TEXT_MAX = 5, 120
HEADING_TEXT_MIN, HEADING_TEXT_MAX = 5, 100
HEADING_TAGS = ["strong", "b", "h1", "h2", "h3", "h4", "h5", "h6", "span"]


def _patterns(*patterns: str) -> tuple:
    return tuple(re.compile(p, re.I) for p in patterns)


# First vendor whose fingerprint appears wins; order matters
ATS_SIGNATURES = (
    ("workday", _patterns(r"myworkdayjobs\.com", r"wd\d+\.myworkdayjobs", r"workday\.com/wday")),
    ("icims", _patterns(r"icims\.com")),
    ("taleo", _patterns(r"taleo\.net", r"oraclecloudhcm\.com", r"talent\.oracle")),
    ("successfactors", _patterns(r"successfactors\.com", r"sap\.com.*careers")),
    ("bamboohr", _patterns(r"bamboohr\.com")),
    ("jobvite", _patterns(r"jobvite\.com")),
    ("recruitee", _patterns(r"recruitee\.com")),
    ("greenhouse", _patterns(r"boards\.greenhouse\.io", r"greenhouse\.io/embed")),
    ("lever", _patterns(r"jobs\.lever\.co", r"lever\.co/embed")),
    ("workable", _patterns(r"apply\.workable\.com", r"workable\.com/embed")),
    ("pageup", _patterns(r"pageuppeople\.com", r"pageup\.com")),
    ("smartrecruiters", _patterns(r"smartrecruiters\.com/embed", r"jobs\.smartrecruiters\.com")),
    ("teamtailor", _patterns(r"teamtailor\.com", r"jobs\.teamtailor")),
    ("breezy", _patterns(r"breezy\.hr")),
    ("jazz", _patterns(r"resumatorcdn\.com", r"applytojob\.com")),
    ("rippling", _patterns(r"rippling\.com/job")),
    ("comeet", _patterns(r"comeet\.co")),
    ("frontline", _patterns(r"frontlineeducation\.com", r"applitrack\.com", r"edjoin\.org")),
    ("veracross", _patterns(r"veracross\.com")),
    ("schoolspring", _patterns(r"schoolspring\.com")),
)


def detect_ats(html: str) -> Optional[str]:
    """Name of the first ATS vendor fingerprinted in the page, or None."""
    if not html:
        return None
    for name, patterns in ATS_SIGNATURES:
        if any(p.search(html) for p in patterns):
            return name
    return None


def _clean_text(text: str) -> str:
    return " ".join(text.split())


class JobExtractor:
    """Turns a career page into raw postings (title + url at minimum)."""

    def extract(self, html: str, base_url: str) -> List[Dict[str, Any]]:
        raise NotImplementedError


class HeuristicExtractor(JobExtractor):
    """
    Keyword heuristics over the parsed page.

    Pass one keeps links whose text looks like a job title. Pass two keeps
    list items and table rows whose heading looks like a job title, paired
    with the first link in the same block.
    """

    def extract(self, html: str, base_url: str) -> List[Dict[str, Any]]:
        soup = BeautifulSoup(html or "", "html.parser")
        seen = set()
        postings = []

        def add(title: str, href: str):
            url = absolute_url(href, base_url)
            if url is None or url.lower() in seen:
                return
            seen.add(url.lower())
            postings.append(raw_posting(title=title, url=url, source_key=""))

        for a in soup.find_all("a", href=True):
            text = _clean_text(a.get_text(" ", strip=True))
            if not ANCHOR_TEXT_MIN <= len(text) <= ANCHOR_TEXT_MAX:
                continue
            if not JOB_TITLE_KEYWORDS.search(text) or NAVIGATION_TEXT.match(text):
                continue
            add(text, a["href"])

        for block in soup.find_all(["li", "tr"]):
            if not JOB_TITLE_KEYWORDS.search(block.get_text(" ", strip=True)):
                continue
            title = self._block_title(block)
            link = block.find("a", href=True)
            if title and link is not None:
                add(title, link["href"])

        return postings

    @staticmethod
    def _block_title(block) -> Optional[str]:
        for heading in block.find_all(HEADING_TAGS):
            text = _clean_text(heading.get_text(" ", strip=True))
            if HEADING_TEXT_MIN <= len(text) <= HEADING_TEXT_MAX:
                return text if JOB_TITLE_KEYWORDS.search(text) else None
        return None


def extract_jobs_from_page(
    url: str,
    extractor: Optional[JobExtractor] = None,
    timeout: float = PAGE_TIMEOUT,
) -> Optional[List[Dict[str, Any]]]:
    """
    Postings from a school career page.

    Returns None when the page itself cannot be fetched. An embedded ATS
    with a probe and a readable slug is probed directly; an embedded ATS
    without a probe yields no postings.
    """
    html = fetch_text(url, PLATFORM, timeout=timeout)
    if html is None:
        return None

    vendor = detect_ats(html)
    if vendor:
        module = get_probe(vendor)
        if module is None:
            logger.debug("Career page uses an ATS without a probe", url=url, ats=vendor)
            return []
        slug = module.slug_from_html(html)
        if slug:
            postings = module.probe(slug, timeout=timeout)
            if postings:
                logger.debug("Career page deferred to ATS probe", url=url, ats=vendor, slug=slug)
                return postings

    return (extractor or HeuristicExtractor()).extract(html, url)
