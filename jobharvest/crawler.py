"""
Harvest orchestration.

One harvest run walks every configured source in turn: paginated job
boards, organizations with a confirmed ATS, then organizations known only by
a career page. Each posting is validated, normalized and deduplicated
inline. Failures are recorded per item or per source and never abort the
run; only missing configuration does.
"""

import hashlib
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import Settings
from .database import Organization, RUN_HARVEST, utcnow
from .dedupe import NEW, ingest_job
from .logger import get_logger
from .normalize import normalize_posting
from .retry import RetryError
from .schema import validate_posting
from .scrapers import JOB_BOARDS, BoardSource, get_probe
from .scrapers.career_page import JobExtractor, extract_jobs_from_page
from .scrapers.common import fetch_with_retry
from .storage import (
    organizations_with_career_pages,
    organizations_with_confirmed_ats,
    record_run,
)
from .throttle import Throttle

logger = get_logger()

ATS_SOURCE = "ats-platforms"
CAREER_PAGE_SOURCE = "school-career-pages"


def _new_result(source: str) -> Dict[str, Any]:
    return {
        "source": source,
        "jobs_found": 0,
        "jobs_new": 0,
        "jobs_skipped": 0,
        "errors": [],
        "duration_ms": 0,
    }


def _finish(result: Dict[str, Any], started: float) -> Dict[str, Any]:
    result["duration_ms"] = int((time.monotonic() - started) * 1000)
    logger.info(
        f"{result['source']}: {result['jobs_new']} new, {result['jobs_skipped']} skipped, "
        f"{len(result['errors'])} errors",
        found=result["jobs_found"], duration_ms=result["duration_ms"],
    )
    return result


def _ingest_postings(
    session: Session,
    postings: Iterable[Dict[str, Any]],
    result: Dict[str, Any],
    settings: Settings,
    admin_id: str,
    dry_run: bool,
    seen: Set[str],
    organization: Optional[Organization] = None,
) -> None:
    where = organization.name if organization is not None else result["source"]
    for raw in postings:
        title = raw.get("title") or "(untitled)"
        errors = validate_posting(raw)
        if errors:
            result["errors"].append(f'Invalid posting "{title}" at {where}: {"; ".join(errors)}')
            continue

        try:
            job = normalize_posting(raw, organization, settings.description_max_length)
            outcome = ingest_job(session, job, admin_id, dry_run=dry_run, seen=seen)
        except ValueError as e:
            result["errors"].append(f'Invalid posting "{title}" at {where}: {e}')
            continue
        except SQLAlchemyError as e:
            session.rollback()
            result["errors"].append(f'Insert "{title}" at {where}: {e}')
            logger.error("Insert failed", title=title, org=where, error=str(e))
            continue

        if outcome == NEW:
            result["jobs_new"] += 1
        else:
            result["jobs_skipped"] += 1


def crawl_board(
    session: Session,
    board: BoardSource,
    settings: Settings,
    admin_id: str,
    max_pages: Optional[int] = None,
    dry_run: bool = False,
    throttle: Optional[Throttle] = None,
    seen: Optional[Set[str]] = None,
) -> Dict[str, Any]:
    """
    Crawl a paginated job board page by page.

    Pagination stops at the first page that fails to fetch (recorded as an
    error) or that yields no postings (end of results).
    """
    started = time.monotonic()
    result = _new_result(board.id)
    seen = set() if seen is None else seen
    throttle = throttle or Throttle(settings.page_delay)
    pages = max_pages or board.max_pages

    for page in range(1, pages + 1):
        if page > 1:
            throttle.wait()
        url = board.page_url(page)
        logger.info(f"Fetching {board.id} page {page}/{pages}", url=url)

        try:
            html = fetch_with_retry(url, timeout=settings.fetch_timeout)
        except (RetryError, requests.exceptions.RequestException) as e:
            result["errors"].append(f"Page {page}: {e}")
            logger.warning("Page fetch failed, stopping pagination", source=board.id, page=page, error=str(e))
            break

        try:
            postings = board.parse(html, board.base_url)
        except Exception as e:
            result["errors"].append(f"Page {page}: unreadable listing ({e})")
            logger.warning("Page parse failed, stopping pagination", source=board.id, page=page, error=str(e))
            break
        if not postings:
            logger.info("No more postings, stopping pagination", source=board.id, page=page)
            break

        result["jobs_found"] += len(postings)
        _ingest_postings(session, postings, result, settings, admin_id, dry_run, seen)

    return _finish(result, started)


def crawl_ats_organizations(
    session: Session,
    settings: Settings,
    admin_id: str,
    platform: Optional[str] = None,
    country: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
    dry_run: bool = False,
    throttle: Optional[Throttle] = None,
    seen: Optional[Set[str]] = None,
) -> Dict[str, Any]:
    """Harvest every organization with a confirmed platform + slug pair."""
    started = time.monotonic()
    result = _new_result(ATS_SOURCE)
    seen = set() if seen is None else seen
    throttle = throttle or Throttle(settings.probe_delay)

    organizations = organizations_with_confirmed_ats(session, platform, country, offset, limit)
    logger.info(f"Found {len(organizations)} organizations with a confirmed ATS")

    for org in throttle.spaced(organizations):
        module = get_probe(org.ats_platform)
        if module is None:
            result["errors"].append(f"{org.name}: no probe for platform {org.ats_platform}")
            continue

        try:
            postings = module.probe(org.ats_slug, timeout=settings.probe_timeout)
        except Exception as e:
            result["errors"].append(f"{org.name}: unreadable response from {org.ats_platform}/{org.ats_slug} ({e})")
            logger.warning("Probe raised", org=org.name, platform=org.ats_platform, error=str(e))
            continue
        if postings is None:
            result["errors"].append(f"{org.name}: failed to fetch from {org.ats_platform}/{org.ats_slug}")
            continue

        result["jobs_found"] += len(postings)
        _ingest_postings(session, postings, result, settings, admin_id, dry_run, seen, organization=org)

    return _finish(result, started)


def career_page_source_key(organization: Organization, url: str) -> str:
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:12]
    return f"career-page-{organization.slug}-{digest}"


def crawl_career_pages(
    session: Session,
    settings: Settings,
    admin_id: str,
    country: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
    dry_run: bool = False,
    throttle: Optional[Throttle] = None,
    extractor: Optional[JobExtractor] = None,
    seen: Optional[Set[str]] = None,
) -> Dict[str, Any]:
    """Harvest organizations known only by a career page."""
    started = time.monotonic()
    result = _new_result(CAREER_PAGE_SOURCE)
    seen = set() if seen is None else seen
    throttle = throttle or Throttle(settings.org_delay)

    organizations = organizations_with_career_pages(session, country, offset, limit)
    logger.info(f"Found {len(organizations)} organizations with crawlable career pages")

    for org in throttle.spaced(organizations):
        try:
            postings = extract_jobs_from_page(org.career_page_url, extractor, timeout=settings.fetch_timeout)
        except Exception as e:
            result["errors"].append(f"{org.name}: failed to read career page {org.career_page_url} ({e})")
            logger.warning("Career page extraction raised", org=org.name, error=str(e))
            continue
        if postings is None:
            result["errors"].append(f"{org.name}: failed to fetch career page {org.career_page_url}")
            continue
        if not postings:
            continue

        for raw in postings:
            if not raw.get("source_key"):
                raw["source_key"] = career_page_source_key(org, raw["url"])

        logger.info(f"{org.name}: {len(postings)} postings found")
        result["jobs_found"] += len(postings)
        _ingest_postings(session, postings, result, settings, admin_id, dry_run, seen, organization=org)

    return _finish(result, started)


def run_crawl(
    session: Session,
    settings: Settings,
    max_pages: Optional[int] = None,
    sources: Optional[Iterable[BoardSource]] = None,
    include_ats: bool = True,
    include_career_pages: bool = True,
    country: Optional[str] = None,
    platform: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
    extractor: Optional[JobExtractor] = None,
) -> List[Dict[str, Any]]:
    """
    Run one harvest across all sources and record a single run summary.

    Args:
        session: Database session
        settings: Runtime settings; crawler_admin_id is required
        max_pages: Page cap per job board (defaults to each board's own)
        sources: Job boards to paginate (defaults to JOB_BOARDS; pass () to skip)
        include_ats: Harvest organizations with a confirmed ATS
        include_career_pages: Harvest organizations known only by a career page
        country / platform / offset / limit: Organization filters
        dry_run: Compute everything but write nothing
        sleep: Delay function used by every throttle

    Returns:
        One result dict per source

    Raises:
        ConfigurationError: If no crawler admin id is configured
    """
    admin_id = settings.require_admin_id()
    started_at = utcnow()
    results: List[Dict[str, Any]] = []
    seen: Set[str] = set()

    logger.info("Starting harvest", dry_run=dry_run, country=country, platform=platform)

    for board in (JOB_BOARDS if sources is None else sources):
        results.append(crawl_board(
            session, board, settings, admin_id,
            max_pages=max_pages, dry_run=dry_run,
            throttle=Throttle(settings.page_delay, sleep), seen=seen,
        ))

    if include_ats:
        results.append(crawl_ats_organizations(
            session, settings, admin_id,
            platform=platform, country=country, offset=offset, limit=limit,
            dry_run=dry_run, throttle=Throttle(settings.probe_delay, sleep), seen=seen,
        ))

    if include_career_pages:
        results.append(crawl_career_pages(
            session, settings, admin_id,
            country=country, offset=offset, limit=limit, dry_run=dry_run,
            throttle=Throttle(settings.org_delay, sleep), extractor=extractor, seen=seen,
        ))

    totals = {
        key: sum(r[key] for r in results)
        for key in ("jobs_found", "jobs_new", "jobs_skipped")
    }
    errors = [e for r in results for e in r["errors"]]

    if dry_run:
        logger.info("Dry run complete, nothing saved", **totals, errors=len(errors))
    else:
        record_run(
            session,
            run_type=RUN_HARVEST,
            started_at=started_at,
            errors=errors,
            source_results=results,
            **totals,
        )
        logger.info("Harvest complete", **totals, errors=len(errors))

    return results
