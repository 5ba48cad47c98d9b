"""
Store operations used by discovery, harvest and liveness runs.

Reads are filtered queries over organizations and jobs; writes are limited
to discovered identity fields, run records, and harvested jobs (see dedupe).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .database import CrawlRun, JobPosting, Organization, STATUS_LIVE, utcnow
from .logger import get_logger
from .normalize import canonical_url

logger = get_logger()


def _page(query, offset: int = 0, limit: Optional[int] = None):
    query = query.order_by(Organization.id)
    if offset:
        query = query.offset(offset)
    if limit:
        query = query.limit(limit)
    return query


def _by_country(query, country: Optional[str]):
    if country:
        query = query.filter(Organization.country_code == country.upper())
    return query


def organizations_for_ats_discovery(
    session: Session,
    country: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
    force: bool = False,
) -> List[Organization]:
    """Organizations without a confirmed ATS (all of them when force is set)."""
    query = session.query(Organization)
    if not force:
        query = query.filter(Organization.ats_platform.is_(None))
    return _page(_by_country(query, country), offset, limit).all()


def organizations_for_website_discovery(
    session: Session,
    country: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
    force: bool = False,
) -> List[Organization]:
    """Organizations with no known website (all of them when force is set)."""
    query = session.query(Organization)
    if not force:
        query = query.filter(Organization.website.is_(None))
    return _page(_by_country(query, country), offset, limit).all()


def organizations_with_confirmed_ats(
    session: Session,
    platform: Optional[str] = None,
    country: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> List[Organization]:
    query = session.query(Organization).filter(
        Organization.ats_platform.isnot(None),
        Organization.ats_slug.isnot(None),
    )
    if platform:
        query = query.filter(Organization.ats_platform == platform.lower())
    return _page(_by_country(query, country), offset, limit).all()


def organizations_in_network(session: Session, network: str) -> List[Organization]:
    return _page(session.query(Organization).filter(Organization.network_group == network)).all()


def organizations_with_career_pages(
    session: Session,
    country: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> List[Organization]:
    """
    Organizations whose only known surface is a career page.

    Pages with a confirmed ATS are harvested through the probe instead, and
    pages fingerprinted with a vendor we cannot read are skipped. BambooHR
    pages stay in because the page itself links the readable embed.
    """
    query = session.query(Organization).filter(
        Organization.career_page_url.isnot(None),
        Organization.ats_platform.is_(None),
        or_(Organization.ats_detected.is_(None), Organization.ats_detected == "bamboohr"),
    )
    return _page(_by_country(query, country), offset, limit).all()


def live_harvested_jobs(session: Session) -> List[JobPosting]:
    """Live, harvested jobs that carry a source URL, oldest first."""
    return (
        session.query(JobPosting)
        .filter(
            JobPosting.status == STATUS_LIVE,
            JobPosting.is_harvested.is_(True),
            JobPosting.source_url.isnot(None),
            JobPosting.source_url != "",
        )
        .order_by(JobPosting.id)
        .all()
    )


def find_job_by_hash(session: Session, content_hash: str) -> Optional[JobPosting]:
    return session.query(JobPosting).filter_by(content_hash=content_hash).first()


def save_confirmed_ats(
    session: Session,
    organization: Organization,
    platform: str,
    slug: str,
    force: bool = False,
    now: Optional[datetime] = None,
) -> bool:
    """
    Record a verified platform + slug pair.

    An existing, different pair is only replaced when force is set.
    Returns True when the organization was updated.
    """
    current = (organization.ats_platform, organization.ats_slug)
    if organization.ats_platform and current != (platform, slug) and not force:
        logger.info(
            "Keeping existing confirmed ATS",
            org=organization.name, existing=f"{current[0]}/{current[1]}", found=f"{platform}/{slug}",
        )
        return False

    organization.ats_platform = platform
    organization.ats_slug = slug
    organization.ats_discovered_at = now or utcnow()
    session.commit()
    return True


def save_detected_signature(session: Session, organization: Organization, vendor: str) -> bool:
    """Tag a vendor seen in page content; never touches a confirmed pair."""
    if organization.ats_platform:
        return False
    organization.ats_detected = vendor
    session.commit()
    return True


def save_website(
    session: Session,
    organization: Organization,
    website: str,
    career_page_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    organization.website = website
    if career_page_url:
        organization.career_page_url = canonical_url(career_page_url)
    organization.website_discovered_at = now or utcnow()
    session.commit()


def record_run(
    session: Session,
    run_type: str,
    started_at: datetime,
    completed_at: Optional[datetime] = None,
    errors: Optional[List[str]] = None,
    source_results: Optional[List[Dict[str, Any]]] = None,
    **counters: int,
) -> CrawlRun:
    """Append one run record. Counters are CrawlRun integer columns."""
    completed_at = completed_at or utcnow()
    run = CrawlRun(
        run_type=run_type,
        started_at=started_at,
        completed_at=completed_at,
        duration_ms=int((completed_at - started_at).total_seconds() * 1000),
        errors=list(errors or []),
        source_results=list(source_results or []),
        **counters,
    )
    session.add(run)
    session.commit()
    return run
