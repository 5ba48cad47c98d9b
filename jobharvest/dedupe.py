"""
Content-hash deduplication of harvested jobs.

The hash of (title, organization, source URL) is the identity of a posting
across harvests. The unique index on job_postings.content_hash backs the
check-then-insert below when two harvests overlap.
"""

import hashlib
from datetime import datetime
from typing import Any, Dict, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .database import JobPosting, STATUS_LIVE, utcnow
from .storage import find_job_by_hash

NEW = "new"
SKIPPED = "skipped"


def compute_content_hash(title: str, organization_name: str, source_url: str) -> str:
    """sha256 hex of the trimmed, lowercased fields joined by "|"."""
    key = "|".join(
        (value or "").strip().lower() for value in (title, organization_name, source_url)
    )
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def ingest_job(
    session: Session,
    job: Dict[str, Any],
    admin_id: str,
    dry_run: bool = False,
    now: Optional[datetime] = None,
    seen: Optional[Set[str]] = None,
) -> str:
    """
    Insert a normalized job unless its content hash already exists.

    Returns "new" or "skipped". In dry-run mode the existence check still
    runs but nothing is written; pass the run's seen set so a posting
    repeated within the run is reported as skipped, as a real run would.

    Raises:
        SQLAlchemyError: On insert failures other than a duplicate hash
    """
    content_hash = compute_content_hash(job["title"], job["organization_name"], job["source_url"])
    if seen is not None and content_hash in seen:
        return SKIPPED
    if find_job_by_hash(session, content_hash) is not None:
        return SKIPPED
    if dry_run:
        if seen is not None:
            seen.add(content_hash)
        return NEW

    now = now or utcnow()
    session.add(JobPosting(
        admin_id=admin_id,
        organization_id=job.get("organization_id"),
        organization_name=job["organization_name"],
        title=job["title"],
        city=job["city"],
        country=job["country"],
        country_code=job["country_code"],
        region=job["region"],
        category=job["category"],
        contract_type=job["contract_type"],
        description=job.get("description") or "",
        application_url=job["application_url"],
        salary=job.get("salary"),
        start_date=job.get("start_date") or "TBD",
        status=STATUS_LIVE,
        source_url=job["source_url"],
        source_key=job.get("source_key"),
        content_hash=content_hash,
        is_harvested=True,
        harvested_at=now,
        published_at=now,
        failure_count=0,
    ))
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if "content_hash" not in str(e.orig):
            raise
        # Another harvest inserted the same hash between check and commit
        return SKIPPED
    if seen is not None:
        seen.add(content_hash)
    return NEW
