"""
Liveness monitoring for harvested jobs.

Every live, harvested job is re-checked against its source URL. A job whose
source fails enough consecutive checks is taken down automatically with a
note explaining why. Nothing here ever puts a job back live.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .config import Settings
from .database import JobPosting, RUN_LIVENESS, STATUS_LIVE, STATUS_TAKEN_DOWN, utcnow
from .logger import get_logger
from .scrapers.common import HTML_HEADERS
from .storage import live_harvested_jobs, record_run
from .throttle import Throttle

logger = get_logger()

STILL_LIVE = "still_live"
FAILED = "failed"
TAKEN_DOWN = "taken_down"

Checker = Callable[[str, float, str], Tuple[bool, int]]


def check_url(url: str, timeout: float = 10.0, method: str = "HEAD") -> Tuple[bool, int]:
    """
    Request a source URL, following redirects.

    Returns:
        (alive, status_code); any transport failure is (False, 0)
    """
    logger.record_request()
    try:
        resp = requests.request(method, url, headers=HTML_HEADERS, timeout=timeout, allow_redirects=True)
    except requests.exceptions.RequestException as e:
        logger.debug("Liveness check failed", url=url, error=type(e).__name__)
        return False, 0
    return resp.ok, resp.status_code


def takedown_note(status_code: int, failures: int, now: datetime) -> str:
    return (
        f"Auto taken down: source URL returned {status_code or 'timeout'} "
        f"for {failures} consecutive checks (last: {now.isoformat()}Z)"
    )


def apply_check_result(
    job: JobPosting,
    alive: bool,
    status_code: int,
    threshold: int,
    now: Optional[datetime] = None,
) -> str:
    """
    Fold one check result into a job.

    A success resets the failure counter. A failure increments it, and
    reaching the threshold takes the job down. Only live jobs move; a job in
    any other status is left as it is.

    Returns:
        "still_live", "failed" or "taken_down"
    """
    now = now or utcnow()
    if job.status != STATUS_LIVE:
        return TAKEN_DOWN if job.status == STATUS_TAKEN_DOWN else FAILED

    job.last_checked_at = now
    if alive:
        job.failure_count = 0
        return STILL_LIVE

    job.failure_count = (job.failure_count or 0) + 1
    if job.failure_count >= threshold:
        job.status = STATUS_TAKEN_DOWN
        job.admin_notes = takedown_note(status_code, job.failure_count, now)
        return TAKEN_DOWN
    return FAILED


def _batches(items: List[JobPosting], size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


def run_stale_check(
    session: Session,
    settings: Settings,
    batch_size: Optional[int] = None,
    batch_delay: Optional[float] = None,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
    checker: Checker = check_url,
) -> Dict[str, object]:
    """
    Re-check every live harvested job and take down the ones that are gone.

    URLs in a batch are checked concurrently; database updates happen here,
    on the calling thread, once the whole batch has answered.

    Args:
        session: Database session
        settings: Runtime settings (timeout, method, threshold, batching)
        batch_size: Override for settings.liveness_batch_size
        batch_delay: Override for settings.liveness_batch_delay
        dry_run: Compute outcomes but roll every change back
        sleep: Delay function used between batches
        checker: Callable (url, timeout, method) -> (alive, status_code)

    Returns:
        Summary with checked, still_live, taken_down, failed_checks, errors
        and duration_ms
    """
    batch_size = max(1, batch_size or settings.liveness_batch_size)
    throttle = Throttle(settings.liveness_batch_delay if batch_delay is None else batch_delay, sleep)
    started_at = utcnow()
    started = time.monotonic()

    summary: Dict[str, object] = {"checked": 0, "still_live": 0, "taken_down": 0, "failed_checks": 0}
    errors: List[str] = []

    jobs = live_harvested_jobs(session)
    logger.info(f"Found {len(jobs)} live harvested jobs to check", dry_run=dry_run)

    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for batch in throttle.spaced(list(_batches(jobs, batch_size))):
            targets = [(job.id, job.title, job.source_url) for job in batch]
            futures = [
                pool.submit(checker, url, settings.liveness_timeout, settings.liveness_method)
                for _, _, url in targets
            ]

            for job, (job_id, title, _), future in zip(batch, targets, futures):
                summary["checked"] += 1
                try:
                    alive, status_code = future.result()
                except Exception as e:
                    errors.append(f"Check failed for job {job_id}: {e}")
                    logger.error("Liveness check raised", job_id=job_id, error=str(e))
                    continue

                outcome = apply_check_result(
                    job, alive, status_code, settings.liveness_failure_threshold, utcnow()
                )
                if outcome == STILL_LIVE:
                    summary["still_live"] += 1
                elif outcome == TAKEN_DOWN:
                    summary["taken_down"] += 1
                    logger.info("Taken down", job_id=job_id, title=title, status=status_code)
                else:
                    summary["failed_checks"] += 1
                    logger.debug("Check failed", job_id=job_id, title=title, status=status_code,
                                 failures=job.failure_count)

            if dry_run:
                session.rollback()
                continue
            try:
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                errors.extend(f"Check failed for job {job_id}: {e}" for job_id, _, _ in targets)
                logger.error("Batch update failed", error=str(e))

    summary["errors"] = errors
    summary["duration_ms"] = int((time.monotonic() - started) * 1000)

    if not dry_run:
        record_run(
            session,
            run_type=RUN_LIVENESS,
            started_at=started_at,
            errors=errors,
            checked=summary["checked"],
            still_live=summary["still_live"],
            taken_down=summary["taken_down"],
            failed_checks=summary["failed_checks"],
        )

    logger.info(
        f"Stale check done: {summary['still_live']} live, {summary['taken_down']} taken down, "
        f"{summary['failed_checks']} pending",
        duration_ms=summary["duration_ms"], errors=len(errors),
    )
    return summary
