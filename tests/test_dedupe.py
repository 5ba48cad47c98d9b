"""
Tests for dedupe.py - content hashing and job ingestion.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from jobharvest.database import JobPosting
from jobharvest.dedupe import NEW, SKIPPED, compute_content_hash, ingest_job
from jobharvest.normalize import normalize_posting


@pytest.fixture
def job(sample_raw_posting):
    return normalize_posting(sample_raw_posting)


class TestContentHash:
    """Test compute_content_hash."""

    def test_deterministic(self):
        a = compute_content_hash("Teacher", "School", "https://x.org/1")
        b = compute_content_hash("Teacher", "School", "https://x.org/1")
        assert a == b
        assert len(a) == 64

    def test_case_and_whitespace_insensitive(self):
        a = compute_content_hash("Science Teacher", "Dubai College", "https://x.org/1")
        b = compute_content_hash("  SCIENCE teacher ", "dubai college  ", " HTTPS://X.ORG/1")
        assert a == b

    def test_fields_are_separated(self):
        """Moving text between fields changes the hash."""
        assert compute_content_hash("ab", "c", "u") != compute_content_hash("a", "bc", "u")

    def test_none_treated_as_empty(self):
        assert compute_content_hash("T", None, "u") == compute_content_hash("T", "", "u")


class TestIngestJob:
    """Test ingest_job."""

    def test_inserts_live_harvested_job(self, db_session, job):
        assert ingest_job(db_session, job, "admin-1") == NEW

        saved = db_session.query(JobPosting).one()
        assert saved.status == "live"
        assert saved.is_harvested is True
        assert saved.admin_id == "admin-1"
        assert saved.failure_count == 0
        assert saved.harvested_at is not None
        assert saved.published_at == saved.harvested_at
        assert saved.content_hash == compute_content_hash(
            job["title"], job["organization_name"], job["source_url"]
        )

    def test_second_ingest_skipped(self, db_session, job):
        assert ingest_job(db_session, job, "admin-1") == NEW
        assert ingest_job(db_session, job, "admin-1") == SKIPPED
        assert db_session.query(JobPosting).count() == 1

    def test_case_variant_is_duplicate(self, db_session, job):
        ingest_job(db_session, job, "admin-1")
        variant = dict(job, title=job["title"].upper(), organization_name=f" {job['organization_name']} ")
        assert ingest_job(db_session, variant, "admin-1") == SKIPPED

    def test_dry_run_writes_nothing(self, db_session, job):
        assert ingest_job(db_session, job, "admin-1", dry_run=True) == NEW
        assert db_session.query(JobPosting).count() == 0

    def test_dry_run_still_detects_duplicates(self, db_session, job):
        ingest_job(db_session, job, "admin-1")
        assert ingest_job(db_session, job, "admin-1", dry_run=True) == SKIPPED

    def test_dry_run_repeat_within_run_skipped(self, db_session, job):
        seen = set()
        assert ingest_job(db_session, job, "admin-1", dry_run=True, seen=seen) == NEW
        assert ingest_job(db_session, job, "admin-1", dry_run=True, seen=seen) == SKIPPED
        assert len(seen) == 1
        assert db_session.query(JobPosting).count() == 0

    def test_seen_set_filled_on_insert(self, db_session, job):
        seen = set()
        ingest_job(db_session, job, "admin-1", seen=seen)
        assert seen == {db_session.query(JobPosting).one().content_hash}

    def test_race_on_unique_hash_counts_as_skipped(self, db_session, job, monkeypatch):
        """A row inserted between the check and the commit is a duplicate, not an error."""
        ingest_job(db_session, job, "admin-1")
        monkeypatch.setattr("jobharvest.dedupe.find_job_by_hash", lambda session, h: None)

        assert ingest_job(db_session, job, "admin-1") == SKIPPED
        assert db_session.query(JobPosting).count() == 1

    def test_other_integrity_errors_propagate(self, db_session, job):
        bad = dict(job, application_url=None)
        with pytest.raises(IntegrityError):
            ingest_job(db_session, bad, "admin-1")
        assert db_session.query(JobPosting).count() == 0
