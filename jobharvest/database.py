"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for organizations, harvested jobs and run records.
"""

from datetime import datetime, timezone
from pathlib import Path
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()

# Job status values
STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_LIVE = "live"
STATUS_CORRECTION_NEEDED = "correction_needed"
STATUS_TAKEN_DOWN = "taken_down"
JOB_STATUSES = (
    STATUS_PENDING,
    STATUS_APPROVED,
    STATUS_LIVE,
    STATUS_CORRECTION_NEEDED,
    STATUS_TAKEN_DOWN,
)

RUN_HARVEST = "harvest"
RUN_LIVENESS = "liveness-check"


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Organization(Base):
    """A school. Seeded externally; discovery only fills in its hiring surfaces."""

    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True)
    city = Column(String)
    country = Column(String, nullable=False, default="")
    country_code = Column(String(2), nullable=False, default="")
    region = Column(String, nullable=False, default="")
    network_group = Column(String)

    website = Column(String)
    career_page_url = Column(String)
    # Confirmed pair: set together by a probe that passed verification
    ats_platform = Column(String)
    ats_slug = Column(String)
    # Weaker tag inferred from page content only
    ats_detected = Column(String)

    ats_discovered_at = Column(DateTime)
    website_discovered_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Organization {self.id} {self.name!r}>"


class JobPosting(Base):
    """A harvested job in the canonical shape."""

    __tablename__ = "job_postings"

    id = Column(Integer, primary_key=True)
    admin_id = Column(String, nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"))
    organization_name = Column(String, nullable=False)

    title = Column(String, nullable=False)
    city = Column(String, nullable=False)
    country = Column(String, nullable=False)
    country_code = Column(String(2), nullable=False)
    region = Column(String, nullable=False)
    category = Column(String, nullable=False)
    contract_type = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    application_url = Column(String, nullable=False)
    salary = Column(String)
    start_date = Column(String, nullable=False, default="TBD")

    status = Column(String, nullable=False, default=STATUS_LIVE)
    admin_notes = Column(Text)

    source_url = Column(String)
    source_key = Column(String)
    content_hash = Column(String(64), nullable=False)
    is_harvested = Column(Boolean, nullable=False, default=True)
    harvested_at = Column(DateTime)
    published_at = Column(DateTime)
    last_checked_at = Column(DateTime)
    failure_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("ix_job_postings_content_hash", "content_hash", unique=True),
        Index("ix_job_postings_status_harvested", "status", "is_harvested"),
    )

    def __repr__(self):
        return f"<JobPosting {self.id} {self.title!r} ({self.status})>"


class CrawlRun(Base):
    """Summary of one harvest or liveness invocation. Append-only."""

    __tablename__ = "crawl_runs"

    id = Column(Integer, primary_key=True)
    run_type = Column(String, nullable=False)
    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=False)
    duration_ms = Column(Integer, nullable=False, default=0)

    jobs_found = Column(Integer, nullable=False, default=0)
    jobs_new = Column(Integer, nullable=False, default=0)
    jobs_skipped = Column(Integer, nullable=False, default=0)

    checked = Column(Integer, nullable=False, default=0)
    still_live = Column(Integer, nullable=False, default=0)
    taken_down = Column(Integer, nullable=False, default=0)
    failed_checks = Column(Integer, nullable=False, default=0)

    errors = Column(JSON, nullable=False, default=list)
    source_results = Column(JSON, nullable=False, default=list)


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()
