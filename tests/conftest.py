"""
Pytest configuration and shared fixtures.
"""

import json
from typing import Any, Dict, List

import pytest

from jobharvest.config import Settings
from jobharvest.database import Organization, get_session, init_database
from jobharvest.throttle import Throttle


@pytest.fixture
def db_session(tmp_path):
    """Fresh SQLite database with all tables created."""
    db_path = tmp_path / "test.db"
    init_database(db_path)
    session = get_session(db_path)
    yield session
    session.close()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with an admin id and no delays."""
    return Settings(
        database_path=tmp_path / "test.db",
        crawler_admin_id="admin-1",
        page_delay=0,
        probe_delay=0,
        org_delay=0,
        liveness_batch_delay=0,
    )


@pytest.fixture
def no_throttle() -> Throttle:
    return Throttle.disabled()


@pytest.fixture
def make_organization(db_session):
    """Factory that inserts an organization and returns it."""
    def _make(name: str = "British School of Bahrain", slug: str = None, **fields) -> Organization:
        org = Organization(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            city=fields.pop("city", "Manama"),
            country=fields.pop("country", "Bahrain"),
            country_code=fields.pop("country_code", "BH"),
            region=fields.pop("region", "middle-east"),
            **fields,
        )
        db_session.add(org)
        db_session.commit()
        return org
    return _make


@pytest.fixture
def organization(make_organization) -> Organization:
    return make_organization()


@pytest.fixture
def greenhouse_payload() -> Dict[str, Any]:
    """Greenhouse board API response with five postings."""
    titles = [
        "Primary Teacher",
        "Head of Mathematics",
        "IB Chemistry Teacher",
        "School Nurse",
        "Middle School English Teacher",
    ]
    return {
        "jobs": [
            {
                "id": 1000 + i,
                "title": title,
                "absolute_url": f"https://boards.greenhouse.io/britishschoolbahrain/jobs/{1000 + i}",
                "location": {"name": "Manama, Bahrain"},
                "content": "&lt;p&gt;Join our &amp;amp; community&lt;/p&gt;",
            }
            for i, title in enumerate(titles)
        ],
        "meta": {"total": len(titles)},
    }


@pytest.fixture
def sample_raw_posting() -> Dict[str, Any]:
    """Raw posting as a probe returns it."""
    return {
        "title": "Year 3 Class Teacher",
        "organization": "Dubai College",
        "location": "Dubai, United Arab Emirates",
        "city": "",
        "country": "",
        "description": "<p>We are looking for an <b>outstanding</b> teacher.</p>",
        "url": "https://example.org/jobs/42",
        "source_key": "greenhouse-dubaicollege-42",
        "contract_hint": "Full Time",
        "salary": None,
        "start_date": None,
    }


def _tes_job(i: int) -> Dict[str, Any]:
    return {
        "id": 5000 + i,
        "title": f"Teacher of Science {i}",
        "employer": {"name": f"International School {i}"},
        "displayLocation": "Bangkok, Thailand",
        "shortDescription": "Teach IGCSE and IB science.",
        "canonicalUrl": f"/jobs/vacancy/teacher-of-science-{i}",
        "contractTypes": ["Full Time"],
        "contractTerms": ["Permanent"],
        "salary": {"description": "Competitive"},
        "advert": {"startDate": "2026-08-01T00:00:00Z"},
    }


def tes_listing_html(jobs: List[Dict[str, Any]]) -> str:
    """TES search page with the job list embedded as __NEXT_DATA__."""
    next_data = {
        "props": {"pageProps": {"trpcState": {"json": {"queries": [
            {"state": {"data": {"facets": []}}},
            {"state": {"data": {"jobs": jobs, "total": len(jobs)}}},
        ]}}}}
    }
    return (
        "<html><head><title>Jobs</title></head><body>"
        f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(next_data)}</script>'
        "</body></html>"
    )


@pytest.fixture
def tes_page() -> str:
    return tes_listing_html([_tes_job(1), _tes_job(2)])


@pytest.fixture
def tes_empty_page() -> str:
    return tes_listing_html([])


@pytest.fixture
def tes_listing():
    """Builder for TES pages: tes_listing(n) holds jobs 1..n."""
    return lambda count: tes_listing_html([_tes_job(i) for i in range(1, count + 1)])
