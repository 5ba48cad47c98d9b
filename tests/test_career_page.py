"""
Tests for scrapers/career_page.py - vendor detection and heuristic extraction.
"""

from unittest.mock import patch

import pytest

from jobharvest.scrapers.career_page import (
    HeuristicExtractor,
    JobExtractor,
    detect_ats,
    extract_jobs_from_page,
)

BASE = "https://www.bsb.edu.bh/careers"

CAREER_PAGE = """
<html><body>
  <nav>
    <a href="/about">About our teachers</a>
    <a href="/">Home</a>
  </nav>
  <h2>Current vacancies</h2>
  <a href="/careers/primary-teacher">Primary Class Teacher</a>
  <a href="/careers/PRIMARY-TEACHER">Primary Class Teacher (duplicate link)</a>
  <a href="javascript:openJob(3)">Music Teacher</a>
  <a href="mailto:hr@bsb.edu.bh">Email a teacher</a>
  <a href="#apply">Teacher</a>
  <table>
    <tr><td><strong>Secondary Science Coordinator</strong></td><td><a href="/careers/3.pdf">Details</a></td></tr>
    <tr><td><strong>Parking</strong></td><td><a href="/parking">Read</a></td></tr>
  </table>
  <ul>
    <li><span>School Counselor</span> <a href="https://apply.bsb.edu.bh/jobs/9">More</a></li>
  </ul>
</body></html>
"""


class TestDetectAts:
    """Test vendor signature detection."""

    @pytest.mark.parametrize("html,vendor", [
        ('<iframe src="https://gems.wd3.myworkdayjobs.com/External"></iframe>', "workday"),
        ('<a href="https://careers-school.icims.com/jobs">Jobs</a>', "icims"),
        ('<script src="https://boards.greenhouse.io/embed/job_board/js?for=x"></script>', "greenhouse"),
        ('<a href="https://qataracademy.bamboohr.com/careers">', "bamboohr"),
        ('<a href="https://www.applitrack.com/school/onlineapp">', "frontline"),
        ('<a href="https://jobs.smartrecruiters.com/GEMS">', "smartrecruiters"),
    ])
    def test_signatures(self, html, vendor):
        assert detect_ats(html) == vendor

    def test_first_signature_wins(self):
        html = '<a href="https://boards.greenhouse.io/x"></a><a href="https://x.wd1.myworkdayjobs.com/y"></a>'
        assert detect_ats(html) == "workday"

    def test_no_signature(self):
        assert detect_ats("<p>Send your CV to hr@school.org</p>") is None
        assert detect_ats("") is None


class TestHeuristicExtractor:
    """Test the default extractor."""

    def test_extracts_anchors_and_blocks(self):
        postings = HeuristicExtractor().extract(CAREER_PAGE, BASE)
        by_title = {p["title"]: p["url"] for p in postings}

        assert by_title["Primary Class Teacher"] == "https://www.bsb.edu.bh/careers/primary-teacher"
        assert by_title["Secondary Science Coordinator"] == "https://www.bsb.edu.bh/careers/3.pdf"
        assert by_title["School Counselor"] == "https://apply.bsb.edu.bh/jobs/9"

    def test_skips_navigation_and_non_links(self):
        titles = [p["title"] for p in HeuristicExtractor().extract(CAREER_PAGE, BASE)]
        assert "About our teachers" not in titles
        assert "Music Teacher" not in titles
        assert "Email a teacher" not in titles
        assert "Parking" not in titles

    def test_urls_deduplicated_case_insensitively(self):
        urls = [p["url"].lower() for p in HeuristicExtractor().extract(CAREER_PAGE, BASE)]
        assert len(urls) == len(set(urls))

    def test_raw_posting_shape(self):
        posting = HeuristicExtractor().extract(CAREER_PAGE, BASE)[0]
        assert posting["source_key"] == ""
        assert posting["salary"] is None
        assert set(posting) >= {"title", "url", "location", "description", "contract_hint"}

    def test_anchor_text_length_bounds(self):
        html = '<a href="/a">Tutor</a><a href="/b">TA</a>'
        postings = HeuristicExtractor().extract(html, BASE)
        assert [p["title"] for p in postings] == ["Tutor"]

    def test_no_postings(self):
        assert HeuristicExtractor().extract("<html><body>No vacancies</body></html>", BASE) == []

    def test_base_interface(self):
        with pytest.raises(NotImplementedError):
            JobExtractor().extract("", BASE)


class TestExtractJobsFromPage:
    """Test extract_jobs_from_page routing."""

    def test_fetch_failure_is_none(self):
        with patch("jobharvest.scrapers.career_page.fetch_text", return_value=None):
            assert extract_jobs_from_page(BASE) is None

    def test_plain_page_uses_extractor(self):
        with patch("jobharvest.scrapers.career_page.fetch_text", return_value=CAREER_PAGE):
            postings = extract_jobs_from_page(BASE)
        assert len(postings) == 3

    def test_vendor_without_probe_yields_nothing(self):
        html = '<a href="https://school.taleo.net/careersection/jobs">Teacher vacancies</a>'
        with patch("jobharvest.scrapers.career_page.fetch_text", return_value=html):
            assert extract_jobs_from_page(BASE) == []

    def test_defers_to_probe_when_slug_exposed(self):
        html = '<script src="https://boards.greenhouse.io/embed/job_board/js?for=bsbahrain"></script>'
        probed = [{"title": "Art Teacher", "url": "https://boards.greenhouse.io/bsbahrain/jobs/1"}]
        with patch("jobharvest.scrapers.career_page.fetch_text", return_value=html), \
                patch("jobharvest.scrapers.greenhouse.probe", return_value=probed) as probe:
            assert extract_jobs_from_page(BASE) == probed
        assert probe.call_args[0][0] == "bsbahrain"

    def test_probe_miss_falls_back_to_extractor(self):
        html = (
            '<script src="https://boards.greenhouse.io/embed/job_board/js?for=bsbahrain"></script>'
            '<a href="/careers/pe">PE Teacher (Secondary)</a>'
        )
        with patch("jobharvest.scrapers.career_page.fetch_text", return_value=html), \
                patch("jobharvest.scrapers.greenhouse.probe", return_value=None):
            postings = extract_jobs_from_page(BASE)
        assert [p["title"] for p in postings] == ["PE Teacher (Secondary)"]

    def test_custom_extractor(self):
        class Fixed(JobExtractor):
            def extract(self, html, base_url):
                return [{"title": "Fixed", "url": base_url}]

        with patch("jobharvest.scrapers.career_page.fetch_text", return_value="<html></html>"):
            assert extract_jobs_from_page(BASE, Fixed()) == [{"title": "Fixed", "url": BASE}]
