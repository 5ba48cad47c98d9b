"""
Tests for verify.py - identity checks for probed boards and websites.
"""

from unittest.mock import patch

import pytest

from jobharvest.verify import (
    is_self_verifying_domain,
    looks_like_school_site,
    name_matches,
    page_identity,
    significant_words,
    verify_candidate,
)

BOARD_PAGE = """
<html><head>
  <title>Jobs at Dubai College</title>
  <meta property="og:site_name" content="Greenhouse">
</head><body><h1 class="company-name">Dubai College</h1></body></html>
"""


class TestSignificantWords:
    """Test significant_words."""

    def test_generic_and_short_words_dropped(self):
        assert significant_words("The British School of Bahrain") == ["british", "bahrain"]

    def test_punctuation_stripped(self):
        assert significant_words("St. Andrew's International School") == ["andrews"]

    def test_all_generic(self):
        assert significant_words("International School") == []


class TestPageIdentity:
    """Test page_identity."""

    def test_combines_title_h1_and_site_name(self):
        assert page_identity(BOARD_PAGE) == "jobs at dubai college dubai college greenhouse"

    def test_empty_page(self):
        assert page_identity("") == ""

    def test_name_matches(self):
        assert name_matches("jobs at dubai college", "Dubai College")
        assert not name_matches("jobs at acme corp", "Dubai College")
        assert not name_matches("jobs at anything", "The School")


class TestVerifyCandidate:
    """Test verify_candidate (HTTP mocked)."""

    def test_accepts_matching_board(self):
        with patch("jobharvest.verify.fetch_text", return_value=BOARD_PAGE) as fetch:
            assert verify_candidate("greenhouse", "dubaicollege", "Dubai College") is True
        assert fetch.call_args[0][0] == "https://boards.greenhouse.io/dubaicollege"

    def test_rejects_other_employer(self):
        html = "<html><head><title>Jobs at Acme Corp</title></head></html>"
        with patch("jobharvest.verify.fetch_text", return_value=html):
            assert verify_candidate("greenhouse", "dubaicollege", "Dubai College") is False

    def test_generic_name_rejected_without_fetch(self):
        with patch("jobharvest.verify.fetch_text") as fetch:
            assert verify_candidate("lever", "international-school", "International School") is False
        fetch.assert_not_called()

    def test_unreachable_board_rejected(self):
        with patch("jobharvest.verify.fetch_text", return_value=None):
            assert verify_candidate("lever", "dubaicollege", "Dubai College") is False

    def test_unknown_platform_rejected(self):
        assert verify_candidate("icims", "dubaicollege", "Dubai College") is False

    def test_workday_board_page(self):
        with patch("jobharvest.verify.fetch_text", return_value=BOARD_PAGE) as fetch:
            assert verify_candidate("workday", "dubaicollege/External/3", "Dubai College") is True
        assert fetch.call_args[0][0] == "https://dubaicollege.wd3.myworkdayjobs.com/External"


class TestSelfVerifyingDomain:
    """Locally scoped educational suffixes skip the homepage check."""

    @pytest.mark.parametrize("url", [
        "https://www.bsb.edu.bh",
        "https://www.kis.ac.th",
        "https://hs.k12.tr",
        "https://www.stmarys.sch.uk",
        "https://example.edu",
        "https://www.kings.school",
    ])
    def test_trusted(self, url):
        assert is_self_verifying_domain(url)

    @pytest.mark.parametrize("url", [
        "https://www.mac.com",
        "https://www.school.com",
        "https://www.education.org",
        "https://www.dubaicollege.org",
    ])
    def test_not_trusted(self, url):
        assert not is_self_verifying_domain(url)


class TestLooksLikeSchoolSite:
    """Homepage check for generic domains."""

    def test_school_page_with_name(self):
        assert looks_like_school_site("<title>Dubai College</title><p>Our students</p>", "Dubai College")

    def test_not_a_school(self):
        assert not looks_like_school_site("<title>Dubai Shoes</title>", "Dubai College")

    def test_school_vocabulary_but_other_name(self):
        assert not looks_like_school_site("<p>Welcome to our school in Abu Dhabi</p>", "Dubai College")

    def test_generic_name_needs_only_vocabulary(self):
        assert looks_like_school_site("<p>Admissions open</p>", "International School")
