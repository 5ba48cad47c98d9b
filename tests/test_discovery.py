"""
Tests for discovery.py - ATS and website discovery (HTTP mocked).
"""

from unittest.mock import MagicMock, patch

import pytest

from jobharvest.database import Organization
from jobharvest.discovery import (
    confirm_detected_signature,
    discover_ats,
    discover_network,
    discover_website,
    network_candidates,
    probe_candidates,
    run_ats_discovery,
    run_network_discovery,
    run_website_discovery,
)
from jobharvest.throttle import Throttle

GREENHOUSE_EMBED = '<script src="https://boards.greenhouse.io/embed/job_board/js?for=bsbahrain"></script>'
HOMEPAGE = "<html><title>The British School of Bahrain</title><p>Our students and teachers</p></html>"


@pytest.fixture
def probes():
    """Every discovery probe patched to miss by default."""
    with patch("jobharvest.scrapers.greenhouse.probe", return_value=None) as gh, \
            patch("jobharvest.scrapers.lever.probe", return_value=None) as lv, \
            patch("jobharvest.scrapers.workable.probe", return_value=None) as wk, \
            patch("jobharvest.scrapers.smartrecruiters.probe", return_value=None) as sr, \
            patch("jobharvest.scrapers.workday.probe", return_value=None) as wd, \
            patch("jobharvest.scrapers.bamboohr.probe", return_value=None) as bb:
        yield {
            "greenhouse": gh, "lever": lv, "workable": wk,
            "smartrecruiters": sr, "workday": wd, "bamboohr": bb,
        }


@pytest.fixture
def verified():
    with patch("jobharvest.discovery.verify_candidate", return_value=True) as verify:
        yield verify


def _slug_is(wanted, postings):
    return lambda slug, timeout=None: postings if slug == wanted else None


class TestProbeCandidates:
    """Order of (platform, slug) pairs."""

    def test_slug_major_then_workday(self):
        pairs = probe_candidates("British School of Bahrain", "Manama")
        assert pairs[:4] == [
            ("greenhouse", "british-school-of-bahrain"),
            ("lever", "british-school-of-bahrain"),
            ("workable", "british-school-of-bahrain"),
            ("smartrecruiters", "british-school-of-bahrain"),
        ]
        assert pairs[4] == ("greenhouse", "british-bahrain")
        # 5 slugs x 4 platforms, then 2 joined tenants x 25 Workday combinations
        assert len(pairs) == 70
        assert all(p == "workday" for p, _ in pairs[20:])
        assert pairs[20] == ("workday", "britishschoolofbahrain/britishschoolofbahrain/1")

    def test_platform_filter(self):
        pairs = probe_candidates("British School of Bahrain", platforms=["lever"])
        assert {p for p, _ in pairs} == {"lever"}


class TestDiscoverAts:
    """Test discover_ats."""

    def test_first_verified_match(self, organization, probes, verified):
        probes["lever"].side_effect = _slug_is("british-bahrain", [{"title": "Teacher"}])

        found = discover_ats(organization)

        assert found == {"platform": "lever", "slug": "british-bahrain", "job_count": 1}
        assert probes["greenhouse"].call_count == 2
        assert probes["workable"].call_count == 1
        probes["workday"].assert_not_called()
        verified.assert_called_once()

    def test_oversized_board_rejected(self, organization, probes, verified):
        probes["greenhouse"].side_effect = _slug_is("british-school-of-bahrain", [{}] * 121)

        assert discover_ats(organization) is None
        verified.assert_not_called()

    def test_raising_probe_is_a_miss(self, organization, probes, verified):
        probes["greenhouse"].side_effect = AttributeError("'str' object has no attribute 'get'")
        probes["lever"].side_effect = _slug_is("british-school-of-bahrain", [{"title": "Teacher"}])

        found = discover_ats(organization)

        assert found == {"platform": "lever", "slug": "british-school-of-bahrain", "job_count": 1}

    def test_board_at_cap_accepted(self, organization, probes, verified):
        probes["greenhouse"].side_effect = _slug_is("british-school-of-bahrain", [{}] * 120)
        assert discover_ats(organization)["job_count"] == 120

    def test_unverified_board_rejected(self, organization, probes, verified):
        probes["greenhouse"].return_value = []
        verified.return_value = False

        assert discover_ats(organization) is None
        assert verified.call_count == 5

    def test_workday_tried_last(self, organization, probes, verified):
        probes["workday"].side_effect = _slug_is("britishschoolofbahrain/External/2", [{"title": "Teacher"}])

        found = discover_ats(organization)

        assert found["platform"] == "workday"
        assert found["slug"] == "britishschoolofbahrain/External/2"
        assert probes["greenhouse"].call_count == 5
        assert probes["workday"].call_count == 7

    def test_delay_between_probes(self, organization, probes, verified):
        sleep = MagicMock()
        throttle = Throttle(0.3, sleep=sleep)

        assert discover_ats(organization, throttle=throttle) is None

        assert throttle.waits == 69
        sleep.assert_called_with(0.3)


class TestConfirmDetectedSignature:
    """Test confirm_detected_signature."""

    def test_upgrades_embedded_board(self, organization, probes, verified):
        probes["greenhouse"].return_value = [{"title": "Teacher"}, {"title": "Nurse"}]
        found = confirm_detected_signature(organization, "greenhouse", GREENHOUSE_EMBED)
        assert found == {"platform": "greenhouse", "slug": "bsbahrain", "job_count": 2}

    def test_vendor_without_probe(self, organization, probes, verified):
        assert confirm_detected_signature(organization, "taleo", "<a href='https://x.taleo.net'>") is None

    def test_no_slug_in_page(self, organization, probes, verified):
        assert confirm_detected_signature(organization, "greenhouse", "<p>greenhouse</p>") is None
        probes["greenhouse"].assert_not_called()

    def test_still_verified(self, organization, probes, verified):
        probes["greenhouse"].return_value = [{"title": "Teacher"}]
        verified.return_value = False
        assert confirm_detected_signature(organization, "greenhouse", GREENHOUSE_EMBED) is None


def _fake_head(live):
    def head(url, timeout=None):
        value = live.get(url)
        if value is None:
            return False, None
        return True, (value or None)
    return head


class TestDiscoverWebsite:
    """Test discover_website."""

    def test_generic_domain_with_career_page_and_ats(self, organization, probes, verified):
        live = {
            "https://britishbahrain.org": "",
            "https://britishbahrain.org/jobs": "https://britishbahrain.org/en/jobs",
        }
        pages = {"https://britishbahrain.org": HOMEPAGE, "https://britishbahrain.org/en/jobs": GREENHOUSE_EMBED}
        probes["greenhouse"].return_value = [{"title": "Teacher"}]

        with patch("jobharvest.discovery.head_ok", side_effect=_fake_head(live)), \
                patch("jobharvest.discovery.fetch_text", side_effect=lambda url, platform, timeout=None: pages.get(url)):
            result = discover_website(organization, concurrency=4)

        assert result == {
            "website": "https://britishbahrain.org",
            "career_page_url": "https://britishbahrain.org/en/jobs",
            "ats_detected": "greenhouse",
            "confirmed": {"platform": "greenhouse", "slug": "bsbahrain", "job_count": 1},
        }

    def test_self_verifying_domain_skips_homepage_check(self, organization, probes, verified):
        live = {"https://www.britishschoolofbahrain.edu.bh": ""}
        with patch("jobharvest.discovery.head_ok", side_effect=_fake_head(live)), \
                patch("jobharvest.discovery.fetch_text") as fetch:
            result = discover_website(organization)

        assert result["website"] == "https://www.britishschoolofbahrain.edu.bh"
        assert result["career_page_url"] is None
        assert result["ats_detected"] is None
        fetch.assert_not_called()

    def test_first_career_path_in_priority_order(self, organization, probes, verified):
        live = {
            "https://www.britishschoolofbahrain.edu.bh": "",
            "https://www.britishschoolofbahrain.edu.bh/careers": "",
            "https://www.britishschoolofbahrain.edu.bh/jobs": "",
        }
        with patch("jobharvest.discovery.head_ok", side_effect=_fake_head(live)), \
                patch("jobharvest.discovery.fetch_text", return_value="<p>Vacancies</p>"):
            result = discover_website(organization)

        assert result["career_page_url"] == "https://www.britishschoolofbahrain.edu.bh/careers"

    def test_ats_detected_on_homepage(self, organization, probes, verified):
        site = "https://www.britishschoolofbahrain.edu.bh"
        live = {site: "", f"{site}/careers": ""}
        pages = {f"{site}/careers": "<p>Vacancies</p>", site: '<a href="https://bsb.bamboohr.com/careers">Jobs</a>'}

        with patch("jobharvest.discovery.head_ok", side_effect=_fake_head(live)), \
                patch("jobharvest.discovery.fetch_text", side_effect=lambda url, platform, timeout=None: pages.get(url)):
            result = discover_website(organization)

        assert result["ats_detected"] == "bamboohr"
        assert result["confirmed"] is None
        assert probes["bamboohr"].call_args[0][0] == "bsb"

    def test_no_live_domain(self, organization):
        with patch("jobharvest.discovery.head_ok", return_value=(False, None)):
            assert discover_website(organization) is None

    def test_live_domain_is_not_the_school(self, organization):
        live = {"https://www.britishbahrain.com": ""}
        with patch("jobharvest.discovery.head_ok", side_effect=_fake_head(live)), \
                patch("jobharvest.discovery.fetch_text", return_value="<title>British Bahrain Airways</title>"):
            assert discover_website(organization) is None


class TestRunAtsDiscovery:
    """Test run_ats_discovery against the database."""

    def test_saves_confirmed_pair(self, db_session, settings, organization):
        found = {"platform": "lever", "slug": "british-bahrain", "job_count": 3}
        with patch("jobharvest.discovery.discover_ats", return_value=found):
            summary = run_ats_discovery(db_session, settings)

        assert summary["tested"] == 1
        assert summary["found"] == 1
        assert summary["saved"] == 1
        assert summary["by_platform"] == {"lever": 1}
        db_session.refresh(organization)
        assert organization.ats_platform == "lever"
        assert organization.ats_slug == "british-bahrain"
        assert organization.ats_discovered_at is not None

    def test_dry_run_saves_nothing(self, db_session, settings, organization):
        found = {"platform": "lever", "slug": "british-bahrain", "job_count": 3}
        with patch("jobharvest.discovery.discover_ats", return_value=found):
            summary = run_ats_discovery(db_session, settings, dry_run=True)

        assert summary["found"] == 1
        assert summary["saved"] == 0
        db_session.refresh(organization)
        assert organization.ats_platform is None

    def test_confirmed_organizations_skipped_unless_forced(self, db_session, settings, make_organization):
        make_organization("Dubai College", city="Dubai", country="United Arab Emirates", country_code="AE",
                          ats_platform="greenhouse", ats_slug="dubaicollege")
        with patch("jobharvest.discovery.discover_ats", return_value=None) as discover:
            assert run_ats_discovery(db_session, settings)["tested"] == 0
            assert run_ats_discovery(db_session, settings, force=True)["tested"] == 1
        assert discover.call_count == 1

    def test_country_filter(self, db_session, settings, make_organization):
        make_organization("British School of Bahrain")
        make_organization("Dubai College", city="Dubai", country="United Arab Emirates", country_code="AE")
        with patch("jobharvest.discovery.discover_ats", return_value=None) as discover:
            summary = run_ats_discovery(db_session, settings, country="ae")
        assert summary["tested"] == 1
        assert discover.call_args[0][0].name == "Dubai College"


class TestRunWebsiteDiscovery:
    """Test run_website_discovery against the database."""

    def test_saves_website_and_signature(self, db_session, settings, organization):
        result = {
            "website": "https://www.bsb.edu.bh",
            "career_page_url": "https://www.bsb.edu.bh/careers/?lang=en",
            "ats_detected": "taleo",
            "confirmed": None,
        }
        with patch("jobharvest.discovery.discover_website", return_value=result):
            summary = run_website_discovery(db_session, settings)

        assert summary == {"checked": 1, "found": 1, "with_career_page": 1, "with_ats": 1, "confirmed": 0}
        db_session.refresh(organization)
        assert organization.website == "https://www.bsb.edu.bh"
        assert organization.career_page_url == "https://www.bsb.edu.bh/careers"
        assert organization.ats_detected == "taleo"
        assert organization.ats_platform is None
        assert organization.website_discovered_at is not None

    def test_confirmed_signature_saved_as_pair(self, db_session, settings, organization):
        result = {
            "website": "https://www.bsb.edu.bh",
            "career_page_url": "https://www.bsb.edu.bh/careers",
            "ats_detected": "greenhouse",
            "confirmed": {"platform": "greenhouse", "slug": "bsbahrain", "job_count": 4},
        }
        with patch("jobharvest.discovery.discover_website", return_value=result):
            summary = run_website_discovery(db_session, settings)

        assert summary["confirmed"] == 1
        db_session.refresh(organization)
        assert (organization.ats_platform, organization.ats_slug) == ("greenhouse", "bsbahrain")

    def test_not_found(self, db_session, settings, organization):
        with patch("jobharvest.discovery.discover_website", return_value=None):
            summary = run_website_discovery(db_session, settings)
        assert summary["checked"] == 1
        assert summary["found"] == 0
        db_session.refresh(organization)
        assert organization.website is None

    def test_dry_run(self, db_session, settings, organization):
        result = {"website": "https://www.bsb.edu.bh", "career_page_url": None, "ats_detected": None, "confirmed": None}
        with patch("jobharvest.discovery.discover_website", return_value=result):
            run_website_discovery(db_session, settings, dry_run=True)
        db_session.refresh(organization)
        assert organization.website is None
        assert db_session.query(Organization).count() == 1


GEMS = ("GEMS Education", (("workday", "gems/GEMS"), ("smartrecruiters", "GEMSEducation"), ("greenhouse", "gems")))
NORD = ("Nord Anglia Education", (("lever", "nordanglia"),))


class TestNetworkCandidates:
    """Expansion of curated network targets."""

    def test_pinned_workday_site_searches_instances(self):
        pairs = network_candidates(GEMS[1])
        assert pairs[:5] == [("workday", f"gems/GEMS/{n}") for n in (1, 2, 3, 4, 5)]
        assert pairs[5:] == [("smartrecruiters", "GEMSEducation"), ("greenhouse", "gems")]

    def test_bare_tenant_tries_every_site(self):
        pairs = network_candidates((("workday", "cognita"),))
        assert len(pairs) == 25
        assert pairs[0] == ("workday", "cognita/cognita/1")

    def test_platform_filter(self):
        assert network_candidates(GEMS[1], platforms=["greenhouse"]) == [("greenhouse", "gems")]


class TestDiscoverNetwork:
    """Test discover_network."""

    def test_large_board_accepted_without_identity_check(self, probes, verified):
        probes["smartrecruiters"].return_value = [{}] * 400

        found = discover_network(*GEMS)

        assert found == {"platform": "smartrecruiters", "slug": "GEMSEducation", "job_count": 400}
        assert probes["workday"].call_count == 5
        probes["greenhouse"].assert_not_called()
        verified.assert_not_called()

    def test_no_account(self, probes):
        assert discover_network(*GEMS) is None


class TestRunNetworkDiscovery:
    """Test run_network_discovery against the database."""

    def test_match_saved_to_member_schools(self, db_session, settings, probes, make_organization):
        member = make_organization("GEMS Wellington Academy", network_group="GEMS Education")
        other = make_organization("GEMS Modern Academy", network_group="GEMS Education",
                                  ats_platform="greenhouse", ats_slug="gemsmodern")
        outsider = make_organization("Dubai College")
        probes["greenhouse"].return_value = [{"title": "Teacher"}]

        summary = run_network_discovery(db_session, settings, networks=[GEMS, NORD])

        assert summary == {"tested": 2, "found": 1, "saved": 1, "by_platform": {"greenhouse": 1}}
        db_session.refresh(member)
        assert (member.ats_platform, member.ats_slug) == ("greenhouse", "gems")
        assert other.ats_slug == "gemsmodern"
        assert outsider.ats_platform is None

    def test_force_replaces_existing_pair(self, db_session, settings, probes, make_organization):
        org = make_organization("GEMS Modern Academy", network_group="GEMS Education",
                                ats_platform="greenhouse", ats_slug="gemsmodern")
        probes["greenhouse"].return_value = []

        summary = run_network_discovery(db_session, settings, networks=[GEMS], force=True)

        assert summary["saved"] == 1
        assert org.ats_slug == "gems"

    def test_dry_run_saves_nothing(self, db_session, settings, probes, make_organization):
        org = make_organization("GEMS Wellington Academy", network_group="GEMS Education")
        probes["greenhouse"].return_value = []

        summary = run_network_discovery(db_session, settings, networks=[GEMS], dry_run=True)

        assert summary["found"] == 1
        assert summary["saved"] == 0
        db_session.refresh(org)
        assert org.ats_platform is None

    def test_raising_probe_does_not_abort(self, db_session, settings, probes):
        probes["workday"].side_effect = AttributeError("'NoneType' object has no attribute 'get'")
        probes["lever"].return_value = [{"title": "Teacher"}]

        summary = run_network_discovery(db_session, settings, networks=[GEMS, NORD])

        assert summary["tested"] == 2
        assert summary["by_platform"] == {"lever": 1}
