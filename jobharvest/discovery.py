"""
Discovery of each school's hiring surfaces.

ATS discovery guesses platform slugs from the school's name and accepts the
first board that both exists and verifiably belongs to the school. Website
discovery guesses domains, confirms the homepage is the school's own, then
looks for a careers page and any ATS embedded in it. Network discovery
probes the curated accounts of school groups and hands a match to every
member school.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from .candidates import generate_domain_candidates, generate_joined_candidates, generate_slug_candidates
from .config import Settings
from .database import Organization
from .logger import get_logger
from .lookups import CAREER_PATHS, NETWORK_TARGETS
from .scrapers import DISCOVERY_PLATFORMS, get_probe, workday
from .scrapers.career_page import detect_ats
from .scrapers.common import PROBE_TIMEOUT, fetch_text, head_ok
from .search import first_match
from .storage import (
    organizations_for_ats_discovery,
    organizations_for_website_discovery,
    organizations_in_network,
    save_confirmed_ats,
    save_detected_signature,
    save_website,
)
from .throttle import Throttle
from .verify import is_self_verifying_domain, looks_like_school_site, verify_candidate

logger = get_logger()

WEBSITE_PLATFORM = "website"
DOMAIN_CONCURRENCY = 15
CAREER_PATH_CONCURRENCY = 5
MAX_BOARD_POSTINGS = 120


def probe_candidates(
    name: str,
    city: Optional[str] = None,
    platforms: Optional[Iterable[str]] = None,
    min_length: int = 5,
) -> List[Tuple[str, str]]:
    """
    Ordered (platform, slug) pairs to probe for one organization.

    Each slug is tried on every slug-addressed platform before moving to the
    next slug. Workday comes last, with separator-free names as tenants and
    every site/instance combination per tenant.
    """
    wanted = [p for p in DISCOVERY_PLATFORMS if platforms is None or p in platforms]
    slugs = generate_slug_candidates(name, city, min_length=min_length)

    pairs = [(platform, slug) for slug in slugs for platform in wanted if platform != workday.PLATFORM]
    if workday.PLATFORM in wanted:
        for tenant in generate_joined_candidates(name, min_length=min_length):
            pairs.extend((workday.PLATFORM, slug) for slug in workday.candidate_slugs(tenant))
    return pairs


def _accept_board(
    platform: str,
    slug: str,
    org_name: str,
    max_postings: Optional[int],
    timeout: float,
    verify: bool = True,
) -> Optional[List[Dict[str, Any]]]:
    """Probe a pair and apply the posting cap and identity check.

    Curated network accounts pass max_postings=None and verify=False.
    """
    module = get_probe(platform)
    if module is None:
        return None

    try:
        postings = module.probe(slug, timeout=timeout)
    except Exception as e:
        logger.record_probe_miss(platform, "UnreadablePayload")
        logger.warning("Probe raised, treating as no match", platform=platform, slug=slug, error=str(e))
        return None
    if postings is None:
        return None

    if max_postings is not None and len(postings) > max_postings:
        # Large boards under a guessed slug are unrelated employers
        logger.record_probe_miss(platform, "TooManyPostings")
        logger.debug("Rejected oversized board", platform=platform, slug=slug, postings=len(postings))
        return None

    if verify and not verify_candidate(platform, slug, org_name, timeout=timeout):
        logger.record_probe_miss(platform, "IdentityMismatch")
        return None

    return postings


def discover_ats(
    organization: Organization,
    platforms: Optional[Iterable[str]] = None,
    max_postings: int = MAX_BOARD_POSTINGS,
    min_slug_length: int = 5,
    timeout: float = PROBE_TIMEOUT,
    throttle: Optional[Throttle] = None,
) -> Optional[Dict[str, Any]]:
    """
    Find the ATS board that belongs to an organization.

    Args:
        organization: The school to search for
        platforms: Restrict the search to these platforms
        max_postings: Boards with more postings than this are rejected
        min_slug_length: Shortest slug worth probing
        timeout: Per-request timeout
        throttle: Delay between probes

    Returns:
        {"platform", "slug", "job_count"} for the first verified board, or None
    """
    pairs = probe_candidates(organization.name, organization.city, platforms, min_slug_length)
    match = first_match(
        pairs,
        lambda pair: _accept_board(pair[0], pair[1], organization.name, max_postings, timeout),
        throttle,
    )
    if match is None:
        return None

    (platform, slug), postings = match
    return {"platform": platform, "slug": slug, "job_count": len(postings)}


def confirm_detected_signature(
    organization: Organization,
    vendor: Optional[str],
    html: str,
    max_postings: int = MAX_BOARD_POSTINGS,
    timeout: float = PROBE_TIMEOUT,
) -> Optional[Dict[str, Any]]:
    """
    Upgrade a vendor signature seen in page content to a confirmed pair.

    Only possible when the vendor has a probe and the embed exposes the
    slug; the board must still pass the posting cap and identity check.
    """
    module = get_probe(vendor)
    if module is None:
        return None
    slug = module.slug_from_html(html)
    if not slug:
        return None

    postings = _accept_board(module.PLATFORM, slug, organization.name, max_postings, timeout)
    if postings is None:
        return None
    return {"platform": module.PLATFORM, "slug": slug, "job_count": len(postings)}


def _live_url(domain: str, timeout: float) -> Optional[str]:
    for url in (f"https://www.{domain}", f"https://{domain}"):
        ok, _ = head_ok(url, timeout=timeout)
        if ok:
            return url
    return None


def _career_url(url: str, timeout: float) -> Optional[str]:
    ok, final_url = head_ok(url, timeout=timeout)
    if not ok:
        return None
    return final_url or url


def _concurrent(fn: Callable, items: List[str], workers: int) -> List[Any]:
    """Apply fn to every item with bounded fan-out; results keep input order."""
    if not items:
        return []
    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        return list(pool.map(fn, items))


def discover_website(
    organization: Organization,
    concurrency: int = DOMAIN_CONCURRENCY,
    timeout: float = PROBE_TIMEOUT,
    max_postings: int = MAX_BOARD_POSTINGS,
) -> Optional[Dict[str, Any]]:
    """
    Find an organization's website, careers page and embedded ATS.

    Returns:
        {"website", "career_page_url", "ats_detected", "confirmed"} or None
        when no candidate domain is the school's own site. "confirmed" is a
        verified {"platform", "slug", "job_count"} or None.
    """
    domains = generate_domain_candidates(organization.name, organization.country_code, organization.city)
    live = [url for url in _concurrent(lambda d: _live_url(d, timeout), domains, concurrency) if url]

    website = None
    for url in live:
        if is_self_verifying_domain(url):
            website = url
            break
        html = fetch_text(url, WEBSITE_PLATFORM, timeout=timeout)
        if html and looks_like_school_site(html, organization.name):
            website = url
            break

    if website is None:
        logger.debug("No website found", org=organization.name, candidates=len(domains), live=len(live))
        return None

    paths = [f"{website}{path}" for path in CAREER_PATHS]
    career_page_url = next(
        (url for url in _concurrent(lambda u: _career_url(u, timeout), paths, CAREER_PATH_CONCURRENCY) if url),
        None,
    )

    ats_detected = None
    confirmed = None
    if career_page_url:
        html = fetch_text(career_page_url, WEBSITE_PLATFORM, timeout=timeout)
        if html:
            ats_detected = detect_ats(html)
            if ats_detected:
                confirmed = confirm_detected_signature(organization, ats_detected, html, max_postings, timeout)
            else:
                homepage = fetch_text(website, WEBSITE_PLATFORM, timeout=timeout)
                if homepage:
                    ats_detected = detect_ats(homepage)
                    if ats_detected:
                        confirmed = confirm_detected_signature(
                            organization, ats_detected, homepage, max_postings, timeout
                        )

    return {
        "website": website,
        "career_page_url": career_page_url,
        "ats_detected": ats_detected,
        "confirmed": confirmed,
    }


def run_ats_discovery(
    session: Session,
    settings: Settings,
    country: Optional[str] = None,
    platforms: Optional[Iterable[str]] = None,
    offset: int = 0,
    limit: Optional[int] = None,
    force: bool = False,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """Search every pending organization for a verified ATS board."""
    organizations = organizations_for_ats_discovery(session, country, offset, limit, force)
    throttle = Throttle(settings.probe_delay, sleep)
    platforms = list(platforms) if platforms else None

    summary: Dict[str, Any] = {"tested": 0, "found": 0, "saved": 0, "by_platform": {}}
    logger.info(f"Testing {len(organizations)} organizations for ATS platforms", dry_run=dry_run)

    for org in organizations:
        summary["tested"] += 1
        found = discover_ats(
            org,
            platforms=platforms,
            max_postings=settings.max_board_postings,
            min_slug_length=settings.min_slug_length,
            timeout=settings.probe_timeout,
            throttle=throttle,
        )
        if found is None:
            continue

        summary["found"] += 1
        by_platform = summary["by_platform"]
        by_platform[found["platform"]] = by_platform.get(found["platform"], 0) + 1
        logger.info(
            f"{found['platform'].upper()} {org.name}",
            slug=found["slug"], jobs=found["job_count"],
        )
        if not dry_run and save_confirmed_ats(session, org, found["platform"], found["slug"], force=force):
            summary["saved"] += 1

        if summary["tested"] % 50 == 0:
            logger.info(f"Tested {summary['tested']}/{len(organizations)}, found {summary['found']} so far")

    logger.info("ATS discovery complete", **{k: v for k, v in summary.items() if k != "by_platform"})
    return summary


def run_website_discovery(
    session: Session,
    settings: Settings,
    country: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
    force: bool = False,
    concurrency: int = DOMAIN_CONCURRENCY,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Discover websites, career pages and ATS signatures for pending organizations."""
    organizations = organizations_for_website_discovery(session, country, offset, limit, force)
    summary = {"checked": 0, "found": 0, "with_career_page": 0, "with_ats": 0, "confirmed": 0}
    logger.info(
        f"Discovering websites for {len(organizations)} organizations",
        concurrency=concurrency, dry_run=dry_run,
    )

    for org in organizations:
        summary["checked"] += 1
        result = discover_website(
            org,
            concurrency=concurrency,
            timeout=settings.probe_timeout,
            max_postings=settings.max_board_postings,
        )
        if result is None:
            continue

        summary["found"] += 1
        if result["career_page_url"]:
            summary["with_career_page"] += 1
        if result["ats_detected"]:
            summary["with_ats"] += 1
        if result["confirmed"]:
            summary["confirmed"] += 1

        logger.info(
            org.name,
            website=result["website"],
            career_page=result["career_page_url"],
            ats=result["ats_detected"],
        )
        if dry_run:
            continue

        save_website(session, org, result["website"], result["career_page_url"])
        if result["ats_detected"]:
            save_detected_signature(session, org, result["ats_detected"])
        confirmed = result["confirmed"]
        if confirmed:
            save_confirmed_ats(session, org, confirmed["platform"], confirmed["slug"], force=force)

    logger.info("Website discovery complete", **summary)
    return summary


def network_candidates(
    targets: Iterable[Tuple[str, str]],
    platforms: Optional[Iterable[str]] = None,
) -> List[Tuple[str, str]]:
    """(platform, slug) pairs for one network's curated targets, in table order."""
    pairs: List[Tuple[str, str]] = []
    for platform, target in targets:
        if platforms is not None and platform not in platforms:
            continue
        if platform == workday.PLATFORM:
            tenant, _, site = target.partition("/")
            pairs.extend((platform, slug) for slug in workday.candidate_slugs(tenant, site or None))
        else:
            pairs.append((platform, target))
    return pairs


def discover_network(
    network: str,
    targets: Iterable[Tuple[str, str]],
    platforms: Optional[Iterable[str]] = None,
    timeout: float = PROBE_TIMEOUT,
    throttle: Optional[Throttle] = None,
) -> Optional[Dict[str, Any]]:
    """
    First live ATS account among a school group's curated targets.

    Group accounts legitimately carry many postings and are not named after
    any one school, so neither the posting cap nor the identity check applies.
    """
    match = first_match(
        network_candidates(targets, platforms),
        lambda pair: _accept_board(pair[0], pair[1], network, None, timeout, verify=False),
        throttle,
    )
    if match is None:
        return None

    (platform, slug), postings = match
    return {"platform": platform, "slug": slug, "job_count": len(postings)}


def run_network_discovery(
    session: Session,
    settings: Settings,
    platforms: Optional[Iterable[str]] = None,
    networks: Optional[Iterable[Tuple[str, Tuple[Tuple[str, str], ...]]]] = None,
    force: bool = False,
    dry_run: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """Probe every school group's account and attach a match to its member schools."""
    networks = NETWORK_TARGETS if networks is None else networks
    platforms = list(platforms) if platforms else None
    throttle = Throttle(settings.probe_delay, sleep)

    summary: Dict[str, Any] = {"tested": 0, "found": 0, "saved": 0, "by_platform": {}}
    logger.info(f"Testing {len(networks)} school networks for ATS platforms", dry_run=dry_run)

    for network, targets in networks:
        summary["tested"] += 1
        found = discover_network(network, targets, platforms, timeout=settings.probe_timeout, throttle=throttle)
        if found is None:
            logger.info(f"{network}: not found on any platform")
            continue

        summary["found"] += 1
        by_platform = summary["by_platform"]
        by_platform[found["platform"]] = by_platform.get(found["platform"], 0) + 1

        members = organizations_in_network(session, network)
        logger.info(
            f"{found['platform'].upper()} {network}",
            slug=found["slug"], jobs=found["job_count"], members=len(members),
        )
        if dry_run:
            continue
        for org in members:
            if save_confirmed_ats(session, org, found["platform"], found["slug"], force=force):
                summary["saved"] += 1

    logger.info("Network discovery complete", **{k: v for k, v in summary.items() if k != "by_platform"})
    return summary
