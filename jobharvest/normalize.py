import html as html_lib
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from .lookups import (
    CATEGORY_LADDER,
    COUNTRY_CODES,
    COUNTRY_REGIONS,
    DEFAULT_CATEGORY,
    UNKNOWN_COUNTRY_CODE,
    UNKNOWN_LOCATION,
    UNKNOWN_REGION,
)

DESCRIPTION_MAX_LENGTH = 800
DEFAULT_START_DATE = "TBD"

FULL_TIME = "Full-time"
PART_TIME = "Part-time"
CONTRACT = "Contract"

_PART_TIME = re.compile(r"part[\s_-]*time", re.I)
_FIXED_TERM = re.compile(r"fixed[\s_-]*term|casual|temporary", re.I)
_CONTRACT_WORD = re.compile(r"\bcontract(or)?\b", re.I)
_PERMANENT = re.compile(r"permanent", re.I)

_TAG = re.compile(r"<[^>]+>")
_ENTITIES = (("&nbsp;", " "), ("&amp;", "&"), ("&lt;", "<"), ("&gt;", ">"), ("&quot;", '"'))


def normalize_text(s: str) -> str:
    return " ".join((s or "").strip().lower().split())


def canonical_url(url: str) -> str:
    parsed = urlparse(url)
    path = parsed.path.rstrip("/")
    # Drop query and fragment to avoid source-specific tracking
    return f"{parsed.scheme}://{parsed.netloc}{path}" if parsed.scheme and parsed.netloc else path


def categorize_position(title: str) -> str:
    """First matching rung of the category ladder; high-school if none match."""
    lower = normalize_text(title)
    for category, pattern in CATEGORY_LADDER:
        if pattern.search(lower):
            return category
    return DEFAULT_CATEGORY


def map_contract_type(*hints: Optional[str]) -> str:
    """
    Contract type from free-text hints (contract types, terms, commitment).

    Part-time wins over contract terms; anything else is full-time.
    """
    text = " | ".join(h for h in hints if h)
    if _PART_TIME.search(text):
        return PART_TIME
    if _FIXED_TERM.search(text):
        return CONTRACT
    # "Permanent contract" describes a permanent post
    if _CONTRACT_WORD.search(text) and not _PERMANENT.search(text):
        return CONTRACT
    return FULL_TIME


def resolve_country_code(country: str) -> str:
    """ISO code for a country name or alias; UNKNOWN_COUNTRY_CODE if unresolved."""
    lower = normalize_text(country)
    if not lower:
        return UNKNOWN_COUNTRY_CODE
    if lower in COUNTRY_CODES:
        return COUNTRY_CODES[lower]
    if len(lower) == 2 and lower.upper() in COUNTRY_REGIONS:
        return lower.upper()
    for key, code in COUNTRY_CODES.items():
        if key in lower or (len(lower) > 2 and lower in key):
            return code
    return UNKNOWN_COUNTRY_CODE


def resolve_location(text: str) -> Dict[str, str]:
    """
    Split "City, Country" into city, country and country code.

    Example:
        >>> resolve_location("Dubai, United Arab Emirates")
        {'city': 'Dubai', 'country': 'United Arab Emirates', 'country_code': 'AE'}
    """
    parts = [p.strip() for p in (text or "").split(",") if p.strip()]
    if not parts:
        return {"city": UNKNOWN_LOCATION, "country": UNKNOWN_LOCATION, "country_code": UNKNOWN_COUNTRY_CODE}
    city, country = parts[0], parts[-1]
    return {"city": city, "country": country, "country_code": resolve_country_code(country)}


def region_for(country_code: Optional[str]) -> str:
    return COUNTRY_REGIONS.get((country_code or "").upper(), UNKNOWN_REGION)


def clean_description(text: str, max_length: int = DESCRIPTION_MAX_LENGTH) -> str:
    """Strip tags and common entities, collapse whitespace, truncate."""
    if not text:
        return ""
    # API payloads sometimes arrive entity-escaped (&lt;p&gt;); decode those first
    if "&lt;" in text and "<" not in text:
        text = html_lib.unescape(text)
    text = _TAG.sub(" ", text)
    for entity, replacement in _ENTITIES:
        text = text.replace(entity, replacement)
    return " ".join(text.split())[:max_length]


def normalize_posting(
    raw: Dict[str, Any],
    organization: Any = None,
    description_max_length: int = DESCRIPTION_MAX_LENGTH,
) -> Dict[str, Any]:
    """
    Map one raw posting into the canonical job shape.

    Location fields missing from the posting fall back to the organization's
    own city, country and country code.

    Raises:
        ValueError: If the posting has no title or no URL
    """
    title = " ".join((raw.get("title") or "").split())
    url = (raw.get("url") or "").strip()
    if not title:
        raise ValueError("posting has no title")
    if not url:
        raise ValueError(f"posting {title!r} has no URL")

    org_name = raw.get("organization") or ""
    if organization is not None:
        org_name = organization.name

    if raw.get("city") or raw.get("country"):
        country = raw.get("country") or ""
        city = raw.get("city") or country
        country_code = resolve_country_code(country) if country else UNKNOWN_COUNTRY_CODE
        if len(country) == 2 and country_code != UNKNOWN_COUNTRY_CODE:
            country = country.upper()
    elif raw.get("location"):
        resolved = resolve_location(raw["location"])
        city, country, country_code = resolved["city"], resolved["country"], resolved["country_code"]
    else:
        city, country, country_code = "", "", UNKNOWN_COUNTRY_CODE

    if organization is not None:
        if country_code == UNKNOWN_COUNTRY_CODE and organization.country_code:
            country_code = organization.country_code
            country = organization.country or country
        if not city or city == UNKNOWN_LOCATION:
            city = organization.city or city
    city = city or UNKNOWN_LOCATION
    country = country or UNKNOWN_LOCATION

    return {
        "title": title,
        "organization_name": org_name.strip(),
        "organization_id": getattr(organization, "id", None),
        "city": city,
        "country": country,
        "country_code": country_code,
        "region": region_for(country_code),
        "category": categorize_position(title),
        "contract_type": map_contract_type(raw.get("contract_hint")),
        "description": clean_description(raw.get("description") or "", description_max_length),
        "application_url": url,
        "source_url": url,
        "source_key": raw.get("source_key") or "",
        "salary": raw.get("salary") or None,
        "start_date": raw.get("start_date") or DEFAULT_START_DATE,
    }
