"""
Candidate identifiers for an organization.

Generates plausible ATS account slugs and website domains from a school's
name, city and country. Both lists are ordered by likelihood and contain no
duplicates; callers probe them in order and stop at the first match.
"""

import re
from typing import List, Optional

from .lookups import (
    CATCH_ALL_TLD,
    COUNTRY_TLDS,
    GENERIC_NAME_WORDS,
    GENERIC_TLDS,
    MAX_LOCAL_TLDS,
)
from .search import ordered_unique

MIN_SLUG_LENGTH = 5
MIN_DOMAIN_BASE_LENGTH = 3
MAX_DOMAIN_BASE_LENGTH = 40
ACRONYM_MIN_WORDS = 3

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def name_words(name: str) -> List[str]:
    """Lowercase alphanumeric words of a name, punctuation removed."""
    return _NON_ALNUM.sub("", (name or "").lower()).split()


def significant_name_words(name: str) -> List[str]:
    """Name words with generic terms (school, academy, articles) removed."""
    return [w for w in name_words(name) if w not in GENERIC_NAME_WORDS]


def acronym(name: str) -> Optional[str]:
    """First letters of the significant words, when there are at least three."""
    words = significant_name_words(name)
    if len(words) < ACRONYM_MIN_WORDS:
        return None
    return "".join(w[0] for w in words)


def _variants(name: str, city: Optional[str]) -> List[str]:
    full = name_words(name)
    stripped = significant_name_words(name)
    city_words = name_words(city) if city else []

    variants = [
        "-".join(full),
        "-".join(stripped),
        "".join(full),
        "".join(stripped),
    ]

    short = acronym(name)
    if short:
        variants.append(short)

    if city_words:
        city_slug = "-".join(city_words)
        city_joined = "".join(city_words)
        if short:
            variants.append(f"{short}-{city_slug}")
            variants.append(f"{short}{city_joined}")
        if stripped:
            variants.append(f"{'-'.join(stripped)}-{city_slug}")

    return variants


def generate_slug_candidates(
    name: str,
    city: Optional[str] = None,
    min_length: int = MIN_SLUG_LENGTH,
) -> List[str]:
    """
    Ordered ATS slug candidates for an organization name.

    Short slugs collide with unrelated companies, so anything under
    min_length characters is dropped.

    Example:
        >>> generate_slug_candidates("British International School of Ho Chi Minh City")
        ['british-international-school-of-ho-chi-minh-city', 'british-ho-chi-minh-city', ...]
    """
    return [
        slug for slug in ordered_unique(_variants(name, city))
        if len(slug) >= min_length
    ]


def generate_joined_candidates(
    name: str,
    min_length: int = MIN_SLUG_LENGTH,
) -> List[str]:
    """Separator-free slugs, used as Workday tenant names."""
    return [
        slug for slug in generate_slug_candidates(name, min_length=min_length)
        if "-" not in slug
    ]


def _valid_base(base: str) -> bool:
    return (
        MIN_DOMAIN_BASE_LENGTH <= len(base) <= MAX_DOMAIN_BASE_LENGTH
        and not base.isdigit()
    )


def domain_suffixes(country_code: Optional[str]) -> List[str]:
    """Local suffixes first, then generic ones, then the catch-all."""
    local = list(COUNTRY_TLDS.get((country_code or "").upper(), ()))[:MAX_LOCAL_TLDS]
    generic = [tld for tld in GENERIC_TLDS if tld not in local]
    return local + generic + [CATCH_ALL_TLD]


def generate_domain_candidates(
    name: str,
    country_code: Optional[str],
    city: Optional[str] = None,
) -> List[str]:
    """
    Ordered website domain candidates.

    Every base variant is crossed with the country's local suffixes before
    the generic ones, since locally scoped suffixes are only issued to
    legitimate institutions.
    """
    bases = [b for b in ordered_unique(_variants(name, city)) if _valid_base(b)]
    suffixes = domain_suffixes(country_code)
    return ordered_unique(f"{base}.{tld}" for base in bases for tld in suffixes)
