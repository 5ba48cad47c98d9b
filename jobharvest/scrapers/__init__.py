"""
Platform probes.

Every probe module exposes PLATFORM, probe(slug), board_url(slug) and
slug_from_html(html). PROBES maps platform names to those modules.
"""

from dataclasses import dataclass
from types import MappingProxyType, ModuleType
from typing import Any, Callable, Dict, List, Optional

from . import bamboohr, greenhouse, lever, smartrecruiters, tes, workable, workday

PROBES = MappingProxyType({
    greenhouse.PLATFORM: greenhouse,
    lever.PLATFORM: lever,
    workable.PLATFORM: workable,
    smartrecruiters.PLATFORM: smartrecruiters,
    workday.PLATFORM: workday,
    bamboohr.PLATFORM: bamboohr,
})

# Platforms searched by slug guessing, in probe order
DISCOVERY_PLATFORMS = ("greenhouse", "lever", "workable", "smartrecruiters", "workday")


def get_probe(platform: Optional[str]) -> Optional[ModuleType]:
    return PROBES.get((platform or "").lower())


@dataclass(frozen=True)
class BoardSource:
    """A paginated job board crawled page by page."""

    id: str
    name: str
    base_url: str
    page_url: Callable[[int], str]
    parse: Callable[[str, str], List[Dict[str, Any]]]
    max_pages: int


JOB_BOARDS = (
    BoardSource(
        id=tes.SOURCE_ID,
        name="TES International",
        base_url=tes.BASE_URL,
        page_url=tes.page_url,
        parse=tes.parse_listing,
        max_pages=tes.MAX_PAGES,
    ),
)
