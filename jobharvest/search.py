"""
Ordered candidate search.

Slug probing, domain probing and the Workday tenant/site/instance space all
try candidates in priority order and stop at the first success. They share
this combinator instead of each writing the loop.
"""

from itertools import product
from typing import Any, Callable, Iterable, Optional, Tuple, TypeVar

from .throttle import Throttle

T = TypeVar("T")


def ordered_unique(items: Iterable[T]) -> list[T]:
    """Drop duplicates and empty values, keeping first-seen order."""
    seen = set()
    out: list[T] = []
    for item in items:
        if not item or item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out


def first_match(
    candidates: Iterable[T],
    attempt: Callable[[T], Optional[Any]],
    throttle: Throttle | None = None,
) -> Optional[Tuple[T, Any]]:
    """
    Try each candidate in order and return the first non-None result.

    Args:
        candidates: Candidates in priority order
        attempt: Called with one candidate; returns None for "no match"
        throttle: Optional delay applied between attempts (not before the first)

    Returns:
        (candidate, result) for the first match, or None if nothing matched
    """
    for index, candidate in enumerate(candidates):
        if index and throttle is not None:
            throttle.wait()
        result = attempt(candidate)
        if result is not None:
            return candidate, result
    return None


def grid(*axes: Iterable) -> Iterable[tuple]:
    """Cartesian product with the first axis outermost."""
    return product(*axes)
