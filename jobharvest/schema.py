from typing import Any, Dict, List
from urllib.parse import urlparse

REQUIRED_STR_FIELDS = ["title", "url"]
OPTIONAL_STR_FIELDS = [
    "organization",
    "location",
    "city",
    "country",
    "description",
    "source_key",
    "contract_hint",
]
NULLABLE_STR_FIELDS = ["salary", "start_date"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_url(v: str) -> bool:
    p = urlparse(v)
    return p.scheme in ("http", "https") and bool(p.netloc)


def validate_posting(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages for a raw posting.
    Empty list means valid.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    for f in OPTIONAL_STR_FIELDS:
        if f in data and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    for f in NULLABLE_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string or null")

    if _is_non_empty_str(data.get("url")) and not _valid_url(data["url"].strip()):
        errors.append("Field 'url' must be a valid absolute URL (scheme + host)")

    return errors
