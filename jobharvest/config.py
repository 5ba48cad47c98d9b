"""
Runtime settings for discovery, harvest and liveness runs.

Defaults can be overridden through JOBHARVEST_* environment variables,
typically loaded from a .env file by env.load_env().
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional


class ConfigurationError(Exception):
    """Raised when a required setting is missing before a run starts."""
    pass


ENV_PREFIX = "JOBHARVEST_"


@dataclass(frozen=True)
class Settings:
    database_path: Path = Path("data/jobs.db")
    crawler_admin_id: Optional[str] = None

    fetch_timeout: float = 15.0
    probe_timeout: float = 10.0
    page_delay: float = 2.0
    probe_delay: float = 0.3
    org_delay: float = 1.5

    max_board_postings: int = 120
    min_slug_length: int = 5
    description_max_length: int = 800

    liveness_batch_size: int = 10
    liveness_batch_delay: float = 2.0
    liveness_timeout: float = 10.0
    liveness_failure_threshold: int = 3
    liveness_method: str = "HEAD"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """
        Build settings from environment variables.

        JOBHARVEST_DB and CRAWLER_ADMIN_ID are read under their short names;
        every other field is read as JOBHARVEST_<FIELD_NAME>.

        Raises:
            ConfigurationError: If a value cannot be converted to its type
        """
        environ = os.environ if environ is None else environ
        values = {}

        if environ.get("JOBHARVEST_DB"):
            values["database_path"] = Path(environ["JOBHARVEST_DB"])
        if environ.get("CRAWLER_ADMIN_ID"):
            values["crawler_admin_id"] = environ["CRAWLER_ADMIN_ID"].strip()

        for field in fields(cls):
            if field.name in ("database_path", "crawler_admin_id"):
                continue
            raw = environ.get(ENV_PREFIX + field.name.upper())
            if raw is None or raw == "":
                continue
            try:
                values[field.name] = _coerce(field.default, raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {ENV_PREFIX}{field.name.upper()}: {raw!r}"
                ) from e

        return cls(**values)

    def require_admin_id(self) -> str:
        """Return the admin id harvested postings are attributed to."""
        if not self.crawler_admin_id:
            raise ConfigurationError(
                "CRAWLER_ADMIN_ID is not set; harvested postings need an owner"
            )
        return self.crawler_admin_id


def _coerce(default, raw: str):
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw.strip()
