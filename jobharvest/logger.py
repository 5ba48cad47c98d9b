"""
Structured logging for jobharvest.

Console and daily file output, plus per-platform probe counters that
discovery and harvest runs print at the end of a session.
"""

import copy
import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _platform_stats() -> dict:
    return {"attempts": 0, "matches": 0, "misses": {}}


class StructuredLogger:
    """
    Logger with key=value context and probe counters.

    Counters are updated from thread-pool workers during website discovery,
    so every update holds the instance lock.
    """

    def __init__(
        self,
        name: str = "jobharvest",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.handlers.clear()
        self.logger.propagate = False

        self._lock = threading.Lock()
        self.metrics = {"requests": 0, "platforms": {}}

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
            self.logger.addHandler(console_handler)

        if enable_file:
            log_dir = log_dir or Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"jobharvest_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
            self.logger.addHandler(file_handler)

    def set_level(self, level: str):
        """Change the console threshold; the file log keeps everything."""
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(getattr(logging, level.upper()))

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Probe counters

    def _platform(self, platform: str) -> dict:
        return self.metrics["platforms"].setdefault(platform, _platform_stats())

    def record_request(self):
        """Count one outbound HTTP request."""
        with self._lock:
            self.metrics["requests"] += 1

    def record_probe_attempt(self, platform: str):
        """Count one candidate identifier tried on a platform."""
        with self._lock:
            self._platform(platform)["attempts"] += 1

    def record_probe_match(self, platform: str):
        """Count a probe that answered with a postings list."""
        with self._lock:
            self._platform(platform)["matches"] += 1

    def record_probe_miss(self, platform: str, reason: str):
        """Count a probe that found nothing, by reason (HTTPError_404, IdentityMismatch, ...)."""
        with self._lock:
            misses = self._platform(platform)["misses"]
            misses[reason] = misses.get(reason, 0) + 1

    def get_metrics(self) -> dict:
        """
        Snapshot of the counters.

        Each platform entry gains "match_rate" (matches / attempts); the
        top level gains "attempts", "matches" and "misses_by_reason" totals.
        """
        with self._lock:
            snapshot = copy.deepcopy(self.metrics)

        misses_by_reason: Dict[str, int] = {}
        for stats in snapshot["platforms"].values():
            attempts = stats["attempts"]
            stats["match_rate"] = round(stats["matches"] / attempts, 3) if attempts else 0.0
            for reason, count in stats["misses"].items():
                misses_by_reason[reason] = misses_by_reason.get(reason, 0) + count

        platforms = snapshot["platforms"].values()
        snapshot["attempts"] = sum(s["attempts"] for s in platforms)
        snapshot["matches"] = sum(s["matches"] for s in platforms)
        snapshot["misses_by_reason"] = misses_by_reason
        return snapshot

    def log_metrics_summary(self):
        metrics = self.get_metrics()
        attempts, matches = metrics["attempts"], metrics["matches"]
        overall = round(matches / attempts * 100, 1) if attempts else 0.0

        self.info("=== Probe Session Metrics ===")
        self.info(f"Requests: {metrics['requests']}")
        self.info(f"Probes: {matches}/{attempts} ({overall}% matched)")

        for platform, stats in sorted(metrics["platforms"].items()):
            misses = ", ".join(f"{reason}={count}" for reason, count in sorted(stats["misses"].items()))
            self.info(
                f"  {platform}: {stats['matches']}/{stats['attempts']} "
                f"({stats['match_rate'] * 100:.1f}%)" + (f" misses: {misses}" if misses else "")
            )


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "jobharvest", level: str = "INFO", **kwargs) -> StructuredLogger:
    """Get or create the process-wide logger; kwargs only apply on first call."""
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the process-wide logger so the next get_logger builds a fresh one."""
    global _global_logger
    _global_logger = None
