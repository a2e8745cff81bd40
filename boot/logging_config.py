"""Console logging for the bot and aggregation of categorised errors.

``log_structured_error`` is the single sink for failures reported through
``boot.errors.handling.log_error``. Each call writes one line and feeds the
process-wide ``ErrorAggregator``, which raises a critical alert when one
category (network, store, parsing...) fires too often within an hour.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any

import colorlog

from .constants import ERROR_ALERT_RATE_PER_HOUR

HISTORY_PER_CATEGORY = 1000
WINDOW_SECONDS = 3600
# Third-party loggers that flood the console at DEBUG
QUIET_LOGGERS = ("aiohttp", "asyncio", "charset_normalizer")


@dataclass
class CategoryStats:
    total_count: int
    recent_count: int
    rate_per_hour: float
    last_message: str | None
    last_context: dict[str, Any]


class ErrorAggregator:
    """Keeps a bounded history of errors per category.

    ``rate_per_hour`` is the number of errors seen in the last hour, so a
    burst of failing lookups alerts quickly and quietens once it stops.
    """

    def __init__(self, history: int = HISTORY_PER_CATEGORY, clock=time.monotonic):
        self._history = history
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, deque[tuple[float, str, dict[str, Any]]]] = {}

    def record_error(self, error_type: str, message: str, context: dict[str, Any] = None) -> None:
        with self._lock:
            entries = self._entries.setdefault(error_type, deque(maxlen=self._history))
            entries.append((self._clock(), message, dict(context or {})))

    def stats(self, error_type: str) -> CategoryStats | None:
        with self._lock:
            entries = self._entries.get(error_type)
            if not entries:
                return None
            cutoff = self._clock() - WINDOW_SECONDS
            recent = sum(1 for stamp, _, _ in entries if stamp >= cutoff)
            _, last_message, last_context = entries[-1]
            return CategoryStats(
                total_count=len(entries),
                recent_count=recent,
                rate_per_hour=float(recent),
                last_message=last_message,
                last_context=last_context,
            )

    def get_error_summary(self) -> dict[str, CategoryStats]:
        with self._lock:
            categories = list(self._entries)
        summary = {}
        for category in categories:
            stats = self.stats(category)
            if stats is not None:
                summary[category] = stats
        return summary

    def should_alert(self, error_type: str, threshold_rate: float = ERROR_ALERT_RATE_PER_HOUR) -> bool:
        stats = self.stats(error_type)
        return stats is not None and stats.rate_per_hour > threshold_rate

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("🚨 ERROR SUMMARY REPORT")
        for category, stats in sorted(summary.items()):
            logging.warning(
                f"  {category}: {stats.total_count} total, {stats.recent_count} in last hour"
            )
            if stats.last_message:
                logging.warning(f"    Last: {stats.last_message}")


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: Exception = None,
    context: dict[str, Any] = None,
    level: int = logging.ERROR,
) -> None:
    """Write one ``[CATEGORY] message | Exception: ... | Context: ...`` line.

    Args:
        error_type: Category such as 'network', 'store' or 'parsing'.
        message: What failed, including the error text.
        exception: The exception being reported, if any.
        context: Extra key/value pairs (user, query, url...).
        level: Logging level for the line.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))

    error_aggregator.record_error(error_type, message, context)
    if error_aggregator.should_alert(error_type):
        stats = error_aggregator.stats(error_type)
        logging.critical(
            f"🚨 HIGH ERROR RATE ALERT: {stats.recent_count} {error_type} errors in the last hour"
        )


def debug_enabled() -> bool:
    return os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")


class LoggerConfigurator:
    """Installs one colorlog handler on the root logger.

    ``DEBUG=true|1|yes`` switches the level to DEBUG, which also logs raw
    IRC traffic and HTTP requests.
    """

    FORMAT = "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s"
    LOG_COLORS = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "magenta",
    }

    def __init__(self, stream=None):
        self.stream = stream or sys.stderr

    def build_handler(self) -> logging.Handler:
        handler = colorlog.StreamHandler(self.stream)
        handler.setFormatter(
            colorlog.ColoredFormatter(
                self.FORMAT,
                datefmt="%Y-%m-%d %H:%M:%S",
                log_colors=self.LOG_COLORS,
                secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
                reset=True,
            )
        )
        return handler

    def configure(self) -> int:
        """Replace root handlers and return the level in effect."""
        level = logging.DEBUG if debug_enabled() else logging.INFO
        root = logging.getLogger()
        for existing in list(root.handlers):
            root.removeHandler(existing)
        root.addHandler(self.build_handler())
        root.setLevel(level)
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)
        atexit.register(self._log_final_error_summary)
        return level

    @staticmethod
    def _log_final_error_summary() -> None:
        logging.info("📊 Final error summary before shutdown:")
        error_aggregator.log_summary_report()
