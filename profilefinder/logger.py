"""
Structured logging for profilefinder.

Provides centralized logging with console and optional file output, plus
lookup metrics so operators can see which sources are answering and why the
others came back empty.
"""

import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks per-service lookup metrics; safe to use from adapter worker threads.
    """

    def __init__(
        self,
        name: str = "profilefinder",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console (stderr)
        """
        self.logger = logging.getLogger(name)
        self._lock = threading.Lock()
        self.metrics = self._empty_metrics()
        self.configure(level, log_dir, enable_file, enable_console)

    def configure(
        self,
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
        enable_console: bool = True,
    ):
        """Replace handlers and level; metrics are kept."""
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.propagate = False

        if enable_console:
            # stderr keeps stdout free for JSON results
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"profilefinder_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(threadName)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    @staticmethod
    def _empty_metrics() -> dict:
        return {
            "api_calls": 0,
            "lookups_attempted": 0,
            "lookups_found": 0,
            "lookups_empty": 0,
            "errors_by_type": {},
            "service_hit_rate": {},
        }

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if not self.logger.isEnabledFor(level):
            return
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_api_call(self):
        with self._lock:
            self.metrics["api_calls"] += 1

    def record_lookup_attempt(self, service: str):
        with self._lock:
            self.metrics["lookups_attempted"] += 1
            stats = self.metrics["service_hit_rate"].setdefault(
                service, {"attempts": 0, "hits": 0}
            )
            stats["attempts"] += 1

    def record_lookup_found(self, service: str):
        with self._lock:
            self.metrics["lookups_found"] += 1
            if service in self.metrics["service_hit_rate"]:
                self.metrics["service_hit_rate"][service]["hits"] += 1

    def record_lookup_failure(self, service: str, error_type: str):
        """Record an empty lookup and the reason it came back empty."""
        with self._lock:
            self.metrics["lookups_empty"] += 1
            errors = self.metrics["errors_by_type"]
            errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return a snapshot of current metrics with hit rates filled in."""
        with self._lock:
            snapshot = json.loads(json.dumps(self.metrics))
        for stats in snapshot["service_hit_rate"].values():
            if stats["attempts"] > 0:
                stats["hit_rate"] = round(stats["hits"] / stats["attempts"], 3)
        return snapshot

    def reset_metrics(self):
        with self._lock:
            self.metrics = self._empty_metrics()

    def log_metrics_summary(self):
        metrics = self.get_metrics()

        attempts = metrics["lookups_attempted"]
        found = metrics["lookups_found"]
        overall_rate = 0
        if attempts > 0:
            overall_rate = round(found / attempts * 100, 1)

        self.info("=== Lookup Session Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']}")
        self.info(f"Lookups: {found}/{attempts} ({overall_rate}% found)")

        if metrics["service_hit_rate"]:
            self.info("Service Hit Rates:")
            for service, stats in metrics["service_hit_rate"].items():
                rate = stats.get("hit_rate", 0) * 100
                self.info(f"  {service}: {stats['hits']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Empty Lookups By Cause:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None
_global_lock = threading.Lock()


def get_logger(
    name: str = "profilefinder",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    with _global_lock:
        if _global_logger is None:
            _global_logger = StructuredLogger(name=name, level=level, **kwargs)
    return _global_logger


def configure_logger(settings) -> StructuredLogger:
    """Apply level and file output from Settings to the global logger."""
    logger = get_logger()
    logger.configure(
        level=settings.log_level,
        log_dir=Path(settings.log_dir) if settings.log_dir else None,
        enable_file=bool(settings.log_dir),
    )
    return logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
