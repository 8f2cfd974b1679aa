"""
Structured logging for freelancematch.

Console and daily file output with a JSON context suffix, plus counters
for AI calls, fallbacks and matching volume so a session can be summarized.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Logger writing to console and file, tracking matching metrics.
    """

    def __init__(
        self,
        name: str = "freelancematch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
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
        self.logger.propagate = False

        self.metrics = {
            "llm_calls": 0,
            "llm_failures": 0,
            "matches_requested": 0,
            "fallbacks": 0,
            "freelancers_scored": 0,
            "errors_by_type": {},
        }

        self.configure(level, log_dir, enable_file, enable_console)

    def configure(
        self,
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """Replace the handlers, keeping collected metrics."""
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()
        self.logger.setLevel(getattr(logging, level.upper()))

        if enable_console:
            # stderr keeps CLI output on stdout clean
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"freelancematch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking

    def record_llm_call(self):
        self.metrics["llm_calls"] += 1

    def record_llm_failure(self, error_type: str):
        self.metrics["llm_failures"] += 1
        self.record_error(error_type)

    def record_match_request(self, candidates: int = 0):
        """Count a matching request and the freelancers scored for it."""
        self.metrics["matches_requested"] += 1
        self.metrics["freelancers_scored"] += candidates

    def record_fallback(self):
        self.metrics["fallbacks"] += 1

    def record_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        metrics_copy = dict(self.metrics)
        metrics_copy["errors_by_type"] = dict(self.metrics["errors_by_type"])
        calls = metrics_copy["llm_calls"]
        metrics_copy["llm_success_rate"] = (
            round((calls - metrics_copy["llm_failures"]) / calls, 3) if calls else None
        )
        return metrics_copy

    def log_metrics_summary(self):
        metrics = self.get_metrics()

        self.info("=== Matching Session Metrics ===")
        self.info(f"Match requests: {metrics['matches_requested']} "
                  f"({metrics['freelancers_scored']} freelancers scored)")
        self.info(f"AI calls: {metrics['llm_calls']} (failures: {metrics['llm_failures']})")
        if metrics["llm_success_rate"] is not None:
            self.info(f"AI success rate: {metrics['llm_success_rate'] * 100:.1f}%")
        self.info(f"Local fallbacks: {metrics['fallbacks']}")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "freelancematch",
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

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
