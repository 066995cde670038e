"""
Structured logging for the jobboard data layer.

Provides centralized logging with console and optional file output,
tagged messages, and metrics tracking for monitoring database health.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for monitoring database operations.
    """

    def __init__(
        self,
        name: str = "jobboard",
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
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self.metrics = {
            "operations_attempted": 0,
            "operations_successful": 0,
            "operations_failed": 0,
            "transactions": 0,
            "errors_by_type": {},
            "operation_success_rate": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"jobboard_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, tag: Optional[str] = None, **kwargs):
        """Log debug message with optional tag and context."""
        self._log(logging.DEBUG, message, tag, kwargs)

    def info(self, message: str, tag: Optional[str] = None, **kwargs):
        """Log info message with optional tag and context."""
        self._log(logging.INFO, message, tag, kwargs)

    def warning(self, message: str, tag: Optional[str] = None, **kwargs):
        """Log warning message with optional tag and context."""
        self._log(logging.WARNING, message, tag, kwargs)

    def error(self, message: str, tag: Optional[str] = None, **kwargs):
        """Log error message with optional tag and context."""
        self._log(logging.ERROR, message, tag, kwargs)

    def critical(self, message: str, tag: Optional[str] = None, **kwargs):
        """Log critical message with optional tag and context."""
        self._log(logging.CRITICAL, message, tag, kwargs)

    def _log(self, level: int, message: str, tag: Optional[str], context: dict):
        """Internal logging method with tag prefix and context."""
        if tag:
            message = f"[{tag.upper()}] {message}"
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_transaction(self):
        """Increment transaction counter."""
        self.metrics["transactions"] += 1

    def record_operation_attempt(self, operation: str):
        """Record an attempt of a repository operation."""
        self.metrics["operations_attempted"] += 1
        if operation not in self.metrics["operation_success_rate"]:
            self.metrics["operation_success_rate"][operation] = {
                "attempts": 0,
                "successes": 0
            }
        self.metrics["operation_success_rate"][operation]["attempts"] += 1

    def record_operation_success(self, operation: str):
        """Record successful operation."""
        self.metrics["operations_successful"] += 1
        if operation in self.metrics["operation_success_rate"]:
            self.metrics["operation_success_rate"][operation]["successes"] += 1

    def record_operation_failure(self, operation: str, error_type: str):
        """Record failed operation."""
        self.metrics["operations_failed"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = self.metrics.copy()
        for operation, stats in metrics_copy["operation_success_rate"].items():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(
                    stats["successes"] / stats["attempts"], 3
                )

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total_attempts = metrics["operations_attempted"]
        total_successes = metrics["operations_successful"]
        overall_rate = 0
        if total_attempts > 0:
            overall_rate = round(total_successes / total_attempts * 100, 1)

        self.info("=== Database Session Metrics ===")
        self.info(f"Transactions: {metrics['transactions']}")
        self.info(f"Operations: {total_successes}/{total_attempts} ({overall_rate}% success)")

        if metrics["operation_success_rate"]:
            self.info("Operation Success Rates:")
            for operation, stats in metrics["operation_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {operation}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "jobboard",
    level: Optional[str] = None,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Level defaults to LOG_LEVEL, and file output is only enabled when
    LOG_DIR is set, unless the caller says otherwise.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        level = level or os.environ.get("LOG_LEVEL", "INFO")
        log_dir = os.environ.get("LOG_DIR")
        if log_dir and "log_dir" not in kwargs:
            kwargs["log_dir"] = Path(log_dir)
        kwargs.setdefault("enable_file", bool(log_dir) or "log_dir" in kwargs)
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
