"""
Structured logging for store mutations, user reports and heartbeat tasks.
"""

import logging
from typing import Any, Dict, Iterable


class StructuredLogger:
    """Structured logger for store, report and heartbeat operations."""

    def __init__(self, name: str = "parkpulse"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.info(message)

    def log_store_mutation(self, operation: str, place_ids: Iterable[str], version: int, status: str = "success"):
        """Log a mutation of the parking store."""
        place_ids = list(place_ids)
        details: Dict[str, Any] = {"version": version, "count": len(place_ids)}
        if len(place_ids) <= 3:
            details["place_ids"] = place_ids

        self.log_operation(f"store.{operation}", status, details)

    def log_report(self, place_id: str, kind: str, applied: bool, details: Dict[str, Any] = None):
        """Log the outcome of a user report. Notes and submitter ids are never logged."""
        log_details = {"place_id": place_id, "kind": kind}
        if details:
            log_details.update(details)

        self.log_operation("report", "applied" if applied else "ignored", log_details)

    def log_heartbeat_task(self, task_name: str, start_time: float, end_time: float, status: str = "success", details: Dict[str, Any] = None):
        """Log heartbeat task execution."""
        duration_ms = round((end_time - start_time) * 1000, 2)
        log_details = {"duration_ms": duration_ms}
        if details:
            log_details.update(details)
        elif status == "success":
            log_details["message"] = f"Heartbeat task '{task_name}' completed in {duration_ms}ms"
        elif status == "failed":
            log_details["message"] = f"Heartbeat task '{task_name}' failed after {duration_ms}ms"

        self.log_operation(f"heartbeat.{task_name}", status, log_details)

    def log_subscriber_error(self, kind: str, error: Exception):
        """Log a change subscriber that raised while being notified."""
        self.logger.error(f"Operation: store.notify, Status: failed, Details: {{'kind': '{kind}', 'error': '{error}'}}")

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
