"""
User report ingestion - validates crowdsourced corrections and applies them to the store.
Reports are consumed immediately and never retained.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import ReportValidationError
from .schema import UserReport
from .store import ParkingStore
from ..util.logging import logger


@dataclass
class ReportResult:
    """Outcome of submitting one report."""
    place_id: str
    applied: bool
    available_spaces: Optional[int]
    reason: str
    version: int = 0


def validate_report(report: UserReport) -> None:
    """Reject reports the store must never see. Raises ReportValidationError."""
    if not isinstance(report.place_id, str) or not report.place_id.strip():
        raise ReportValidationError("place_id cannot be empty")

    if report.is_full:
        if report.available_spaces is not None:
            raise ReportValidationError("a full report cannot also carry available_spaces")
        return

    count = report.available_spaces
    if count is None:
        raise ReportValidationError("report must carry available_spaces or is_full")
    # bool is an int subclass; True is not a space count
    if isinstance(count, bool) or not isinstance(count, int):
        raise ReportValidationError(f"available_spaces must be an integer: {count!r}")
    if count < 0:
        raise ReportValidationError(f"available_spaces must be non-negative: {count}")


def submit_report(store: ParkingStore, report: UserReport) -> ReportResult:
    """
    Validate a report and route it to the matching store operation.

    Unknown place ids are not an error: the result has applied=False.
    """
    validate_report(report)

    if report.is_full:
        kind = "full"
        outcome = store.write_full(report.place_id)
    else:
        kind = "count"
        outcome = store.write_availability(report.place_id, report.available_spaces)

    logger.log_report(
        report.place_id,
        kind,
        outcome.applied,
        {
            "reason": outcome.reason,
            "has_note": bool(report.note),
            "anonymous": report.user_id is None,
        },
    )

    return ReportResult(
        place_id=report.place_id,
        applied=outcome.applied,
        available_spaces=outcome.record.available_spaces if outcome.record is not None else None,
        reason=outcome.reason,
        version=outcome.version,
    )
