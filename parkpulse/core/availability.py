"""
Derived availability values: ratio, qualitative status, color tag and staleness.
Nothing here is stored on the record; every value is computed on demand.
"""

from datetime import datetime
from typing import Optional, Tuple

from .config import get_staleness_threshold
from .schema import ParkingRecord

UNKNOWN_STATUS = "Unknown availability"

# (lower bound exclusive, status, color) checked top to bottom
_BANDS = [
    (0.50, "Plenty of spaces", "green"),
    (0.20, "Moderate availability", "orange"),
    (0.05, "Limited spaces", "red"),
]
_NEARLY_FULL = ("Nearly full", "red")


def availability_ratio(record: ParkingRecord) -> Optional[float]:
    total = record.total_spaces
    available = record.available_spaces
    if total is None or available is None or total <= 0:
        return None
    return available / float(total)


def availability_percentage(record: ParkingRecord) -> Optional[float]:
    ratio = availability_ratio(record)
    if ratio is None:
        return None
    return ratio * 100.0


def _band(record: ParkingRecord) -> Tuple[str, str]:
    ratio = availability_ratio(record)
    if ratio is None:
        return UNKNOWN_STATUS, "gray"
    for lower, status, color in _BANDS:
        if ratio > lower:
            return status, color
    return _NEARLY_FULL


def availability_status(record: ParkingRecord) -> str:
    """Human-readable status, e.g. 'Plenty of spaces'."""
    return _band(record)[0]


def availability_color(record: ParkingRecord) -> str:
    """Color tag for the status: green, orange, red or gray."""
    return _band(record)[1]


def is_stale(record: ParkingRecord, now: Optional[datetime] = None, threshold_sec: Optional[float] = None) -> bool:
    """True when the record's availability is older than the staleness threshold."""
    now = now or datetime.now()
    threshold = get_staleness_threshold() if threshold_sec is None else threshold_sec
    return (now - record.last_updated).total_seconds() > threshold


def formatted_price(record: ParkingRecord) -> str:
    if record.price_per_hour is None:
        return "Price unavailable"
    return f"${record.price_per_hour:.2f}/hr"


def format_distance(meters: Optional[float]) -> str:
    if meters is None:
        return "Unknown distance"
    if meters < 1000:
        return f"{int(meters)}m away"
    return f"{meters / 1000:.1f} km away"
