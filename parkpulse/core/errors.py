"""
Exceptions raised by the parking availability core.
"""


class ParkPulseError(Exception):
    """Base class for all parkpulse errors."""


class StoreError(ParkPulseError):
    """Raised when the parking store is used incorrectly (e.g. initialised twice)."""


class CatalogError(ParkPulseError):
    """Raised when the seed catalog cannot be read or contains invalid entries."""


class ReportValidationError(ParkPulseError):
    """Raised when a user report fails validation before reaching the store."""
