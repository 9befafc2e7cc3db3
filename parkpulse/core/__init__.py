"""
Parking availability core - store, ranking, perturbation and report ingestion.
"""

# Package initialization for core module
from .errors import ParkPulseError, StoreError, CatalogError, ReportValidationError
from .schema import ParkingRecord, ParkingType, Position, UserReport, ChangeEvent
from .store import ParkingStore, WriteResult
from .reports import ReportResult, submit_report, validate_report
from .location import AuthorizationStatus, LocationProvider
from .heartbeat import Heartbeat, start_simulation

__all__ = [
    'ParkPulseError',
    'StoreError',
    'CatalogError',
    'ReportValidationError',
    'ParkingRecord',
    'ParkingType',
    'Position',
    'UserReport',
    'ChangeEvent',
    'ParkingStore',
    'WriteResult',
    'ReportResult',
    'submit_report',
    'validate_report',
    'AuthorizationStatus',
    'LocationProvider',
    'Heartbeat',
    'start_simulation',
]
