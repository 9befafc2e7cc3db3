"""
Request/response models for the parking availability API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator, model_validator

from ..core.availability import (
    availability_color,
    availability_percentage,
    availability_status,
    format_distance,
    formatted_price,
    is_stale,
)
from ..core.schema import ParkingRecord


class CoordinatesModel(BaseModel):
    latitude: float
    longitude: float


class ParkingResponse(BaseModel):
    place_id: str
    name: str
    address: str
    coordinates: CoordinatesModel
    type: str
    type_label: str
    price_per_hour: Optional[float] = None
    price_text: str
    rating: Optional[float] = None
    total_spaces: Optional[int] = None
    available_spaces: Optional[int] = None
    availability_percentage: Optional[float] = None
    status: str
    color: str
    stale: bool
    time_restriction: Optional[str] = None
    image_names: List[str] = []
    last_updated: datetime
    distance_m: Optional[float] = None
    distance_text: Optional[str] = None

    @classmethod
    def from_record(cls, record: ParkingRecord, distance_m: Optional[float] = None, now: Optional[datetime] = None):
        """Build the response with every derived value computed from one snapshot."""
        return cls(
            place_id=record.place_id,
            name=record.name,
            address=record.address,
            coordinates=CoordinatesModel(
                latitude=record.coordinates.latitude,
                longitude=record.coordinates.longitude,
            ),
            type=record.parking_type.value,
            type_label=record.parking_type.label,
            price_per_hour=record.price_per_hour,
            price_text=formatted_price(record),
            rating=record.rating,
            total_spaces=record.total_spaces,
            available_spaces=record.available_spaces,
            availability_percentage=availability_percentage(record),
            status=availability_status(record),
            color=availability_color(record),
            stale=is_stale(record, now=now),
            time_restriction=record.time_restriction,
            image_names=list(record.image_names),
            last_updated=record.last_updated,
            distance_m=distance_m,
            distance_text=format_distance(distance_m) if distance_m is not None else None,
        )


class ParkingListResponse(BaseModel):
    locations: List[ParkingResponse]
    count: int
    version: int


class NearbyResponse(BaseModel):
    origin: CoordinatesModel
    locations: List[ParkingResponse]
    count: int
    version: int


class ReportRequest(BaseModel):
    available_spaces: Optional[int] = None
    is_full: bool = False
    note: Optional[str] = None
    user_id: Optional[str] = None

    @field_validator('available_spaces', mode='before')
    @classmethod
    def available_must_be_integer(cls, v):
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError('available_spaces must be a whole number')
        return v

    @field_validator('available_spaces')
    @classmethod
    def available_must_be_non_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError('available_spaces must be non-negative')
        return v

    @field_validator('note')
    @classmethod
    def note_must_be_reasonable_length(cls, v):
        if v is not None and len(v) > 500:
            raise ValueError('note must be less than 500 characters')
        return v

    @model_validator(mode='after')
    def exactly_one_of_count_or_full(self):
        if self.is_full and self.available_spaces is not None:
            raise ValueError('send either available_spaces or is_full, not both')
        if not self.is_full and self.available_spaces is None:
            raise ValueError('available_spaces is required unless is_full is true')
        return self


class ReportResponse(BaseModel):
    place_id: str
    applied: bool
    available_spaces: Optional[int] = None
    reason: str
    version: int


class LocationRequest(BaseModel):
    latitude: float
    longitude: float

    @field_validator('latitude')
    @classmethod
    def latitude_in_range(cls, v):
        if not -90.0 <= v <= 90.0:
            raise ValueError('latitude must be within [-90, 90]')
        return v

    @field_validator('longitude')
    @classmethod
    def longitude_in_range(cls, v):
        if not -180.0 <= v <= 180.0:
            raise ValueError('longitude must be within [-180, 180]')
        return v


class AuthorizationRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def status_must_be_valid(cls, v):
        valid_statuses = ['not_determined', 'denied', 'authorized_when_in_use', 'authorized_always']
        if v not in valid_statuses:
            raise ValueError(f'status must be one of: {valid_statuses}')
        return v


class LocationResponse(BaseModel):
    latitude: float
    longitude: float
    authorized: bool
    authorization_status: str
    force_default: bool


class HealthResponse(BaseModel):
    status: str
    version: str
    record_count: int
    store_version: int
    simulation: str


class SimulationStatusResponse(BaseModel):
    status: str
    tasks: Dict[str, Any]
    uptime_sec: float
