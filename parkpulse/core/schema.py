"""
Core data model: parking records, positions, user reports and change events.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ParkingType(str, Enum):
    """Category of a parking location."""
    STREET = "street"
    GARAGE = "garage"
    LOT = "lot"
    METERED = "metered"

    @property
    def label(self) -> str:
        return _PARKING_TYPE_LABELS[self]


_PARKING_TYPE_LABELS = {
    ParkingType.STREET: "Street Parking",
    ParkingType.GARAGE: "Parking Garage",
    ParkingType.LOT: "Parking Lot",
    ParkingType.METERED: "Metered Parking",
}


@dataclass(frozen=True)
class Position:
    """A geographic coordinate in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        for name in ("latitude", "longitude"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number: {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite: {value}")
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass
class ParkingRecord:
    """A single parking location with capacity and live availability."""
    place_id: str
    name: str
    address: str
    coordinates: Position
    parking_type: ParkingType
    price_per_hour: Optional[float] = None
    rating: Optional[float] = None
    total_spaces: Optional[int] = None
    available_spaces: Optional[int] = None
    time_restriction: Optional[str] = None
    image_names: List[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=datetime.now)

    def copy(self) -> "ParkingRecord":
        """Return an independent snapshot of this record."""
        return replace(self, image_names=list(self.image_names))

    @classmethod
    def from_dict(cls, data: Dict[str, Any], now: Optional[datetime] = None) -> "ParkingRecord":
        """Build a record from a catalog entry, validating field ranges."""
        place_id = str(data.get("place_id") or "").strip()
        if not place_id:
            raise ValueError("place_id cannot be empty")

        coords = data.get("coordinates") or {}
        position = Position(float(coords["latitude"]), float(coords["longitude"]))

        price = data.get("price_per_hour")
        if price is not None and price < 0:
            raise ValueError(f"price_per_hour must be non-negative: {price}")

        rating = data.get("rating")
        if rating is not None and not 0.0 <= rating <= 5.0:
            raise ValueError(f"rating must be within [0, 5]: {rating}")

        total = data.get("total_spaces")
        if total is not None and total < 0:
            raise ValueError(f"total_spaces must be non-negative: {total}")

        available = data.get("available_spaces")
        if available is not None:
            available = max(0, int(available))
            if total is not None:
                available = min(int(total), available)

        return cls(
            place_id=place_id,
            name=data.get("name") or place_id,
            address=data.get("address") or "",
            coordinates=position,
            parking_type=ParkingType(data.get("type", "lot")),
            price_per_hour=float(price) if price is not None else None,
            rating=float(rating) if rating is not None else None,
            total_spaces=int(total) if total is not None else None,
            available_spaces=available,
            time_restriction=data.get("time_restriction"),
            image_names=list(data.get("image_names") or []),
            last_updated=now or datetime.now(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "place_id": self.place_id,
            "name": self.name,
            "address": self.address,
            "coordinates": {
                "latitude": self.coordinates.latitude,
                "longitude": self.coordinates.longitude,
            },
            "type": self.parking_type.value,
            "price_per_hour": self.price_per_hour,
            "rating": self.rating,
            "total_spaces": self.total_spaces,
            "available_spaces": self.available_spaces,
            "time_restriction": self.time_restriction,
            "image_names": list(self.image_names),
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class UserReport:
    """A user-submitted correction. Consumed immediately, never stored."""
    place_id: str
    available_spaces: Optional[int] = None
    is_full: bool = False
    note: Optional[str] = None
    user_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def count(cls, place_id: str, available_spaces: int, note: Optional[str] = None, user_id: Optional[str] = None) -> "UserReport":
        """Report an explicit number of available spaces."""
        return cls(place_id=place_id, available_spaces=available_spaces, note=note, user_id=user_id)

    @classmethod
    def full(cls, place_id: str, note: Optional[str] = None, user_id: Optional[str] = None) -> "UserReport":
        """Report that a location is full."""
        return cls(place_id=place_id, is_full=True, note=note, user_id=user_id)


@dataclass(frozen=True)
class ChangeEvent:
    """Notification delivered to store subscribers after a mutation."""
    kind: str  # initialize, periodic_update, availability_update, report_full
    place_ids: Tuple[str, ...]
    version: int
