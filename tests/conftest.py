"""
Shared fixtures: a controllable clock, small record sets and seeded stores.
"""

import random
from datetime import datetime, timedelta

import pytest

from parkpulse.core.schema import ParkingRecord, ParkingType, Position
from parkpulse.core.store import ParkingStore

ORIGIN = Position(34.1478, -118.1445)
METERS_PER_DEG_LAT = 111195.0


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 5, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


def make_record(place_id, meters_north=0.0, total=100, available=50, origin=ORIGIN, **kwargs):
    """Build a record `meters_north` of `origin` on the same meridian."""
    kwargs.setdefault("name", place_id.replace("-", " ").title())
    kwargs.setdefault("address", f"{place_id} street")
    kwargs.setdefault("parking_type", ParkingType.LOT)
    kwargs.setdefault("last_updated", datetime(2024, 5, 1, 12, 0, 0))
    return ParkingRecord(
        place_id=place_id,
        coordinates=Position(origin.latitude + meters_north / METERS_PER_DEG_LAT, origin.longitude),
        total_spaces=total,
        available_spaces=available,
        **kwargs
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sample_records():
    """Four records at increasing distance, one with unknown capacity."""
    return [
        make_record("far-garage", meters_north=5000, total=400, available=85, parking_type=ParkingType.GARAGE),
        make_record("near-lot", meters_north=100, total=650, available=248),
        make_record("street-spot", meters_north=-2500, total=None, available=None, parking_type=ParkingType.STREET),
        make_record("mid-meters", meters_north=1200, total=60, available=8, parking_type=ParkingType.METERED),
    ]


@pytest.fixture
def store(sample_records, clock):
    """Initialised store over sample_records with a deterministic RNG and clock."""
    s = ParkingStore(rng=random.Random(1234), clock=clock)
    s.initialize(sample_records)
    return s


@pytest.fixture
def seeded_store(clock):
    """Store initialised from the bundled seed catalog."""
    s = ParkingStore(rng=random.Random(42), clock=clock)
    s.initialize()
    return s
