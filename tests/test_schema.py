"""
Data model: positions, records, reports.
"""

import math
from datetime import datetime

import pytest

from parkpulse.core.schema import ParkingRecord, ParkingType, Position, UserReport


class TestPosition:
    """Test coordinate validation."""

    def test_valid(self):
        assert Position(34.1478, -118.1445).as_tuple() == (34.1478, -118.1445)

    @pytest.mark.parametrize("lat,lon", [
        (math.nan, 0.0),
        (0.0, math.inf),
        (91.0, 0.0),
        (0.0, -180.5),
    ])
    def test_invalid(self, lat, lon):
        with pytest.raises(ValueError):
            Position(lat, lon)

    def test_rejects_non_numbers(self):
        with pytest.raises(ValueError, match="must be a number"):
            Position("34.1", -118.1)
        with pytest.raises(ValueError, match="must be a number"):
            Position(True, -118.1)


class TestParkingRecord:
    """Test building records from catalog entries."""

    ENTRY = {
        "place_id": "plaza-pasadena-garage",
        "name": "Plaza Las Fuentes Garage",
        "address": "121 S Los Robles Ave, Pasadena, CA 91101",
        "coordinates": {"latitude": 34.1457, "longitude": -118.1419},
        "type": "garage",
        "price_per_hour": 4.00,
        "rating": 4.2,
        "total_spaces": 650,
        "available_spaces": 248,
        "time_restriction": "Open 24 hours",
        "image_names": ["front.jpg"],
    }

    def test_from_dict(self):
        now = datetime(2024, 5, 1, 12, 0, 0)
        record = ParkingRecord.from_dict(self.ENTRY, now=now)
        assert record.place_id == "plaza-pasadena-garage"
        assert record.coordinates == Position(34.1457, -118.1419)
        assert record.parking_type is ParkingType.GARAGE
        assert record.parking_type.label == "Parking Garage"
        assert record.available_spaces == 248
        assert record.last_updated == now

    def test_round_trip_through_to_dict(self):
        record = ParkingRecord.from_dict(self.ENTRY)
        data = record.to_dict()
        assert data["type"] == "garage"
        assert data["coordinates"] == {"latitude": 34.1457, "longitude": -118.1419}
        assert ParkingRecord.from_dict(data).available_spaces == 248

    def test_available_clamped_to_total(self):
        entry = dict(self.ENTRY, available_spaces=900)
        assert ParkingRecord.from_dict(entry).available_spaces == 650

    def test_optional_fields(self):
        entry = {
            "place_id": "side-street",
            "coordinates": {"latitude": 34.0, "longitude": -118.0},
            "type": "street",
        }
        record = ParkingRecord.from_dict(entry)
        assert record.total_spaces is None
        assert record.available_spaces is None
        assert record.price_per_hour is None
        assert record.image_names == []
        assert record.name == "side-street"

    @pytest.mark.parametrize("field,value", [
        ("price_per_hour", -1.0),
        ("rating", 5.5),
        ("total_spaces", -3),
        ("type", "helipad"),
        ("place_id", "  "),
    ])
    def test_invalid_fields(self, field, value):
        with pytest.raises(ValueError):
            ParkingRecord.from_dict(dict(self.ENTRY, **{field: value}))

    def test_copy_is_independent(self):
        record = ParkingRecord.from_dict(self.ENTRY)
        clone = record.copy()
        clone.image_names.append("other.jpg")
        clone.available_spaces = 1
        assert record.image_names == ["front.jpg"]
        assert record.available_spaces == 248


class TestUserReport:
    """Test report factories."""

    def test_count(self):
        report = UserReport.count("lot", 12, note="busy", user_id="anon-1")
        assert report.available_spaces == 12
        assert report.is_full is False
        assert report.note == "busy"

    def test_full(self):
        report = UserReport.full("lot")
        assert report.is_full is True
        assert report.available_spaces is None
        assert isinstance(report.timestamp, datetime)
