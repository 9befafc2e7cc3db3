"""
Derived availability values: ratio, status bands, color, staleness and display text.
"""

from datetime import datetime, timedelta

import pytest
from unittest.mock import patch

from conftest import make_record
from parkpulse.core.availability import (
    availability_color,
    availability_percentage,
    availability_ratio,
    availability_status,
    format_distance,
    formatted_price,
    is_stale,
)


class TestRatio:
    """Test availability ratio edge cases."""

    def test_ratio(self):
        assert availability_ratio(make_record("a", total=400, available=100)) == 0.25

    def test_percentage(self):
        assert availability_percentage(make_record("a", total=200, available=50)) == 25.0

    @pytest.mark.parametrize("total,available", [(None, 10), (10, None), (0, 0), (None, None)])
    def test_ratio_undefined(self, total, available):
        record = make_record("a", total=total, available=available)
        assert availability_ratio(record) is None
        assert availability_percentage(record) is None


class TestStatusBands:
    """Test the four qualitative bands and their colors."""

    @pytest.mark.parametrize("available,status,color", [
        (100, "Plenty of spaces", "green"),
        (51, "Plenty of spaces", "green"),
        (50, "Moderate availability", "orange"),
        (21, "Moderate availability", "orange"),
        (20, "Limited spaces", "red"),
        (6, "Limited spaces", "red"),
        (5, "Nearly full", "red"),
        (0, "Nearly full", "red"),
    ])
    def test_band_boundaries(self, available, status, color):
        record = make_record("a", total=100, available=available)
        assert availability_status(record) == status
        assert availability_color(record) == color

    def test_unknown(self):
        record = make_record("a", total=None, available=None)
        assert availability_status(record) == "Unknown availability"
        assert availability_color(record) == "gray"

    def test_zero_capacity_is_unknown(self):
        assert availability_status(make_record("a", total=0, available=0)) == "Unknown availability"

    def test_full_report_lands_in_nearly_full(self):
        assert availability_status(make_record("a", total=400, available=20)) == "Nearly full"


class TestStaleness:
    """Test staleness against the 15 minute threshold."""

    def test_fresh(self):
        now = datetime(2024, 5, 1, 12, 0, 0)
        record = make_record("a", last_updated=now - timedelta(minutes=14))
        assert is_stale(record, now=now) is False

    def test_exactly_threshold_not_stale(self):
        now = datetime(2024, 5, 1, 12, 0, 0)
        record = make_record("a", last_updated=now - timedelta(seconds=900))
        assert is_stale(record, now=now) is False

    def test_stale(self):
        now = datetime(2024, 5, 1, 12, 0, 0)
        record = make_record("a", last_updated=now - timedelta(minutes=16))
        assert is_stale(record, now=now) is True

    def test_custom_threshold(self):
        now = datetime(2024, 5, 1, 12, 0, 0)
        record = make_record("a", last_updated=now - timedelta(seconds=61))
        assert is_stale(record, now=now, threshold_sec=60) is True

    def test_configured_threshold(self):
        now = datetime(2024, 5, 1, 12, 0, 0)
        record = make_record("a", last_updated=now - timedelta(seconds=120))
        with patch('parkpulse.core.availability.get_staleness_threshold', return_value=60):
            assert is_stale(record, now=now) is True


class TestDisplayText:
    """Test price and distance formatting."""

    def test_price(self):
        assert formatted_price(make_record("a", price_per_hour=4.0)) == "$4.00/hr"
        assert formatted_price(make_record("a", price_per_hour=0.0)) == "$0.00/hr"

    def test_price_unknown(self):
        assert formatted_price(make_record("a")) == "Price unavailable"

    @pytest.mark.parametrize("meters,text", [
        (0, "0m away"),
        (120.7, "120m away"),
        (999.9, "999m away"),
        (1000, "1.0 km away"),
        (1340, "1.3 km away"),
        (None, "Unknown distance"),
    ])
    def test_distance(self, meters, text):
        assert format_distance(meters) == text
