# tests/test_billing.py
"""Unit tests for fee calculation and parking window validation."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from app.services.billing import calculate_fee, duration_minutes, estimate, validate_window
from app.utils.exceptions import ValidationFailed

START = datetime(2026, 10, 20, 8, 0, 0)


class TestCalculateFee:
    def test_one_minute_is_prorated_and_rounded_up(self):
        # 1/60 × 1000 = 16.67
        assert calculate_fee(START, START + timedelta(minutes=1)) == (1, 17)

    def test_exact_hours(self):
        assert calculate_fee(START, START + timedelta(hours=2)) == (120, 2000)

    def test_partial_hour_is_prorated(self):
        assert calculate_fee(START, START + timedelta(hours=2, minutes=30)) == (150, 2500)
        assert calculate_fee(START, START + timedelta(minutes=90)) == (90, 1500)

    def test_seconds_round_minutes_up(self):
        assert duration_minutes(START, START + timedelta(minutes=60, seconds=1)) == 61
        # 61/60 × 1000 = 1016.67
        assert calculate_fee(START, START + timedelta(minutes=60, seconds=1))[1] == 1017

    def test_zero_length(self):
        assert calculate_fee(START, START) == (0, 0)

    def test_custom_rate(self):
        assert calculate_fee(START, START + timedelta(minutes=90), hourly_rate=500) == (90, 750)


class TestEstimate:
    def test_returns_rate_and_currency(self):
        result = estimate(START, START + timedelta(hours=3))
        assert result == {"duration": 180, "amount": 3000, "hourly_rate": 1000, "currency": "RWF"}

    def test_missing_times(self):
        with pytest.raises(ValidationFailed, match="required"):
            estimate(None, START)

    def test_exit_before_entry(self):
        with pytest.raises(ValidationFailed, match="after entry"):
            estimate(START, START - timedelta(minutes=5))


class TestValidateWindow:
    NOW = START - timedelta(hours=1)

    def test_valid_window(self):
        validate_window(START, START + timedelta(hours=2), "meeting", now=self.NOW)

    def test_missing_is_checked_first(self):
        with pytest.raises(ValidationFailed, match="Entry and exit times are required"):
            validate_window(None, None, "x" * 600, now=self.NOW)

    def test_entry_in_past(self):
        with pytest.raises(ValidationFailed, match="future"):
            validate_window(self.NOW - timedelta(minutes=1), START, now=self.NOW)

    def test_entry_equal_to_now_is_rejected(self):
        with pytest.raises(ValidationFailed, match="future"):
            validate_window(self.NOW, START, now=self.NOW)

    def test_exit_not_after_entry(self):
        with pytest.raises(ValidationFailed, match="Exit time must be after entry time"):
            validate_window(START, START, now=self.NOW)

    def test_exactly_max_hours_is_allowed(self):
        validate_window(START, START + timedelta(hours=24), now=self.NOW)

    def test_longer_than_max_hours(self):
        with pytest.raises(ValidationFailed, match="cannot exceed 24 hours"):
            validate_window(START, START + timedelta(hours=24, minutes=1), now=self.NOW)

    def test_reason_too_long(self):
        with pytest.raises(ValidationFailed, match="500"):
            validate_window(START, START + timedelta(hours=1), "x" * 501, now=self.NOW)
