"""Tests for shared model helpers."""

from datetime import UTC, datetime
from unittest.mock import patch

from cityweather.models.common import is_valid_location, today_iso


class TestTodayIso:
    def test_uses_utc_date(self):
        # 23:30 UTC is already the next day in Paris; the cache day follows UTC
        late = datetime(2026, 10, 19, 23, 30, tzinfo=UTC)
        with patch("cityweather.models.common.utc_now", return_value=late):
            assert today_iso() == "2026-10-19"


class TestIsValidLocation:
    def test_five_and_six_digits(self):
        assert is_valid_location("75101")
        assert is_valid_location("751011")

    def test_rejects_other_shapes(self):
        assert not is_valid_location("7510")
        assert not is_valid_location("7510a")
        assert not is_valid_location("7510111")
