"""Unit tests for business-day arithmetic."""

from datetime import datetime, timedelta, timezone

import pytest

from dailyledger.core.exceptions import ValidationError
from dailyledger.ledger.business_day import (
    business_date,
    business_time,
    business_today,
    parse_business_date,
    stamp_for_business_date,
)

from factories import NOW


class TestBusinessDate:
    """Tests for business_date."""

    def test_shifts_by_four_hours(self):
        assert business_date(datetime(2024, 5, 2, 3, 59, tzinfo=timezone.utc)) == "2024-05-01"
        assert business_date(datetime(2024, 5, 2, 4, 0, tzinfo=timezone.utc)) == "2024-05-02"

    def test_naive_timestamp_is_utc(self):
        assert business_date(datetime(2024, 5, 2, 1, 0)) == "2024-05-01"

    def test_independent_of_timestamp_zone(self):
        caracas = timezone(timedelta(hours=-4))
        madrid = timezone(timedelta(hours=2))
        late_evening = datetime(2024, 5, 1, 23, 30, tzinfo=caracas)

        assert business_date(late_evening) == "2024-05-01"
        assert business_date(late_evening.astimezone(madrid)) == "2024-05-01"

    def test_custom_offset(self):
        ts = datetime(2024, 5, 2, 1, 0, tzinfo=timezone.utc)
        assert business_date(ts, offset_hours=0) == "2024-05-02"

    def test_business_time(self):
        assert business_time(NOW) == "14:30"

    def test_business_today_uses_clock(self):
        assert business_today(now=NOW) == "2024-05-01"


class TestStampForBusinessDate:
    """Tests for stamp_for_business_date."""

    def test_keeps_time_of_day(self):
        stamp = stamp_for_business_date("2024-04-28", now=NOW)

        assert business_date(stamp) == "2024-04-28"
        assert business_time(stamp) == "14:30"

    def test_late_night_stays_on_chosen_date(self):
        # 23:50 business time is already the next UTC day
        now = datetime(2024, 5, 2, 3, 50, tzinfo=timezone.utc)
        stamp = stamp_for_business_date("2024-05-01", now=now)

        assert business_date(stamp) == "2024-05-01"
        assert stamp.astimezone(timezone.utc).date().isoformat() == "2024-05-02"

    def test_invalid_date_raises(self):
        with pytest.raises(ValidationError, match="Invalid business date"):
            stamp_for_business_date("01/05/2024", now=NOW)


class TestParseBusinessDate:
    def test_valid(self):
        assert parse_business_date("2024-05-01").isoformat() == "2024-05-01"

    @pytest.mark.parametrize("value", ["", "2024-13-01", "yesterday"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_business_date(value)
