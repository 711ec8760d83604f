"""
Tests for business-day ETA calculation.
"""
from datetime import date, datetime, time, timedelta, timezone

import pytest

from shipzone.modules.shipping import ETACalculator, HolidayCalendar
from tests.conftest import FRIDAY_NOON, MONDAY_NOON


class TestETACalculator:

    def test_three_days_from_friday_lands_on_wednesday(self, eta_calculator):
        """Saturday and Sunday do not count toward transit days."""
        result = eta_calculator.estimate(3, FRIDAY_NOON)

        assert result.days == 3
        assert result.estimated_delivery_date == date(2024, 1, 10)
        assert result.estimated_delivery_date.weekday() == 2

    def test_zero_days_is_same_calendar_date(self, eta_calculator):
        """Test zero transit days returns the as-of date, weekend or not."""
        saturday = datetime(2024, 1, 6, 9, 30, tzinfo=timezone.utc)

        assert eta_calculator.estimate(0, MONDAY_NOON).estimated_delivery_date == date(2024, 1, 1)
        assert eta_calculator.estimate(0, saturday).estimated_delivery_date == date(2024, 1, 6)

    def test_next_business_day_from_weekend(self, eta_calculator):
        """Test one day from Sunday is Monday."""
        sunday = datetime(2024, 1, 7, 10, 0, tzinfo=timezone.utc)
        assert eta_calculator.estimate(1, sunday).estimated_delivery_date == date(2024, 1, 8)

    def test_holidays_are_skipped_like_weekends(self):
        """Test a Monday holiday pushes delivery to Thursday."""
        calculator = ETACalculator(holidays=HolidayCalendar([date(2024, 1, 8)]))

        result = calculator.estimate(3, FRIDAY_NOON)

        assert result.estimated_delivery_date == date(2024, 1, 11)

    def test_result_never_lands_on_weekend_or_holiday(self):
        """Test delivery dates are always business days."""
        holidays = HolidayCalendar([date(2024, 1, 15), date(2024, 1, 26), date(2024, 2, 1)])
        calculator = ETACalculator(holidays=holidays)
        start = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)

        for offset in range(21):
            as_of = start + timedelta(days=offset)
            for days in range(1, 10):
                delivered = calculator.estimate(days, as_of).estimated_delivery_date
                assert delivered.weekday() < 5
                assert delivered not in holidays
                assert delivered > as_of.date()

    def test_negative_days_rejected(self, eta_calculator):
        """Test negative transit days raise ValueError."""
        with pytest.raises(ValueError):
            eta_calculator.estimate(-1, MONDAY_NOON)

    def test_calendar_without_business_days_raises(self):
        """Test a calendar of only holidays raises instead of looping."""
        every_day = [date(2024, 1, 1) + timedelta(days=n) for n in range(4000)]
        calculator = ETACalculator(holidays=HolidayCalendar(every_day))

        with pytest.raises(ValueError):
            calculator.estimate(1, MONDAY_NOON)


class TestETATimeReference:

    def test_date_taken_in_configured_timezone(self):
        """Friday 20:00 UTC is already Saturday in Kolkata."""
        ist = timezone(timedelta(hours=5, minutes=30))
        friday_evening = datetime(2024, 1, 5, 20, 0, tzinfo=timezone.utc)

        utc_result = ETACalculator(tz=timezone.utc).estimate(0, friday_evening)
        ist_result = ETACalculator(tz=ist).estimate(0, friday_evening)

        assert utc_result.estimated_delivery_date == date(2024, 1, 5)
        assert ist_result.estimated_delivery_date == date(2024, 1, 6)

    def test_naive_timestamp_is_local(self):
        """Test naive timestamps are read in the configured timezone."""
        ist = timezone(timedelta(hours=5, minutes=30))
        naive = datetime(2024, 1, 5, 23, 0)

        assert ETACalculator(tz=ist).estimate(0, naive).estimated_delivery_date == date(2024, 1, 5)


class TestDispatchCutoff:

    def test_before_cutoff_counts_from_today(self):
        """Test orders before cutoff count from the same day."""
        calculator = ETACalculator(cutoff=time(17, 0))
        monday_morning = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

        assert calculator.estimate(1, monday_morning).estimated_delivery_date == date(2024, 1, 2)

    def test_after_cutoff_counts_from_tomorrow(self):
        """Test orders after cutoff count from the next day."""
        calculator = ETACalculator(cutoff=time(17, 0))
        monday_evening = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)

        assert calculator.estimate(1, monday_evening).estimated_delivery_date == date(2024, 1, 3)
        assert calculator.estimate(3, monday_evening).estimated_delivery_date == date(2024, 1, 5)

    def test_cutoff_is_inclusive(self):
        """Test an order exactly at cutoff counts from the next day."""
        calculator = ETACalculator(cutoff=time(17, 0))
        at_cutoff = datetime(2024, 1, 1, 17, 0, tzinfo=timezone.utc)

        assert calculator.estimate(1, at_cutoff).estimated_delivery_date == date(2024, 1, 3)

    def test_same_day_ignores_cutoff(self):
        """Test zero transit days ignores the cutoff."""
        calculator = ETACalculator(cutoff=time(17, 0))
        monday_evening = datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)

        assert calculator.estimate(0, monday_evening).estimated_delivery_date == date(2024, 1, 1)

    def test_friday_after_cutoff_still_wednesday(self):
        """Test Friday after cutoff starts Saturday and still lands Wednesday."""
        calculator = ETACalculator(cutoff=time(17, 0))
        friday_evening = datetime(2024, 1, 5, 18, 0, tzinfo=timezone.utc)

        assert calculator.estimate(3, friday_evening).estimated_delivery_date == date(2024, 1, 10)


def test_holiday_calendar_membership():
    """Test holiday calendar membership checks."""
    calendar = HolidayCalendar([date(2024, 12, 25), date(2024, 12, 25)])

    assert date(2024, 12, 25) in calendar
    assert calendar.is_holiday(date(2024, 12, 24)) is False
