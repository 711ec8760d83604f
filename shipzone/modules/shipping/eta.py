"""
Delivery ETA calculation.

Transit days are business days: Saturdays, Sundays and configured holidays are
skipped and never count toward the total. A transit time of 0 means same-day
dispatch and the ETA is the as-of calendar date itself.

With a dispatch cutoff configured, an as-of time at or after the cutoff starts
the count from the following calendar day.
"""
import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from shipzone.core.utils import to_local
from shipzone.modules.shipping.entities import ETAResult

logger = logging.getLogger(__name__)

SATURDAY = 5
SUNDAY = 6

# A calendar with no delivery days at all would otherwise never terminate
MAX_CALENDAR_SCAN_DAYS = 3660


class HolidayCalendar:
    """Set of non-delivery dates supplied by the deployment."""

    def __init__(self, holidays: Iterable[date] = ()):
        self._holidays = frozenset(holidays)

    def is_holiday(self, day: date) -> bool:
        return day in self._holidays

    def __contains__(self, day: date) -> bool:
        return self.is_holiday(day)


class ETACalculator:
    def __init__(
        self,
        holidays: Optional[HolidayCalendar] = None,
        tz: tzinfo = timezone.utc,
        cutoff: Optional[time] = None,
    ):
        self.holidays = holidays or HolidayCalendar()
        self.tz = tz
        self.cutoff = cutoff

    def is_business_day(self, day: date) -> bool:
        return day.weekday() not in (SATURDAY, SUNDAY) and not self.holidays.is_holiday(day)

    def add_business_days(self, start: date, days: int) -> date:
        current = start
        counted = 0
        scanned = 0
        while counted < days:
            current += timedelta(days=1)
            scanned += 1
            if scanned > MAX_CALENDAR_SCAN_DAYS:
                raise ValueError("Holiday calendar leaves no business days to deliver on")
            if self.is_business_day(current):
                counted += 1
        return current

    def estimate(self, days: int, as_of: datetime) -> ETAResult:
        """
        Compute the delivery date for a transit time of `days` business days.

        Raises:
            ValueError: days is negative
        """
        if days < 0:
            raise ValueError(f"Transit days must be >= 0, got {days}")

        local = to_local(as_of, self.tz)
        start = local.date()
        if days == 0:
            return ETAResult(days=0, estimated_delivery_date=start)

        if self.cutoff is not None and local.time().replace(tzinfo=None) >= self.cutoff:
            start += timedelta(days=1)
            logger.debug(f"as_of {local.isoformat()} is past the {self.cutoff} cutoff")

        delivery = self.add_business_days(start, days)
        return ETAResult(days=days, estimated_delivery_date=delivery)
