"""
Date calculation and manipulation service.
Handles effective dates, month windows and day iteration.

Only get_effective_date looks at a wall-clock value, and only when the
transport layer hands one in; everything else works on plain dates.
"""
from datetime import datetime, timedelta, date
from typing import Iterator, Optional
import calendar

from habit_tracker.exceptions import InvalidDateException


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def get_effective_date(now: datetime, day_start: Optional[str] = None) -> date:
        """
        Get the effective current date based on a day start time.

        If day_start is set and now is before it, returns yesterday's date.
        Otherwise returns today's date.

        Example: If day_start = "06:00" and current time is 03:00,
        the effective date is still yesterday because the user hasn't
        started their "new day" yet.

        Args:
            now: Current wall-clock time, resolved once per request
            day_start: Optional "HH:MM" day boundary

        Returns:
            Effective date (today or yesterday)
        """
        today = now.date()

        if not day_start:
            return today

        try:
            t_str = day_start.replace(":", "").zfill(4)
            day_start_hour = int(t_str[:2])
            day_start_minute = int(t_str[2:])
        except (ValueError, AttributeError):
            return today

        current_minutes = now.hour * 60 + now.minute
        start_minutes = day_start_hour * 60 + day_start_minute

        if current_minutes < start_minutes:
            return today - timedelta(days=1)

        return today

    @staticmethod
    def parse_date(value: str) -> date:
        """
        Parse a calendar day in YYYY-MM-DD format.

        Raises:
            InvalidDateException: If the value is not a valid date
        """
        try:
            return date.fromisoformat(value)
        except (TypeError, ValueError):
            raise InvalidDateException(str(value))

    @staticmethod
    def month_bounds(day: date) -> tuple[date, date]:
        """First and last day of the calendar month containing day"""
        last = calendar.monthrange(day.year, day.month)[1]
        return day.replace(day=1), day.replace(day=last)

    @staticmethod
    def month_bounds_for(year: int, month: int) -> tuple[date, date]:
        """
        First and last day of a calendar month.

        Raises:
            InvalidDateException: If year/month do not form a valid month
        """
        try:
            return DateService.month_bounds(date(year, month, 1))
        except (TypeError, ValueError):
            raise InvalidDateException(f"{year}-{month}")

    @staticmethod
    def iter_days(start: date, end: date) -> Iterator[date]:
        """Yield every day from start to end inclusive (nothing if end < start)"""
        current = start
        while current <= end:
            yield current
            current += timedelta(days=1)

    @staticmethod
    def days_between(earlier: date, later: date) -> int:
        """Whole days from earlier to later (negative if later is before earlier)"""
        return (later - earlier).days
