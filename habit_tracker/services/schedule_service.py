"""
Schedule evaluation for habits.
Decides whether a calendar day is a day the habit expects action on.
"""
from datetime import date

from habit_tracker.models import Habit
from habit_tracker.constants import WEEKDAY_FREQUENCIES
from habit_tracker.services.date_service import DateService


class ScheduleService:
    """Service for habit recurrence checks"""

    @staticmethod
    def is_scheduled(habit: Habit, day: date) -> bool:
        """
        Check whether a day is scheduled for a habit.

        - daily: every day
        - weekly / custom: day.weekday() must be in the habit's weekdays
        - weekly / custom with no weekdays: falls back to every day
        - unknown frequency: treated as daily

        Args:
            habit: Habit with frequency and weekdays
            day: Calendar day to check

        Returns:
            True if the habit expects action on that day
        """
        if habit.frequency not in WEEKDAY_FREQUENCIES:
            return True

        weekdays = habit.weekdays
        if not weekdays:
            return True

        return day.weekday() in weekdays

    @staticmethod
    def count_scheduled_days(habit: Habit, start: date, end: date) -> int:
        """Number of scheduled days in [start, end] (0 if the window is empty)"""
        return sum(
            1 for day in DateService.iter_days(start, end)
            if ScheduleService.is_scheduled(habit, day)
        )
