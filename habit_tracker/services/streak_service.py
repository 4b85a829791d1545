"""
Streak calculation service.
Single implementation of current and longest streak used by habit stats,
the monthly tracker and the leaderboard.

A satisfied day is a day with a completion record, a freeze record, or both.
Unscheduled days are transparent: they neither extend nor break a streak.
"""
from datetime import date, timedelta
from typing import AbstractSet, Iterable

from habit_tracker.models import Habit
from habit_tracker.services.schedule_service import ScheduleService


class StreakService:
    """Service for streak calculations over a satisfied-day set"""

    @staticmethod
    def merge_satisfied(completed: Iterable[date], frozen: Iterable[date]) -> frozenset:
        """Union of completion and freeze dates for one habit"""
        return frozenset(completed) | frozenset(frozen)

    @staticmethod
    def current_streak(habit: Habit, satisfied: AbstractSet[date], as_of: date) -> int:
        """
        Count the streak ending at as_of.

        Walks backward one day at a time starting at as_of:
        - unscheduled day: skipped
        - scheduled and satisfied: counted
        - scheduled and unsatisfied: walk stops
        Days before the habit's start date never count.

        Args:
            habit: Habit being evaluated
            satisfied: Satisfied dates for this habit
            as_of: Day to count back from (usually today)

        Returns:
            Current streak length
        """
        streak = 0
        day = as_of

        while day >= habit.start_date:
            if ScheduleService.is_scheduled(habit, day):
                if day not in satisfied:
                    break
                streak += 1
            day -= timedelta(days=1)

        return streak

    @staticmethod
    def longest_streak(habit: Habit, satisfied: AbstractSet[date]) -> int:
        """
        Longest run of scheduled-and-satisfied days.

        Scans forward from the earliest to the latest satisfied date.
        Scheduled satisfied days extend the running count, scheduled
        unsatisfied days reset it, unscheduled days leave it alone.

        Args:
            habit: Habit being evaluated
            satisfied: Satisfied dates for this habit

        Returns:
            Longest streak (0 for an empty set)
        """
        if not satisfied:
            return 0

        longest = 0
        running = 0
        day = min(satisfied)
        last = max(satisfied)

        while day <= last:
            if ScheduleService.is_scheduled(habit, day):
                if day in satisfied:
                    running += 1
                    longest = max(longest, running)
                else:
                    running = 0
            day += timedelta(days=1)

        return longest
