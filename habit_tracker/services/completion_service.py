"""
Completion percentage service.

Two windows:
- month_completion: the whole calendar month, used by dashboards and the
  leaderboard
- elapsed_completion: the month clipped to as_of, used by the in-progress
  monthly tracker
"""
from datetime import date
from typing import AbstractSet
import math

from habit_tracker.models import Habit
from habit_tracker.constants import PERCENT_MIN, PERCENT_MAX
from habit_tracker.services.date_service import DateService
from habit_tracker.services.schedule_service import ScheduleService


class CompletionService:
    """Service for completion percentages over date windows"""

    @staticmethod
    def round_half_up(value: float) -> int:
        """Round non-negative values with .5 going up (2.5 -> 3)"""
        return int(math.floor(value + 0.5))

    @staticmethod
    def percentage(numerator: int, denominator: int) -> int:
        """round(100 * numerator / denominator) clamped to [0, 100], 0 for an empty denominator"""
        if denominator <= 0:
            return PERCENT_MIN
        raw = CompletionService.round_half_up(100 * numerator / denominator)
        return max(PERCENT_MIN, min(PERCENT_MAX, raw))

    @staticmethod
    def window_completion(
        habit: Habit,
        satisfied: AbstractSet[date],
        window_start: date,
        window_end: date
    ) -> int:
        """
        Completion percentage over [window_start, window_end].

        Numerator counts satisfied dates in the window (scheduled or not),
        denominator counts scheduled days in the window.
        """
        if window_end < window_start:
            return PERCENT_MIN

        numerator = sum(1 for d in satisfied if window_start <= d <= window_end)
        denominator = ScheduleService.count_scheduled_days(habit, window_start, window_end)
        return CompletionService.percentage(numerator, denominator)

    @staticmethod
    def month_completion(
        habit: Habit,
        satisfied: AbstractSet[date],
        month_start: date,
        month_end: date
    ) -> int:
        """Completion over the entire month regardless of how much has elapsed"""
        return CompletionService.window_completion(habit, satisfied, month_start, month_end)

    @staticmethod
    def elapsed_completion(
        habit: Habit,
        satisfied: AbstractSet[date],
        month_start: date,
        as_of: date
    ) -> int:
        """Completion over the month clipped to [month_start, min(month_end, as_of)]"""
        _, month_end = DateService.month_bounds(month_start)
        window_end = min(month_end, as_of)
        return CompletionService.window_completion(habit, satisfied, month_start, window_end)
