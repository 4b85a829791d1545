"""
Tests for CompletionService.
"""
import pytest
from datetime import date

from habit_tracker.models import Habit
from habit_tracker.services.completion_service import CompletionService
from habit_tracker.tests.conftest import jan

MONTH_START = jan(1)
MONTH_END = jan(31)


def daily():
    return Habit(frequency="daily", start_date=jan(1))


def mon_wed_fri():
    return Habit(frequency="weekly", custom_days="[0, 2, 4]", start_date=jan(1))


class TestPercentage:
    """Tests for percentage rounding and clamping"""

    def test_zero_denominator(self):
        assert CompletionService.percentage(5, 0) == 0

    def test_half_rounds_up(self):
        assert CompletionService.percentage(1, 8) == 13   # 12.5
        assert CompletionService.percentage(1, 200) == 1  # 0.5

    def test_clamped_to_100(self):
        assert CompletionService.percentage(30, 14) == 100


class TestMonthCompletion:
    """Tests for month_completion (full calendar month)"""

    def test_all_days_satisfied(self):
        satisfied = {jan(d) for d in range(1, 32)}
        assert CompletionService.month_completion(daily(), satisfied, MONTH_START, MONTH_END) == 100

    def test_nothing_satisfied(self):
        assert CompletionService.month_completion(daily(), set(), MONTH_START, MONTH_END) == 0

    def test_partial_daily(self):
        satisfied = {jan(d) for d in range(1, 17)}  # 16 / 31 = 51.6%
        assert CompletionService.month_completion(daily(), satisfied, MONTH_START, MONTH_END) == 52

    def test_uses_scheduled_days_as_denominator(self):
        # 7 of the 14 Mon/Wed/Fri days in January 2024
        satisfied = {jan(1), jan(3), jan(5), jan(8), jan(10), jan(12), jan(15)}
        assert CompletionService.month_completion(mon_wed_fri(), satisfied, MONTH_START, MONTH_END) == 50

    def test_dates_outside_window_ignored(self):
        satisfied = {jan(1), jan(2)} | {date(2024, 2, d) for d in range(1, 10)}
        assert CompletionService.month_completion(daily(), satisfied, MONTH_START, MONTH_END) == 6

    def test_unscheduled_satisfied_days_clamped(self):
        satisfied = {jan(d) for d in range(1, 32)}  # 31 / 14 scheduled
        assert CompletionService.month_completion(mon_wed_fri(), satisfied, MONTH_START, MONTH_END) == 100

    def test_no_scheduled_days_in_window(self):
        sunday_only = Habit(frequency="weekly", custom_days="[6]", start_date=jan(1))
        satisfied = {jan(1), jan(2)}
        # Mon 1 .. Fri 5 has no Sunday
        assert CompletionService.month_completion(sunday_only, satisfied, jan(1), jan(5)) == 0

    def test_not_clipped_to_today(self):
        """Early in the month the full-month figure stays low"""
        satisfied = {jan(d) for d in range(1, 11)}
        assert CompletionService.month_completion(daily(), satisfied, MONTH_START, MONTH_END) == 32


class TestElapsedCompletion:
    """Tests for elapsed_completion (month clipped to as_of)"""

    def test_clipped_to_as_of(self):
        satisfied = {jan(d) for d in range(1, 11)}
        assert CompletionService.elapsed_completion(daily(), satisfied, MONTH_START, jan(10)) == 100

    def test_partial_elapsed(self):
        satisfied = {jan(1), jan(2), jan(3)}
        assert CompletionService.elapsed_completion(daily(), satisfied, MONTH_START, jan(4)) == 75

    def test_as_of_after_month_end_uses_full_month(self):
        satisfied = {jan(d) for d in range(1, 17)}
        as_of = date(2024, 3, 15)
        assert (
            CompletionService.elapsed_completion(daily(), satisfied, MONTH_START, as_of)
            == CompletionService.month_completion(daily(), satisfied, MONTH_START, MONTH_END)
        )

    def test_as_of_before_month_start(self):
        as_of = date(2023, 12, 31)
        assert CompletionService.elapsed_completion(daily(), {jan(1)}, MONTH_START, as_of) == 0

    @pytest.mark.parametrize("as_of_day", [1, 7, 15, 31])
    def test_always_in_range(self, as_of_day):
        satisfied = {jan(d) for d in range(1, 32)}
        value = CompletionService.elapsed_completion(mon_wed_fri(), satisfied, MONTH_START, jan(as_of_day))
        assert 0 <= value <= 100
