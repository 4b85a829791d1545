"""
Tests for ScheduleService.
"""
import pytest
from datetime import date

from habit_tracker.models import Habit
from habit_tracker.services.schedule_service import ScheduleService
from habit_tracker.tests.conftest import jan


def make_habit(frequency="daily", custom_days=None):
    return Habit(frequency=frequency, custom_days=custom_days, start_date=jan(1))


class TestIsScheduled:
    """Tests for is_scheduled"""

    def test_daily_always_scheduled(self):
        habit = make_habit("daily")
        assert all(ScheduleService.is_scheduled(habit, jan(d)) for d in range(1, 15))

    @pytest.mark.parametrize("frequency", ["weekly", "custom"])
    def test_weekday_set(self, frequency):
        """Mon/Wed/Fri habit is scheduled only on those days"""
        habit = make_habit(frequency, "[0, 2, 4]")

        assert ScheduleService.is_scheduled(habit, jan(1))       # Monday
        assert not ScheduleService.is_scheduled(habit, jan(2))   # Tuesday
        assert ScheduleService.is_scheduled(habit, jan(3))       # Wednesday
        assert not ScheduleService.is_scheduled(habit, jan(4))   # Thursday
        assert ScheduleService.is_scheduled(habit, jan(5))       # Friday
        assert not ScheduleService.is_scheduled(habit, jan(6))   # Saturday
        assert not ScheduleService.is_scheduled(habit, jan(7))   # Sunday

    @pytest.mark.parametrize("custom_days", [None, "", "[]", "not json", "{\"a\": 1}"])
    def test_empty_or_unreadable_weekdays_fall_back_to_every_day(self, custom_days):
        habit = make_habit("custom", custom_days)
        assert all(ScheduleService.is_scheduled(habit, jan(d)) for d in range(1, 8))

    def test_unknown_frequency_treated_as_daily(self):
        habit = make_habit("monthly", "[0]")
        assert ScheduleService.is_scheduled(habit, jan(2))

    def test_out_of_range_weekdays_ignored(self):
        habit = make_habit("weekly", "[6, 9, -1]")
        assert habit.weekdays == frozenset({6})
        assert ScheduleService.is_scheduled(habit, jan(7))
        assert not ScheduleService.is_scheduled(habit, jan(1))


class TestCountScheduledDays:
    """Tests for count_scheduled_days"""

    def test_daily_counts_every_day(self):
        assert ScheduleService.count_scheduled_days(make_habit(), jan(1), jan(31)) == 31

    def test_mon_wed_fri_in_january_2024(self):
        # 5 Mondays, 5 Wednesdays, 4 Fridays
        habit = make_habit("weekly", "[0, 2, 4]")
        assert ScheduleService.count_scheduled_days(habit, jan(1), jan(31)) == 14

    def test_empty_window(self):
        assert ScheduleService.count_scheduled_days(make_habit(), jan(5), jan(4)) == 0

    def test_leap_february(self):
        habit = make_habit()
        assert ScheduleService.count_scheduled_days(habit, date(2024, 2, 1), date(2024, 2, 29)) == 29
