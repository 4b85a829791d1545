"""
Tests for StreakService.

Tests cover:
1. Current streak walking back from as_of
2. Longest streak scan
3. Unscheduled days being transparent
4. Freezes merged with completions
"""
import pytest
from datetime import timedelta

from habit_tracker.models import Habit
from habit_tracker.services.streak_service import StreakService
from habit_tracker.tests.conftest import jan


def daily(start=None):
    return Habit(frequency="daily", start_date=start or jan(1))


def mon_wed_fri(start=None):
    return Habit(frequency="weekly", custom_days="[0, 2, 4]", start_date=start or jan(1))


class TestCurrentStreak:
    """Tests for current_streak"""

    @pytest.mark.parametrize("n", [1, 3, 10])
    def test_consecutive_days_ending_today(self, n):
        as_of = jan(15)
        satisfied = {as_of - timedelta(days=i) for i in range(n)}
        assert StreakService.current_streak(daily(), satisfied, as_of) == n

    def test_gap_resets_streak(self):
        satisfied = {jan(1), jan(2), jan(4), jan(5)}
        assert StreakService.current_streak(daily(), satisfied, jan(5)) == 2

    def test_unsatisfied_as_of_gives_zero(self):
        satisfied = {jan(1), jan(2), jan(3)}
        assert StreakService.current_streak(daily(), satisfied, jan(4)) == 0

    def test_freeze_fills_the_gap(self):
        """Completions on 1, 2, 4, 5 plus a freeze on 3 make a five day streak"""
        satisfied = StreakService.merge_satisfied({jan(1), jan(2), jan(4), jan(5)}, {jan(3)})
        assert StreakService.current_streak(daily(), satisfied, jan(5)) == 5

    def test_unsatisfied_unscheduled_day_does_not_break(self):
        """Missing Tuesday never breaks a Mon/Wed/Fri streak"""
        satisfied = {jan(1), jan(3), jan(5), jan(8)}
        assert StreakService.current_streak(mon_wed_fri(), satisfied, jan(8)) == 4

    def test_as_of_on_unscheduled_day_is_skipped(self):
        satisfied = {jan(1), jan(3), jan(5)}
        # Sunday the 7th and Saturday the 6th are not scheduled
        assert StreakService.current_streak(mon_wed_fri(), satisfied, jan(7)) == 3

    def test_missed_scheduled_day_breaks_weekly_streak(self):
        satisfied = {jan(1), jan(5), jan(8)}
        assert StreakService.current_streak(mon_wed_fri(), satisfied, jan(8)) == 2

    def test_days_before_start_never_count(self):
        satisfied = {jan(d) for d in range(1, 6)}
        assert StreakService.current_streak(daily(start=jan(3)), satisfied, jan(5)) == 3

    def test_as_of_before_start(self):
        assert StreakService.current_streak(daily(start=jan(10)), {jan(5)}, jan(5)) == 0

    def test_empty_set(self):
        assert StreakService.current_streak(daily(), frozenset(), jan(5)) == 0

    def test_satisfied_dates_after_as_of_ignored(self):
        satisfied = {jan(d) for d in range(1, 11)}
        assert StreakService.current_streak(daily(), satisfied, jan(4)) == 4


class TestLongestStreak:
    """Tests for longest_streak"""

    def test_empty_set(self):
        assert StreakService.longest_streak(daily(), frozenset()) == 0

    def test_single_day(self):
        assert StreakService.longest_streak(daily(), {jan(9)}) == 1

    def test_picks_longest_run(self):
        satisfied = {jan(1), jan(2), jan(3), jan(5), jan(6)}
        assert StreakService.longest_streak(daily(), satisfied) == 3

    def test_freeze_and_completions_scenario(self):
        satisfied = StreakService.merge_satisfied({jan(1), jan(2), jan(4), jan(5)}, {jan(3)})
        assert StreakService.longest_streak(daily(), satisfied) == 5

    def test_unscheduled_days_transparent(self):
        # Mon 1, Wed 3, Fri 5, Mon 8 across two weekends of nothing
        satisfied = {jan(1), jan(3), jan(5), jan(8)}
        assert StreakService.longest_streak(mon_wed_fri(), satisfied) == 4

    def test_satisfied_unscheduled_day_does_not_extend(self):
        # Tuesday the 2nd is satisfied but not scheduled
        satisfied = {jan(1), jan(2), jan(3)}
        assert StreakService.longest_streak(mon_wed_fri(), satisfied) == 2

    def test_missed_scheduled_day_resets(self):
        satisfied = {jan(1), jan(5), jan(8), jan(10)}
        assert StreakService.longest_streak(mon_wed_fri(), satisfied) == 3


class TestStreakInvariant:
    """longest_streak is never below current_streak for the same snapshot"""

    @pytest.mark.parametrize("habit_factory", [daily, mon_wed_fri])
    @pytest.mark.parametrize("satisfied_days", [
        (),
        (1, 2, 3),
        (1, 2, 4, 5, 6),
        (1, 3, 5, 8, 10, 12),
        (2, 4, 6, 7, 9, 11, 14),
    ])
    def test_longest_at_least_current(self, habit_factory, satisfied_days):
        habit = habit_factory()
        satisfied = {jan(d) for d in satisfied_days}
        longest = StreakService.longest_streak(habit, satisfied)

        for as_of_day in range(1, 20):
            assert longest >= StreakService.current_streak(habit, satisfied, jan(as_of_day))


class TestMergeSatisfied:
    """Tests for merge_satisfied"""

    def test_overlap_counted_once(self):
        merged = StreakService.merge_satisfied([jan(1), jan(2)], [jan(2), jan(3)])
        assert merged == {jan(1), jan(2), jan(3)}
