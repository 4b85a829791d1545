"""
Habit statistics service.
Per-habit dashboard stats and the monthly tracker grid for one owner.
Both read one snapshot of habits, completions and freezes per call.
"""
from datetime import date
from typing import Dict, List, Set, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import OperationalError

from habit_tracker.models import Habit
from habit_tracker.repositories.habit_repository import HabitRepository, CompletionRepository
from habit_tracker.repositories.freeze_repository import FreezeRepository
from habit_tracker.services.date_service import DateService
from habit_tracker.services.schedule_service import ScheduleService
from habit_tracker.services.streak_service import StreakService
from habit_tracker.services.completion_service import CompletionService
from habit_tracker.schemas import (
    HabitStatsResponse, HabitMonthTracker, MonthTrackerResponse, TrackerDay
)
from habit_tracker.constants import (
    DAY_STATUS_COMPLETED,
    DAY_STATUS_FROZEN,
    DAY_STATUS_MISSED,
    DAY_STATUS_UNSCHEDULED,
    DAY_STATUS_BEFORE_START,
    DAY_STATUS_FUTURE,
)
from habit_tracker.exceptions import StorageUnavailableException


class StatsService:
    """Service for per-habit statistics"""

    def __init__(self, db: Session):
        self.db = db
        self.habit_repo = HabitRepository()
        self.completion_repo = CompletionRepository()
        self.freeze_repo = FreezeRepository()

    def _load_snapshot(
        self, owner_id: int
    ) -> Tuple[List[Habit], Dict[int, Set[date]], Dict[int, Set[date]]]:
        """Habits, completed dates and frozen dates of one owner"""
        try:
            habits = self.habit_repo.get_by_owner(self.db, owner_id)
            completed = self.completion_repo.get_dates_by_habit(self.db, owner_id=owner_id)
            frozen = self.freeze_repo.get_dates_by_habit(self.db, owner_id=owner_id)
        except OperationalError as e:
            raise StorageUnavailableException("snapshot read", str(e))
        return habits, completed, frozen

    def get_habit_stats(self, owner_id: int, today: date) -> List[HabitStatsResponse]:
        """
        Dashboard stats for each habit of an owner.

        Args:
            owner_id: Owner whose habits are evaluated
            today: Current effective date

        Returns:
            One HabitStatsResponse per habit
        """
        habits, completed, frozen = self._load_snapshot(owner_id)
        month_start, month_end = DateService.month_bounds(today)

        result = []
        for habit in habits:
            habit_frozen = frozen.get(habit.id, set())
            satisfied = StreakService.merge_satisfied(completed.get(habit.id, ()), habit_frozen)

            result.append(HabitStatsResponse(
                habit_id=habit.id,
                title=habit.title,
                frequency=habit.frequency,
                current_streak=StreakService.current_streak(habit, satisfied, today),
                longest_streak=StreakService.longest_streak(habit, satisfied),
                month_completion=CompletionService.month_completion(
                    habit, satisfied, month_start, month_end
                ),
                elapsed_completion=CompletionService.elapsed_completion(
                    habit, satisfied, month_start, today
                ),
                is_satisfied_today=today in satisfied,
                frozen_today=today in habit_frozen
            ))

        return result

    @staticmethod
    def day_status(
        habit: Habit,
        day: date,
        completed: Set[date],
        frozen: Set[date],
        today: date
    ) -> str:
        """Tracker cell status for one habit and day"""
        if day > today:
            return DAY_STATUS_FUTURE
        if day < habit.start_date:
            return DAY_STATUS_BEFORE_START
        if day in completed:
            return DAY_STATUS_COMPLETED
        if day in frozen:
            return DAY_STATUS_FROZEN
        if not ScheduleService.is_scheduled(habit, day):
            return DAY_STATUS_UNSCHEDULED
        return DAY_STATUS_MISSED

    def get_month_tracker(
        self,
        owner_id: int,
        year: int,
        month: int,
        today: date
    ) -> MonthTrackerResponse:
        """
        Monthly tracker grid for an owner.

        Completion here is the elapsed variant so an unfinished month is
        not reported against days that have not happened yet; the
        full-month figure is included alongside.
        """
        month_start, month_end = DateService.month_bounds_for(year, month)
        habits, completed, frozen = self._load_snapshot(owner_id)

        trackers = []
        for habit in habits:
            habit_completed = completed.get(habit.id, set())
            habit_frozen = frozen.get(habit.id, set())
            satisfied = StreakService.merge_satisfied(habit_completed, habit_frozen)

            days = [
                TrackerDay(
                    date=day,
                    status=self.day_status(habit, day, habit_completed, habit_frozen, today)
                )
                for day in DateService.iter_days(month_start, month_end)
            ]

            trackers.append(HabitMonthTracker(
                habit_id=habit.id,
                title=habit.title,
                days=days,
                month_completion=CompletionService.month_completion(
                    habit, satisfied, month_start, month_end
                ),
                elapsed_completion=CompletionService.elapsed_completion(
                    habit, satisfied, month_start, today
                )
            ))

        return MonthTrackerResponse(
            year=year,
            month=month,
            month_start=month_start,
            month_end=month_end,
            habits=trackers
        )
