"""
Leaderboard service.
Scores every user by highest streak and average monthly completion and ranks them.

Ranking uses the longest-streak definition and the full-month completion.
Ties are broken by user id ascending so the order does not depend on how
storage happens to return rows.
"""
import logging
import threading
from datetime import date
from typing import Dict, List, Optional, Set, Tuple
from sqlalchemy.orm import Session

from habit_tracker.models import Habit, User
from habit_tracker.repositories.habit_repository import HabitRepository, CompletionRepository
from habit_tracker.repositories.freeze_repository import FreezeRepository
from habit_tracker.repositories.user_repository import UserRepository
from habit_tracker.services.date_service import DateService
from habit_tracker.services.streak_service import StreakService
from habit_tracker.services.completion_service import CompletionService
from habit_tracker.schemas import LeaderboardEntry, LeaderboardResponse
from habit_tracker.constants import (
    LEADERBOARD_METRICS,
    LEADERBOARD_METRIC_STREAK,
    LEADERBOARD_DEFAULT_CAP,
    LEADERBOARD_MAX_CAP,
    LEADERBOARD_DEFAULT_NAME,
)
from habit_tracker.exceptions import InvalidMetricException

logger = logging.getLogger("habit_tracker.leaderboard")


class LeaderboardCache:
    """
    Ranked leaderboards per metric, valid only for the day they were built for.

    Filled by the background refresh job only. clear() bumps the generation
    so a refresh that started before a write cannot store its stale result.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[date, List[LeaderboardEntry]]] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self, metric: str, today: date) -> Optional[List[LeaderboardEntry]]:
        with self._lock:
            cached = self._entries.get(metric)
        if cached and cached[0] == today:
            return cached[1]
        return None

    def put(
        self,
        metric: str,
        today: date,
        ranked: List[LeaderboardEntry],
        generation: Optional[int] = None
    ) -> bool:
        """Store a ranking; refused if the cache was cleared since generation was read"""
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._entries[metric] = (today, ranked)
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._generation += 1


leaderboard_cache = LeaderboardCache()


class LeaderboardService:
    """Service for building the cross-user leaderboard"""

    def __init__(self, db: Session, cache: Optional[LeaderboardCache] = None):
        self.db = db
        self.cache = cache
        self.user_repo = UserRepository()
        self.habit_repo = HabitRepository()
        self.completion_repo = CompletionRepository()
        self.freeze_repo = FreezeRepository()

    @staticmethod
    def clamp_cap(cap: Optional[int]) -> int:
        """Visible list size, between 1 and LEADERBOARD_MAX_CAP"""
        if not cap or cap < 1:
            return LEADERBOARD_DEFAULT_CAP
        return min(cap, LEADERBOARD_MAX_CAP)

    @staticmethod
    def score_user(
        user: User,
        habits: List[Habit],
        satisfied_by_habit: Dict[int, Set[date]],
        month_start: date,
        month_end: date
    ) -> LeaderboardEntry:
        """
        Unranked leaderboard entry for one user.

        highest_streak is the max longest streak over the user's habits,
        avg_completion the rounded mean of their full-month completion.
        """
        highest_streak = 0
        total_completion = 0

        for habit in habits:
            satisfied = satisfied_by_habit.get(habit.id, frozenset())
            highest_streak = max(highest_streak, StreakService.longest_streak(habit, satisfied))
            total_completion += CompletionService.month_completion(
                habit, satisfied, month_start, month_end
            )

        avg_completion = (
            CompletionService.round_half_up(total_completion / len(habits)) if habits else 0
        )

        return LeaderboardEntry(
            user_id=user.id,
            name=user.name or LEADERBOARD_DEFAULT_NAME,
            highest_streak=highest_streak,
            avg_completion=avg_completion,
            habit_count=len(habits)
        )

    @staticmethod
    def rank(entries: List[LeaderboardEntry], metric: str) -> List[LeaderboardEntry]:
        """
        Sort entries descending by metric and assign 1-based ranks.

        Raises:
            InvalidMetricException: Unknown metric
        """
        if metric not in LEADERBOARD_METRICS:
            raise InvalidMetricException(metric)

        if metric == LEADERBOARD_METRIC_STREAK:
            def score(entry):
                return entry.highest_streak
        else:
            def score(entry):
                return entry.avg_completion

        by_id = sorted(entries, key=lambda e: e.user_id)
        ordered = sorted(by_id, key=score, reverse=True)

        return [
            entry.model_copy(update={"rank": position})
            for position, entry in enumerate(ordered, start=1)
        ]

    @staticmethod
    def build(
        ranked: List[LeaderboardEntry],
        metric: str,
        cap: int,
        requester_id: Optional[int] = None
    ) -> LeaderboardResponse:
        """
        Split a ranked list into the visible top and the requester's own entry.

        requester_entry is set only when the requester ranks below the cap.
        """
        top = ranked[:cap]
        requester_entry = None

        if requester_id is not None:
            for entry in ranked:
                if entry.user_id == requester_id:
                    if entry.rank > cap:
                        requester_entry = entry
                    break

        return LeaderboardResponse(metric=metric, top=top, requester_entry=requester_entry)

    def compute_ranking(self, metric: str, today: date) -> List[LeaderboardEntry]:
        """Score every user from one storage snapshot and rank them"""
        if metric not in LEADERBOARD_METRICS:
            raise InvalidMetricException(metric)

        month_start, month_end = DateService.month_bounds(today)

        users = self.user_repo.get_all(self.db)
        habits = self.habit_repo.get_all(self.db)
        completed = self.completion_repo.get_dates_by_habit(self.db)
        frozen = self.freeze_repo.get_dates_by_habit(self.db)

        habits_by_owner: Dict[int, List[Habit]] = {}
        for habit in habits:
            habits_by_owner.setdefault(habit.owner_id, []).append(habit)

        satisfied_by_habit = {
            habit.id: StreakService.merge_satisfied(
                completed.get(habit.id, ()), frozen.get(habit.id, ())
            )
            for habit in habits
        }

        entries = [
            self.score_user(
                user, habits_by_owner.get(user.id, []), satisfied_by_habit,
                month_start, month_end
            )
            for user in users
        ]
        return self.rank(entries, metric)

    def refresh_cache(self, today: date) -> None:
        """Rebuild cached rankings for every metric"""
        if self.cache is None:
            return
        generation = self.cache.generation
        for metric in LEADERBOARD_METRICS:
            if not self.cache.put(metric, today, self.compute_ranking(metric, today), generation):
                logger.info("Leaderboard changed during refresh, cached ranking discarded")
                return

    def get_leaderboard(
        self,
        metric: str,
        cap: Optional[int],
        requester_id: Optional[int],
        today: date
    ) -> LeaderboardResponse:
        """
        Leaderboard for today, served from the cache when it holds a
        ranking for today, otherwise computed inline. The request path
        never fills the cache.

        Args:
            metric: "streak" or "completion"
            cap: Number of visible entries (clamped to 1..50)
            requester_id: Caller, reported separately if ranked below the cap
            today: Current effective date

        Returns:
            LeaderboardResponse
        """
        if metric not in LEADERBOARD_METRICS:
            raise InvalidMetricException(metric)

        ranked = self.cache.get(metric, today) if self.cache is not None else None
        if ranked is None:
            ranked = self.compute_ranking(metric, today)
        else:
            logger.debug(f"Serving {metric} leaderboard from cache")

        return self.build(ranked, metric, self.clamp_cap(cap), requester_id)
