"""
Habit repository - Data access layer for habits and completion records.
Read snapshots only; completions are written by the toggle endpoints of
the outer application.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Set
from sqlalchemy.orm import Session
from sqlalchemy import and_

from habit_tracker.models import Habit, CompletionRecord


class HabitRepository:
    """Repository for Habit data access"""

    @staticmethod
    def get_by_owner(db: Session, owner_id: int) -> List[Habit]:
        """Get all habits owned by a user"""
        return db.query(Habit).filter(Habit.owner_id == owner_id).order_by(Habit.id).all()

    @staticmethod
    def get_for_owner(db: Session, owner_id: int, habit_id: int) -> Optional[Habit]:
        """Get a habit only if it belongs to the owner"""
        return db.query(Habit).filter(
            and_(
                Habit.id == habit_id,
                Habit.owner_id == owner_id
            )
        ).first()

    @staticmethod
    def get_all(db: Session) -> List[Habit]:
        """Get every habit (leaderboard snapshot)"""
        return db.query(Habit).order_by(Habit.id).all()


class CompletionRepository:
    """Repository for CompletionRecord data access"""

    @staticmethod
    def get_dates_by_habit(
        db: Session,
        owner_id: Optional[int] = None,
        habit_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None
    ) -> Dict[int, Set[date]]:
        """
        Get completed dates grouped by habit.

        Args:
            db: Database session
            owner_id: Restrict to one owner (None = everyone)
            habit_id: Restrict to one habit
            start: Inclusive lower bound on date
            end: Inclusive upper bound on date

        Returns:
            Mapping of habit id to the set of completed dates
        """
        query = db.query(CompletionRecord.habit_id, CompletionRecord.date).filter(
            CompletionRecord.completed == True
        )
        if owner_id is not None:
            query = query.filter(CompletionRecord.owner_id == owner_id)
        if habit_id is not None:
            query = query.filter(CompletionRecord.habit_id == habit_id)
        if start is not None:
            query = query.filter(CompletionRecord.date >= start)
        if end is not None:
            query = query.filter(CompletionRecord.date <= end)

        dates = defaultdict(set)
        for row_habit_id, row_date in query.all():
            dates[row_habit_id].add(row_date)
        return dict(dates)

    @staticmethod
    def exists(db: Session, habit_id: int, target_date: date) -> bool:
        """Check whether a habit is completed on a date"""
        return db.query(CompletionRecord.id).filter(
            and_(
                CompletionRecord.habit_id == habit_id,
                CompletionRecord.date == target_date,
                CompletionRecord.completed == True
            )
        ).first() is not None
