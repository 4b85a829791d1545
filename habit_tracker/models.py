from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, ForeignKey,
    CheckConstraint, UniqueConstraint
)
from datetime import datetime
import json

from habit_tracker.database import Base
from habit_tracker.constants import FREQUENCY_DAILY


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("freeze_balance >= 0", name="ck_users_freeze_balance_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)

    # Streak freeze tokens, only changed by atomic increment/decrement
    freeze_balance = Column(Integer, nullable=False, default=0)
    total_referrals = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.now)


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # Recurrence
    frequency = Column(String, default=FREQUENCY_DAILY)  # daily, weekly, custom
    custom_days = Column(String, nullable=True)  # JSON array of weekdays like "[0,2,4]" (Mon,Wed,Fri)

    start_date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    @property
    def weekdays(self) -> frozenset:
        """Scheduled weekdays (0=Monday .. 6=Sunday) parsed from custom_days"""
        if not self.custom_days:
            return frozenset()
        try:
            days = json.loads(self.custom_days)
        except (json.JSONDecodeError, TypeError):
            return frozenset()
        if not isinstance(days, list):
            return frozenset()
        return frozenset(d for d in days if isinstance(d, int) and 0 <= d <= 6)


class CompletionRecord(Base):
    __tablename__ = "completion_records"
    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_completion_habit_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    completed = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)


class FreezeRecord(Base):
    __tablename__ = "freeze_records"
    __table_args__ = (
        UniqueConstraint("habit_id", "date", name="uq_freeze_habit_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=False, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.now)


class RewardState(Base):
    __tablename__ = "reward_states"

    owner_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    current_day = Column(Integer, nullable=False, default=1)  # 1..7
    last_claimed_date = Column(Date, nullable=True)
    total_points = Column(Integer, nullable=False, default=0)
    freeze_tokens_earned = Column(Integer, nullable=False, default=0)

    # Bumped on every claim, guards the read-modify-write
    version = Column(Integer, nullable=False, default=0)

    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
