"""
Shared fixtures for habit tracker tests.
"""
import json
import os
import tempfile

# Configure the app before any habit_tracker module reads the environment
os.environ.setdefault("HABIT_TRACKER_DATABASE_URL", "sqlite://")
os.environ.setdefault("HABIT_TRACKER_LOG_DIR", os.path.join(tempfile.gettempdir(), "habit-tracker-tests"))
os.environ.setdefault("HABIT_TRACKER_API_KEY", "test-api-key")
os.environ.setdefault("HABIT_TRACKER_LEADERBOARD_REFRESH_MINUTES", "0")

import pytest
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from habit_tracker.database import Base
from habit_tracker.models import User, Habit, CompletionRecord, FreezeRecord
from habit_tracker.constants import FREQUENCY_DAILY
from habit_tracker.services.leaderboard_service import leaderboard_cache

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Fresh in-memory database per test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clear_leaderboard_cache():
    leaderboard_cache.clear()
    yield
    leaderboard_cache.clear()


@pytest.fixture
def today():
    # Wednesday
    return date(2024, 1, 17)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def user(db_session):
    return create_user(db_session, name="Alice", freeze_balance=2)


def create_user(db_session, name="User", freeze_balance=0):
    """Create and persist a user"""
    user = User(name=name, freeze_balance=freeze_balance)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def create_habit(db_session, owner, start_date, frequency=FREQUENCY_DAILY, weekdays=None, title="Read"):
    """Create and persist a habit"""
    habit = Habit(
        owner_id=owner.id,
        title=title,
        frequency=frequency,
        custom_days=json.dumps(sorted(weekdays)) if weekdays is not None else None,
        start_date=start_date,
    )
    db_session.add(habit)
    db_session.commit()
    db_session.refresh(habit)
    return habit


def add_completions(db_session, habit, dates):
    """Mark a habit completed on each date"""
    for day in dates:
        db_session.add(CompletionRecord(habit_id=habit.id, owner_id=habit.owner_id, date=day))
    db_session.commit()


def add_freezes(db_session, habit, dates):
    """Insert freeze records directly (no balance change)"""
    for day in dates:
        db_session.add(FreezeRecord(habit_id=habit.id, owner_id=habit.owner_id, date=day))
    db_session.commit()


def jan(day):
    """Shorthand for a day in January 2024 (Jan 1 is a Monday)"""
    return date(2024, 1, day)
