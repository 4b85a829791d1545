import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from habit_tracker.constants import DEFAULT_DATABASE_URL

DATABASE_URL = os.getenv("HABIT_TRACKER_DATABASE_URL", DEFAULT_DATABASE_URL)

# SQLite needs check_same_thread disabled for FastAPI's threadpool
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
