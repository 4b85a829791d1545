"""
Background scheduler for the habit tracker.
Handles:
- Periodic rebuild of the cached leaderboard rankings
"""
import logging
import os
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from habit_tracker.database import SessionLocal
from habit_tracker.clock import get_today
from habit_tracker.constants import DEFAULT_LEADERBOARD_REFRESH_MINUTES
from habit_tracker.services.leaderboard_service import LeaderboardService, leaderboard_cache

logger = logging.getLogger("habit_tracker.scheduler")


def parse_refresh_minutes(value) -> int:
    """Refresh interval in minutes; unreadable values fall back to the default"""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(
            f"Invalid HABIT_TRACKER_LEADERBOARD_REFRESH_MINUTES {value!r}, "
            f"using {DEFAULT_LEADERBOARD_REFRESH_MINUTES}"
        )
        return DEFAULT_LEADERBOARD_REFRESH_MINUTES


REFRESH_MINUTES = parse_refresh_minutes(os.getenv(
    "HABIT_TRACKER_LEADERBOARD_REFRESH_MINUTES", DEFAULT_LEADERBOARD_REFRESH_MINUTES
))

scheduler = AsyncIOScheduler()


def refresh_leaderboard():
    """Job: rebuild leaderboard rankings for today (runs in the scheduler's thread pool)"""
    db = SessionLocal()
    try:
        today = get_today()
        LeaderboardService(db, leaderboard_cache).refresh_cache(today)
        logger.info(f"Leaderboard cache refreshed for {today.isoformat()}")
    except Exception as e:
        # Requests fall back to computing the leaderboard inline
        logger.error(f"Scheduler Error (Leaderboard): {e}")
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler"""
    if REFRESH_MINUTES <= 0:
        logger.info("Leaderboard refresh disabled")
        return

    if not scheduler.running:
        scheduler.add_job(
            refresh_leaderboard,
            IntervalTrigger(minutes=REFRESH_MINUTES),
            id='leaderboard_refresh',
            replace_existing=True
        )

        scheduler.start()
        logger.info(">>> APScheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler.running:
        scheduler.shutdown()
