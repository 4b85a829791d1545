from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
import logging
import os
from pathlib import Path

from habit_tracker.database import engine, get_db, Base
from habit_tracker import models  # Import all models to register them with Base
from habit_tracker.schemas import (
    HabitStatsResponse, MonthTrackerResponse,
    FreezeApplyResponse, FreezeBalanceResponse,
    RewardStatusResponse, RewardClaimResponse,
    LeaderboardResponse
)
from habit_tracker.auth import verify_api_key, get_owner_id
from habit_tracker.clock import get_today
from habit_tracker.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, DEFAULT_LOG_FILE,
    LEADERBOARD_DEFAULT_METRIC, LEADERBOARD_DEFAULT_CAP, DEFAULT_CORS_ORIGINS
)
from habit_tracker.exceptions import (
    HabitTrackerException, ValidationError, ConflictError, ResourceExhaustedError,
    StateError, TransientError, HabitNotFoundException, UserNotFoundException
)
from habit_tracker.services.date_service import DateService
from habit_tracker.services.stats_service import StatsService
from habit_tracker.services.freeze_service import FreezeService
from habit_tracker.services.reward_service import RewardService
from habit_tracker.services.leaderboard_service import LeaderboardService, leaderboard_cache
from habit_tracker.services import scheduler_service
from habit_tracker.services.scheduler_service import start_scheduler, stop_scheduler

LOG_DIR = os.getenv("HABIT_TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("HABIT_TRACKER_LOG_FILE", DEFAULT_LOG_FILE)

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("habit_tracker")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Habit Tracker API",
    description="Habit streaks, streak freezes, daily sign-in rewards and leaderboard",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("HABIT_TRACKER_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    logger.info(f"Habit Tracker API started. Logging to: {log_path}")
    start_scheduler()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Habit Tracker API")
    stop_scheduler()


def to_http_exception(e: HabitTrackerException) -> HTTPException:
    """Map a business or storage error onto an HTTP status"""
    if isinstance(e, (HabitNotFoundException, UserNotFoundException)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(e, ConflictError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(e, (ResourceExhaustedError, StateError)):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(e, TransientError):
        logger.error(f"Storage unavailable: {e}")
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(e))


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "Habit Tracker API", "status": "active"}


# ===== HABIT STATS ENDPOINTS =====

@app.get("/api/habits/stats", response_model=List[HabitStatsResponse], dependencies=[Depends(verify_api_key)])
def get_habit_stats(
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Streaks, monthly completion and today's state for each habit"""
    try:
        return StatsService(db).get_habit_stats(owner_id, today)
    except HabitTrackerException as e:
        raise to_http_exception(e)


@app.get("/api/habits/tracker", response_model=MonthTrackerResponse, dependencies=[Depends(verify_api_key)])
def get_month_tracker(
    year: Optional[int] = None,
    month: Optional[int] = None,
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Monthly tracker grid (defaults to the current month)"""
    try:
        return StatsService(db).get_month_tracker(
            owner_id, year or today.year, month or today.month, today
        )
    except HabitTrackerException as e:
        raise to_http_exception(e)


# ===== FREEZE ENDPOINTS =====

@app.post("/api/habits/{habit_id}/freeze", response_model=FreezeApplyResponse, dependencies=[Depends(verify_api_key)])
def apply_freeze(
    habit_id: int,
    target_date: str,
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Protect a missed day with a streak freeze (format: YYYY-MM-DD)"""
    try:
        target = DateService.parse_date(target_date)
        return FreezeService(db).apply_freeze(owner_id, habit_id, target, today)
    except HabitTrackerException as e:
        raise to_http_exception(e)


@app.get("/api/freezes", response_model=FreezeBalanceResponse, dependencies=[Depends(verify_api_key)])
def get_freezes(
    owner_id: int = Depends(get_owner_id),
    db: Session = Depends(get_db)
):
    """Freeze balance and applied freezes"""
    try:
        return FreezeService(db).get_balance(owner_id)
    except HabitTrackerException as e:
        raise to_http_exception(e)


# ===== DAILY SIGN-IN REWARD ENDPOINTS =====

@app.get("/api/rewards/daily-signin", response_model=RewardStatusResponse, dependencies=[Depends(verify_api_key)])
def get_reward_status(
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Daily sign-in reward status"""
    try:
        return RewardService(db).get_status(owner_id, today)
    except HabitTrackerException as e:
        raise to_http_exception(e)


@app.post("/api/rewards/daily-signin/claim", response_model=RewardClaimResponse, dependencies=[Depends(verify_api_key)])
def claim_reward(
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Claim today's sign-in reward"""
    try:
        return RewardService(db).claim(owner_id, today)
    except HabitTrackerException as e:
        raise to_http_exception(e)


# ===== LEADERBOARD ENDPOINTS =====

@app.get("/api/leaderboard", response_model=LeaderboardResponse, dependencies=[Depends(verify_api_key)])
def get_leaderboard(
    metric: str = LEADERBOARD_DEFAULT_METRIC,
    limit: int = LEADERBOARD_DEFAULT_CAP,
    owner_id: int = Depends(get_owner_id),
    today: date = Depends(get_today),
    db: Session = Depends(get_db)
):
    """Top users by highest streak or average completion, plus the caller's rank"""
    try:
        # Without the refresh job nothing keeps the cache current
        cache = leaderboard_cache if scheduler_service.REFRESH_MINUTES > 0 else None
        return LeaderboardService(db, cache).get_leaderboard(
            metric, limit, owner_id, today
        )
    except HabitTrackerException as e:
        raise to_http_exception(e)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("habit_tracker.main:app", host="0.0.0.0", port=8000, reload=False)
