from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Optional


# Habit stats schemas
class HabitStatsResponse(BaseModel):
    habit_id: int
    title: str
    frequency: str
    current_streak: int = 0
    longest_streak: int = 0
    month_completion: int = Field(default=0, ge=0, le=100)  # Full calendar month
    elapsed_completion: int = Field(default=0, ge=0, le=100)  # Month clipped to today
    is_satisfied_today: bool = False
    frozen_today: bool = False


# Monthly tracker schemas
class TrackerDay(BaseModel):
    date: date
    status: str  # completed, frozen, missed, unscheduled, before_start, future


class HabitMonthTracker(BaseModel):
    habit_id: int
    title: str
    days: List[TrackerDay]
    month_completion: int = Field(default=0, ge=0, le=100)
    elapsed_completion: int = Field(default=0, ge=0, le=100)


class MonthTrackerResponse(BaseModel):
    year: int
    month: int
    month_start: date
    month_end: date
    habits: List[HabitMonthTracker]


# Freeze schemas
class FreezeRecordResponse(BaseModel):
    id: int
    habit_id: int
    date: date
    created_at: datetime

    class Config:
        from_attributes = True


class FreezeApplyResponse(BaseModel):
    habit_id: int
    date: date
    freezes_remaining: int


class FreezeBalanceResponse(BaseModel):
    owner_id: int
    freezes_available: int
    freezes: List[FreezeRecordResponse] = []


class FreezeAwardResponse(BaseModel):
    owner_id: int
    tokens_awarded: int
    freezes_available: int


# Daily sign-in reward schemas
class RewardStatusResponse(BaseModel):
    current_day: int = Field(default=1, ge=1, le=7)  # Day that would be recorded by a claim today
    last_claimed_date: Optional[date] = None
    total_points: int = 0
    freeze_tokens: int = 0  # Tokens earned through the cycle
    can_claim_today: bool = True


class RewardClaimResponse(BaseModel):
    success: bool = True
    current_day: int = Field(ge=1, le=7)
    last_claimed_date: date
    points_earned: int
    freeze_token_earned: int
    total_points: int
    total_freeze_tokens: int


# Leaderboard schemas
class LeaderboardEntry(BaseModel):
    user_id: int
    name: str
    highest_streak: int = 0
    avg_completion: int = 0
    habit_count: int = 0
    rank: int = 0


class LeaderboardResponse(BaseModel):
    metric: str
    top: List[LeaderboardEntry]
    requester_entry: Optional[LeaderboardEntry] = None
