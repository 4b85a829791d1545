"""
Application-wide constants for the habit tracker.
"""

# Habit frequencies
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_CUSTOM = "custom"
WEEKDAY_FREQUENCIES = (FREQUENCY_WEEKLY, FREQUENCY_CUSTOM)

# Daily sign-in reward cycle
REWARD_POINTS_PER_CLAIM = 10
REWARD_CYCLE_LENGTH = 7
REWARD_FREEZE_DAY = 7  # Entering this day of the cycle earns a freeze token
REWARD_FREEZE_TOKENS_PER_CYCLE = 1
REWARD_CLAIM_MAX_ATTEMPTS = 3  # Optimistic-concurrency retries for a single claim

# Streak freezes
REFERRAL_FREEZE_TOKENS = 5

# Leaderboard
LEADERBOARD_METRIC_STREAK = "streak"
LEADERBOARD_METRIC_COMPLETION = "completion"
LEADERBOARD_METRICS = (LEADERBOARD_METRIC_STREAK, LEADERBOARD_METRIC_COMPLETION)
LEADERBOARD_DEFAULT_METRIC = LEADERBOARD_METRIC_COMPLETION
LEADERBOARD_DEFAULT_CAP = 50
LEADERBOARD_MAX_CAP = 50
LEADERBOARD_DEFAULT_NAME = "User"
DEFAULT_LEADERBOARD_REFRESH_MINUTES = 10

# Monthly tracker cell statuses
DAY_STATUS_COMPLETED = "completed"
DAY_STATUS_FROZEN = "frozen"
DAY_STATUS_MISSED = "missed"
DAY_STATUS_UNSCHEDULED = "unscheduled"
DAY_STATUS_BEFORE_START = "before_start"
DAY_STATUS_FUTURE = "future"

# Percentages
PERCENT_MIN = 0
PERCENT_MAX = 100

# Storage
DEFAULT_DATABASE_URL = "sqlite:///./habit_tracker.db"

# Logging
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/habit-tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "app.log"

# CORS (comma-separated origins)
DEFAULT_CORS_ORIGINS = "http://localhost:5173"

# Day boundary (HH:MM), empty means midnight
DEFAULT_DAY_START = ""
