"""
Custom exceptions for the habit tracker application.
Business-rule outcomes are deterministic and never retried; only
TransientError signals a condition the calling layer may retry.
"""
from datetime import date


class HabitTrackerException(Exception):
    """Base exception for habit tracker application"""
    pass


# ===== VALIDATION =====

class ValidationError(HabitTrackerException):
    """Raised when request input is malformed or references something the caller cannot use"""
    pass


class InvalidDateException(ValidationError):
    """Raised when a date string cannot be parsed"""
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date format: {value}. Use YYYY-MM-DD")


class HabitNotFoundException(ValidationError):
    """Raised when a habit does not exist or is not owned by the caller"""
    def __init__(self, habit_id: int):
        self.habit_id = habit_id
        super().__init__(f"Habit with ID {habit_id} not found")


class UserNotFoundException(ValidationError):
    """Raised when a user does not exist"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class InvalidMetricException(ValidationError):
    """Raised when an unknown leaderboard metric is requested"""
    def __init__(self, metric: str):
        self.metric = metric
        super().__init__(f"Invalid leaderboard metric: {metric}")


class InvalidTokenCountException(ValidationError):
    """Raised when a non-positive number of freeze tokens is awarded"""
    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Freeze token count must be positive, got {count}")


# ===== CONFLICT =====

class ConflictError(HabitTrackerException):
    """Raised when the requested change collides with existing state"""
    pass


class AlreadyProtectedException(ConflictError):
    """Raised when a day already has a completion or a freeze"""
    def __init__(self, habit_id: int, target_date: date):
        self.habit_id = habit_id
        self.target_date = target_date
        super().__init__(
            f"Habit {habit_id} is already completed or frozen on {target_date.isoformat()}"
        )


class AlreadyClaimedTodayException(ConflictError):
    """Raised when the daily sign-in reward was already claimed"""
    def __init__(self, owner_id: int):
        self.owner_id = owner_id
        super().__init__("Already claimed reward today")


# ===== RESOURCE EXHAUSTED =====

class ResourceExhaustedError(HabitTrackerException):
    """Raised when a consumable resource has run out"""
    pass


class InsufficientFreezeTokensException(ResourceExhaustedError):
    """Raised when the owner has no freeze tokens left"""
    def __init__(self, owner_id: int):
        self.owner_id = owner_id
        super().__init__("No streak freezes available")


# ===== STATE =====

class StateError(HabitTrackerException):
    """Raised when the target date is not valid for the habit's timeline"""
    pass


class FutureDateException(StateError):
    """Raised when a freeze targets a day after today"""
    def __init__(self, target_date: date, today: date):
        self.target_date = target_date
        self.today = today
        super().__init__(f"Cannot freeze a future date: {target_date.isoformat()}")


class BeforeHabitStartException(StateError):
    """Raised when a freeze targets a day before the habit started"""
    def __init__(self, target_date: date, start_date: date):
        self.target_date = target_date
        self.start_date = start_date
        super().__init__(
            f"Cannot freeze {target_date.isoformat()}: habit starts on {start_date.isoformat()}"
        )


# ===== TRANSIENT =====

class TransientError(HabitTrackerException):
    """Raised when storage is temporarily unavailable; retry belongs to the caller"""
    pass


class StorageUnavailableException(TransientError):
    """Raised when database operations fail for infrastructure reasons"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Database {operation} failed: {details}")
