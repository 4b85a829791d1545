"""
Resolution of "today" for incoming requests and background jobs.
The only place that reads the wall clock; services receive the result.
"""
from datetime import date, datetime
import os

from habit_tracker.constants import DEFAULT_DAY_START
from habit_tracker.services.date_service import DateService

DAY_START = os.getenv("HABIT_TRACKER_DAY_START", DEFAULT_DAY_START)


def get_today() -> date:
    """Effective date for the current request"""
    return DateService.get_effective_date(datetime.now(), DAY_START)
