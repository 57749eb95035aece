"""Location-first shoot scheduler: scenes -> shooting days, timelines and breakdowns"""

from .breakdown import Breakdown, BreakdownGenerator
from .config import SchedulerSettings, get_settings
from .duration import DurationEstimator, parse_duration
from .errors import DayNotFoundError, NotFoundError, ScheduleNotFoundError, SchedulerError
from .models import Day, Scene, Schedule, SceneWeight, TimeBucket, TimeOfDay
from .optimizer import ScheduleOptimizer
from .scene_parser import SceneParser, normalize_time_of_day
from .store import ScheduleStore

__version__ = "1.0.0"

__all__ = [
    "Breakdown",
    "BreakdownGenerator",
    "Day",
    "DayNotFoundError",
    "DurationEstimator",
    "NotFoundError",
    "Scene",
    "SceneParser",
    "SceneWeight",
    "Schedule",
    "ScheduleNotFoundError",
    "ScheduleOptimizer",
    "ScheduleStore",
    "SchedulerError",
    "SchedulerSettings",
    "TimeBucket",
    "TimeOfDay",
    "get_settings",
    "normalize_time_of_day",
    "parse_duration",
]
