"""
Main orchestrator: raw scenes -> weighted, sorted, packed, finalised Schedule.
"""

import logging
import time
from typing import Any, Dict, Iterable, List, Optional

from .breakdown import Breakdown, BreakdownGenerator
from .config import SchedulerSettings, get_settings
from .errors import DayNotFoundError
from .models import Day, Schedule
from .packer import DayPacker
from .scene_parser import SceneParser
from .sorter import LocationTimeSlotSorter
from .weights import WeightCalculator

EMPTY_SCHEDULE_MESSAGE = "No scenes to schedule."
MAX_POSSIBLE_DAY_SCORE = 2000


class ScheduleOptimizer:
    """Location-first greedy scheduler over a project's scenes"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)
        self.parser = SceneParser(self.settings, self._logger)
        self.weights = WeightCalculator(self._logger)
        self.sorter = LocationTimeSlotSorter(self._logger)
        self.packer = DayPacker(self.settings, self._logger)
        self.breakdowns = BreakdownGenerator(self.settings, self._logger)

    def optimize(self, raw_scenes: Iterable[Dict[str, Any]]) -> Schedule:
        """Run the full pipeline; never raises on malformed scene data"""
        start_time = time.perf_counter()
        raw_scenes = list(raw_scenes or [])
        if not raw_scenes:
            self._logger.warning("Scheduler called with no scenes")
            return Schedule(messages=[EMPTY_SCHEDULE_MESSAGE],
                            optimization=self.optimization_summary([]))

        scenes, messages = self.parser.parse_all(raw_scenes)
        weighted = self.weights.calculate_all(scenes)
        ordered = self.sorter.sort(weighted)
        days, pending = self.packer.pack(ordered)

        schedule = Schedule(days=days, pending=pending, messages=messages)
        if schedule.incomplete:
            schedule.messages.append(
                f"{len(pending)} scene(s) could not be placed on any shooting day; "
                f"see 'unplaced'.")
        schedule.optimization = self.optimization_summary(days)

        self._logger.info("Schedule generated: %d days (%d shooting), %d/%d scenes placed in %.3fs",
                          len(days), len(schedule.shooting_days), schedule.total_scenes,
                          len(scenes), time.perf_counter() - start_time)
        return schedule

    def generate_breakdown(self, schedule: Schedule, day_number: int) -> Breakdown:
        return self.breakdowns.generate(find_day(schedule.days, day_number))

    def optimization_summary(self, days: List[Day]) -> Dict[str, Any]:
        """Aggregate day scores into the schedule-level efficiency figure"""
        shooting = [d for d in days if not d.rest_day]
        if not shooting:
            return {"total": 0, "average": 0.0, "efficiency": 0}

        total = sum(d.optimization_score for d in shooting)
        average = total / len(shooting)

        if len(shooting) == 1 and len(shooting[0].scenes) == 1:
            single = shooting[0].scenes[0].scene.actual_shooting_duration
            if 30 <= single <= 60:
                efficiency = 70
            elif single > 60:
                efficiency = 80
            else:
                efficiency = 60
        else:
            efficiency = min(100, int(round(average / MAX_POSSIBLE_DAY_SCORE * 100)))

        return {"total": total, "average": round(average, 2), "efficiency": efficiency}


def find_day(days: List[Day], day_number: int, schedule_id: Optional[str] = None) -> Day:
    for day in days:
        if day.day_number == day_number:
            return day
    raise DayNotFoundError(schedule_id, day_number)
