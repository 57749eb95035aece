"""
Day finalisation.

Chooses a call time from the day/night workload balance, lays the scenes out
on one clock (day bucket, night bucket, then unspecified) with the fixed
break between consecutive scenes, and attaches the timeline, crew and
equipment summaries and the day metrics.
"""

import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

from .clock import parse_clock
from .config import SchedulerSettings, get_settings
from .models import UNSPECIFIED, Day, Scene, ScheduledScene, TimeBucket, WeightedScene
from .timeline import TimelineBuilder

NIGHT_HEAVY_START = parse_clock("14:00")
DAY_START = parse_clock("06:00")
NIGHT_START = parse_clock("18:00")
DEFAULT_START = parse_clock("09:00")


def choose_start_time(day_total: int, night_total: int, has_day: bool, has_night: bool) -> int:
    """Call time in minutes since midnight"""
    if has_day and has_night:
        return NIGHT_HEAVY_START if night_total > day_total else DAY_START
    if has_day:
        return DAY_START
    if has_night:
        return NIGHT_START
    return DEFAULT_START


def day_efficiency(scenes: Sequence[Scene], duration: int) -> int:
    """0-100 score: location uniformity 50%, workload fit 30%, cast continuity 20%"""
    if not scenes:
        return 0
    if len(scenes) == 1:
        single = scenes[0].actual_shooting_duration
        efficiency = 60
        if 30 <= single <= 60:
            efficiency += 10
        elif single > 60:
            efficiency += 20
        else:
            efficiency -= 10
        return min(100, max(0, efficiency))

    unique_locations = {s.location.name for s in scenes}
    if len(unique_locations) == 1:
        location_efficiency = 1.0
    else:
        location_efficiency = (len(scenes) - len(unique_locations)) / len(scenes)

    if 360 <= duration <= 480:
        time_efficiency = 1.0
    elif 240 <= duration <= 600:
        time_efficiency = 0.7
    else:
        time_efficiency = 0.3

    cast_sets = [set(s.actors) for s in scenes]
    if all(cast == cast_sets[0] for cast in cast_sets):
        actor_efficiency = 1.0
    else:
        flat = [actor for s in scenes for actor in s.actors]
        actor_efficiency = (len(flat) - len(set(flat))) / len(flat) if flat else 0.0

    return int(round((location_efficiency * 0.5 + time_efficiency * 0.3 + actor_efficiency * 0.2) * 100))


def day_optimization_score(scenes: Sequence[Scene]) -> int:
    """Bonus points for repeated locations, actors, time slots and rigs within a day"""
    if not scenes:
        return 0
    score = (len(scenes) - len({s.location.name for s in scenes})) * 1000

    actors = [actor for s in scenes for actor in s.actors]
    score += (len(actors) - len(set(actors))) * 500

    specified = {s.time_of_day for s in scenes if s.bucket != TimeBucket.UNSPECIFIED}
    score += (len(scenes) - len(specified)) * 200

    score += (len(scenes) - len({s.equipment_signature for s in scenes})) * 100

    workload = sum(s.actual_shooting_duration for s in scenes)
    if 360 <= workload <= 480:
        score += 50
    if len(scenes) >= 3 and score > 1000:
        score += 100
    return score


def _department_summary(scenes: Sequence[Scene], attribute: str) -> Dict[str, List[str]]:
    summary: Dict[str, set] = {}
    for scene in scenes:
        for department, categories in getattr(scene, attribute).items():
            for values in categories.values():
                summary.setdefault(department, set()).update(values)
    return {department: sorted(values) for department, values in sorted(summary.items())}


class DayFinalizer:
    """Turns a packed list of scenes into a finished Day"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None,
                 timeline_builder: Optional[TimelineBuilder] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)
        self.timeline_builder = timeline_builder or TimelineBuilder(self.settings, self._logger)

    def finalize(self, day_number: int, items: Sequence[WeightedScene],
                 total_duration: int, max_duration: int) -> Day:
        buckets = {bucket: [w for w in items if w.scene.bucket == bucket] for bucket in TimeBucket}
        day_items = buckets[TimeBucket.DAY]
        night_items = buckets[TimeBucket.NIGHT]

        day_total = sum(w.scene.actual_shooting_duration for w in day_items)
        night_total = sum(w.scene.actual_shooting_duration for w in night_items)
        start = choose_start_time(day_total, night_total, bool(day_items), bool(night_items))

        ordered = day_items + night_items + buckets[TimeBucket.UNSPECIFIED]
        scheduled = self._assign_times(ordered, start)
        scenes = [w.scene for w in ordered]

        day = Day(
            day_number=day_number,
            scenes=scheduled,
            total_duration=total_duration,
            max_duration=max_duration,
            location=self._dominant_location(scenes),
            time_slot=self._dominant_bucket(scenes),
            start=start,
            end=start + total_duration,
            crew_summary=_department_summary(scenes, "crew"),
            equipment_summary=_department_summary(scenes, "equipment"),
            efficiency=day_efficiency(scenes, total_duration),
            optimization_score=day_optimization_score(scenes),
        )
        day.timeline = self.timeline_builder.build(day)
        self._logger.info("Day %d finalised: %d scenes, %d/%d min, call %s",
                          day_number, len(scheduled), total_duration, max_duration,
                          scheduled[0].start_time if scheduled else "-")
        return day

    def rest_day(self, day_number: int) -> Day:
        self._logger.info("Day %d is a rest day", day_number)
        return Day(day_number=day_number, rest_day=True, start=DEFAULT_START, end=DEFAULT_START)

    def _assign_times(self, items: Sequence[WeightedScene], start: int) -> List[ScheduledScene]:
        scheduled = []
        clock = start
        for index, item in enumerate(items):
            pause = self.settings.scene_break if index > 0 else 0
            clock += pause
            end = clock + item.scene.actual_shooting_duration
            scheduled.append(ScheduledScene(scene=item.scene, weight=item.weight,
                                            start=clock, end=end, break_before=pause))
            clock = end
        return scheduled

    @staticmethod
    def _dominant_location(scenes: Sequence[Scene]) -> str:
        if not scenes:
            return UNSPECIFIED
        # Counter.most_common keeps first-seen order on ties
        return Counter(s.location.name for s in scenes).most_common(1)[0][0]

    @staticmethod
    def _dominant_bucket(scenes: Sequence[Scene]) -> str:
        if not scenes:
            return UNSPECIFIED
        return Counter(s.bucket.value for s in scenes).most_common(1)[0][0]
