"""
Production breakdown of a shooting day.

Fans every scene of a Day out into the manifests the departments work from
(locations, cast, time slots, equipment, crew, props, costumes, cameras),
computes where and when each location group meets, and builds a per-slot
time table with the slot optimizer.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .clock import format_clock, is_next_day
from .config import SchedulerSettings, get_settings
from .models import Day, Scene, TimeBucket
from .slot_optimizer import NIGHT_CALL, SlotOptimizer

DEFAULT_CAMERA = "Default Camera"
DEFAULT_LENS = "Default Lens"
DEFAULT_CAMERA_SETTINGS = "Default Settings"
DEFAULT_MOVEMENT = "Static"

LUNCH_AFTER = 4 * 60
LUNCH_BREAK = 60
MOVE_BUFFER = 30


@dataclass
class Breakdown:
    day_number: int
    locations: Dict[str, List[Dict[str, Any]]] = field(default_factory=OrderedDict)
    actors: Dict[str, List[Dict[str, Any]]] = field(default_factory=OrderedDict)
    time_slots: Dict[str, List[Dict[str, Any]]] = field(default_factory=OrderedDict)
    equipment: Dict[str, Dict[str, List[Dict[str, Any]]]] = field(default_factory=OrderedDict)
    crew: Dict[str, Dict[str, List[Dict[str, Any]]]] = field(default_factory=OrderedDict)
    props: Dict[str, List[Dict[str, Any]]] = field(default_factory=OrderedDict)
    costumes: Dict[str, List[Dict[str, Any]]] = field(default_factory=OrderedDict)
    cameras: Dict[str, List[Dict[str, Any]]] = field(default_factory=OrderedDict)
    meeting_points: List[Dict[str, Any]] = field(default_factory=list)
    time_table: Dict[str, Dict[str, Any]] = field(default_factory=OrderedDict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_number": self.day_number,
            "locations": self.locations,
            "actors": self.actors,
            "time_slots": self.time_slots,
            "equipment": self.equipment,
            "crew": self.crew,
            "props": self.props,
            "costumes": self.costumes,
            "cameras": self.cameras,
            "meeting_points": self.meeting_points,
            "time_table": self.time_table,
        }


def camera_details(scene: Scene) -> Dict[str, str]:
    """First camera/lens/support of the cinematography rig, with defaults"""
    cinematography = scene.equipment.get("cinematography", {})
    cameras = cinematography.get("cameras", [])
    lenses = cinematography.get("lenses", [])
    filters = cinematography.get("filters", [])
    supports = cinematography.get("supports", [])
    return {
        "model": cameras[0] if cameras else DEFAULT_CAMERA,
        "lens": lenses[0] if lenses else DEFAULT_LENS,
        "settings": ", ".join(filters) if filters else DEFAULT_CAMERA_SETTINGS,
        "movement": supports[0] if supports else DEFAULT_MOVEMENT,
        "angle": scene.camera_angle,
        "work": scene.camera_work,
    }


def scene_costumes(scene: Scene) -> List[str]:
    costumes = list(scene.costumes)
    for item in scene.equipment.get("art", {}).get("costumes", []):
        if item not in costumes:
            costumes.append(item)
    return costumes


class BreakdownGenerator:
    """Derives the per-day production manifest from a finalised Day"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None,
                 slot_optimizer: Optional[SlotOptimizer] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)
        self.slot_optimizer = slot_optimizer or SlotOptimizer(self.settings, self._logger)

    def generate(self, day: Day) -> Breakdown:
        breakdown = Breakdown(day_number=day.day_number)
        scenes = [s.scene for s in day.scenes]
        for scene in scenes:
            self._index_scene(breakdown, scene)
        breakdown.meeting_points = self.meeting_points(day)
        breakdown.time_table = self.time_table(scenes)
        self._logger.info("Breakdown for day %d: %d scenes, %d locations, %d actors",
                          day.day_number, len(scenes), len(breakdown.locations), len(breakdown.actors))
        return breakdown

    def _index_scene(self, breakdown: Breakdown, scene: Scene):
        ref = scene.summary()

        breakdown.locations.setdefault(scene.location.name, []).append(ref)

        for member in scene.cast:
            entries = breakdown.actors.setdefault(member.name, [])
            if all(e["id"] != scene.id for e in entries):
                entries.append(dict(ref, role=member.role))

        breakdown.time_slots.setdefault(scene.time_of_day.value, []).append(ref)

        for department, categories in scene.equipment.items():
            items = breakdown.equipment.setdefault(department, OrderedDict())
            for category_items in categories.values():
                for item in category_items:
                    entries = items.setdefault(item, [])
                    if ref not in entries:
                        entries.append(ref)

        for department, roles in scene.crew.items():
            people = breakdown.crew.setdefault(department, OrderedDict())
            for role, names in roles.items():
                for person in names:
                    people.setdefault(person, []).append(dict(ref, role=role))

        for prop in scene.props:
            breakdown.props.setdefault(prop, []).append(ref)

        for costume in scene_costumes(scene):
            breakdown.costumes.setdefault(costume, []).append(ref)

        camera = camera_details(scene)
        key = f"{camera['model']} - {camera['lens']}"
        breakdown.cameras.setdefault(key, []).append(dict(ref, camera=camera))

    def meeting_points(self, day: Day) -> List[Dict[str, Any]]:
        """One call time per distinct location group, in shooting order"""
        groups: Dict[str, List] = OrderedDict()
        for scheduled in day.scenes:
            groups.setdefault(scheduled.scene.location.group_name, []).append(scheduled)
        has_night = bool(day.scenes_in(TimeBucket.NIGHT))

        points = []
        previous_time = day.start
        previous_duration = 0
        for index, (group, members) in enumerate(groups.items()):
            duration = (sum(m.scene.actual_shooting_duration for m in members)
                        + self.settings.scene_break * (len(members) - 1))
            if index == 0:
                time = day.start
            elif index == 1:
                # After lunch, or later when the first group overruns it
                time = day.start + max(LUNCH_AFTER, previous_duration) + LUNCH_BREAK
            elif index == 2:
                if not has_night:
                    # No night call: this group shoots on from the previous call
                    previous_duration += MOVE_BUFFER + duration
                    continue
                time = max(NIGHT_CALL, previous_time + previous_duration + MOVE_BUFFER)
            else:
                time = previous_time + previous_duration + MOVE_BUFFER

            locations = []
            for member in members:
                if member.scene.location.name not in locations:
                    locations.append(member.scene.location.name)
            points.append({
                "order": len(points) + 1,
                "group": group,
                "locations": locations,
                "time": format_clock(time),
                "next_day": is_next_day(time),
                "scenes": [m.scene.scene_number for m in members],
            })
            previous_time, previous_duration = time, duration
        return points

    def time_table(self, scenes: List[Scene]) -> Dict[str, Dict[str, Any]]:
        """Slot optimizer re-run for each time slot present on the day"""
        by_bucket = {bucket: [s for s in scenes if s.bucket == bucket] for bucket in TimeBucket}
        night_locations = {s.location.name for s in by_bucket[TimeBucket.NIGHT]}

        table = OrderedDict()
        for bucket in (TimeBucket.DAY, TimeBucket.NIGHT, TimeBucket.UNSPECIFIED):
            members = by_bucket[bucket]
            if not members:
                continue
            late_start = bucket == TimeBucket.DAY and any(
                s.location.name in night_locations for s in members)
            window = self.slot_optimizer.window_for(bucket, members, late_start=late_start)
            placement = self.slot_optimizer.optimize(members, window)
            if placement.dropped:
                self._logger.warning("%d %s scene(s) left out of the time table",
                                     len(placement.dropped), bucket.value)
            table[bucket.value] = placement.to_dict()
        return table
