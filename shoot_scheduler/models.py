"""
Core data structures of the shoot scheduler.

Scenes arrive as loose dicts from the scene store and are normalised once
(see scene_parser). Everything else here is a derivation recomputed whenever
a schedule is generated.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

from .clock import format_clock

DEPARTMENTS = ("direction", "production", "cinematography", "lighting", "sound", "art")
UNSPECIFIED = "unspecified"


class TimeBucket(Enum):
    """Coarse lighting context used for sorting and day layout"""
    DAY = "day"
    NIGHT = "night"
    UNSPECIFIED = "unspecified"


class TimeOfDay(Enum):
    """Closed set of normalised time-of-day values"""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"
    DAWN = "dawn"
    UNSPECIFIED = "unspecified"

    @property
    def bucket(self) -> TimeBucket:
        if self in (TimeOfDay.MORNING, TimeOfDay.AFTERNOON):
            return TimeBucket.DAY
        if self in (TimeOfDay.NIGHT, TimeOfDay.DAWN):
            return TimeBucket.NIGHT
        return TimeBucket.UNSPECIFIED


class BlockType(Enum):
    """Activity blocks of a shooting-day timeline"""
    GATHER = "gather"
    TRAVEL = "travel"
    BREAKFAST = "breakfast"
    SETUP = "setup"
    REHEARSAL = "rehearsal"
    SHOOTING = "shooting"
    BREAK = "break"
    LUNCH = "lunch"
    DINNER = "dinner"
    WRAP = "wrap"


@dataclass(frozen=True)
class Location:
    name: str = UNSPECIFIED
    group_name: str = UNSPECIFIED


@dataclass(frozen=True)
class CastMember:
    name: str
    role: str = ""


@dataclass
class Scene:
    """A normalised script unit ready for scheduling"""
    id: str
    scene_number: int
    title: str
    location: Location
    time_of_day: TimeOfDay
    nominal_duration: float
    actual_shooting_duration: int
    description: str = ""
    cast: List[CastMember] = field(default_factory=list)
    equipment: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    crew: Dict[str, Dict[str, List[str]]] = field(default_factory=dict)
    props: List[str] = field(default_factory=list)
    costumes: List[str] = field(default_factory=list)
    camera_angle: str = ""
    camera_work: str = ""
    raw_time_of_day: str = ""

    @property
    def bucket(self) -> TimeBucket:
        return self.time_of_day.bucket

    @property
    def actors(self) -> List[str]:
        """Distinct cast names in appearance order"""
        seen = []
        for member in self.cast:
            if member.name and member.name not in seen:
                seen.append(member.name)
        return seen

    @property
    def equipment_items(self) -> List[str]:
        items = []
        for department in DEPARTMENTS:
            for values in self.equipment.get(department, {}).values():
                items.extend(values)
        return items

    @property
    def equipment_signature(self) -> Tuple[str, ...]:
        """Order-independent identity of the scene's full rig"""
        return tuple(sorted(self.equipment_items))

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "scene_number": self.scene_number,
            "title": self.title,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "scene_number": self.scene_number,
            "title": self.title,
            "description": self.description,
            "location": {"name": self.location.name, "group_name": self.location.group_name},
            "time_of_day": self.time_of_day.value,
            "time_bucket": self.bucket.value,
            "raw_time_of_day": self.raw_time_of_day,
            "cast": [{"role": c.role, "name": c.name} for c in self.cast],
            "nominal_duration": self.nominal_duration,
            "actual_shooting_duration": self.actual_shooting_duration,
            "equipment": self.equipment,
            "crew": self.crew,
            "props": self.props,
            "costumes": self.costumes,
        }


@dataclass(frozen=True)
class SceneWeight:
    """Six weighting terms of a scene against the whole scene set"""
    location: int
    actor: int
    time_slot: int
    equipment: int
    complexity: int
    priority: int

    @property
    def total_weight(self) -> int:
        return (self.location + self.actor + self.time_slot
                + self.equipment + self.complexity + self.priority)

    @property
    def rank_key(self) -> Tuple[int, int, int, int, int, int]:
        """Lexicographic priority: location dominates, then actor, time slot, ..."""
        return (self.location, self.actor, self.time_slot,
                self.equipment, self.complexity, self.priority)

    def to_dict(self) -> Dict[str, int]:
        return {
            "location_weight": self.location,
            "actor_weight": self.actor,
            "time_slot_weight": self.time_slot,
            "equipment_weight": self.equipment,
            "complexity_weight": self.complexity,
            "priority_weight": self.priority,
            "total_weight": self.total_weight,
        }


@dataclass
class WeightedScene:
    scene: Scene
    weight: SceneWeight


@dataclass
class ScheduledScene:
    """A scene placed on a Day with its clock times (minutes since midnight)"""
    scene: Scene
    weight: SceneWeight
    start: int = 0
    end: int = 0
    break_before: int = 0

    @property
    def start_time(self) -> str:
        return format_clock(self.start)

    @property
    def end_time(self) -> str:
        return format_clock(self.end)

    def to_dict(self) -> Dict[str, Any]:
        data = self.scene.to_dict()
        data.update({
            "weight": self.weight.to_dict(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "break_before": self.break_before,
        })
        return data


@dataclass
class TimelineBlock:
    type: BlockType
    start: int
    duration: int
    label: str = ""
    scene_id: Optional[str] = None

    @property
    def end(self) -> int:
        return self.start + self.duration

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "label": self.label or self.type.value,
            "start_time": format_clock(self.start),
            "end_time": format_clock(self.end),
            "duration": self.duration,
            "scene_id": self.scene_id,
        }


@dataclass
class Day:
    """One shooting day (or an explicit rest day with no scenes)"""
    day_number: int
    scenes: List[ScheduledScene] = field(default_factory=list)
    total_duration: int = 0
    max_duration: int = 0
    location: str = UNSPECIFIED
    time_slot: str = UNSPECIFIED
    start: int = 0
    end: int = 0
    timeline: List[TimelineBlock] = field(default_factory=list)
    crew_summary: Dict[str, List[str]] = field(default_factory=dict)
    equipment_summary: Dict[str, List[str]] = field(default_factory=dict)
    efficiency: int = 0
    optimization_score: int = 0
    rest_day: bool = False

    def scenes_in(self, bucket: TimeBucket) -> List[ScheduledScene]:
        return [s for s in self.scenes if s.scene.bucket == bucket]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_number": self.day_number,
            "rest_day": self.rest_day,
            "location": self.location,
            "time_slot": self.time_slot,
            "time_range": {"start": format_clock(self.start), "end": format_clock(self.end)},
            "scenes": [s.to_dict() for s in self.scenes],
            "total_scenes": len(self.scenes),
            "total_duration": self.total_duration,
            "max_duration": self.max_duration,
            "timeline": [b.to_dict() for b in self.timeline],
            "crew": self.crew_summary,
            "equipment": self.equipment_summary,
            "efficiency": self.efficiency,
            "optimization_score": self.optimization_score,
        }


@dataclass
class PendingQueue:
    """FIFO holding scenes that could not be placed when first encountered"""
    day: Deque[WeightedScene] = field(default_factory=deque)
    night: Deque[WeightedScene] = field(default_factory=deque)

    def push(self, item: WeightedScene) -> str:
        key = "night" if item.scene.bucket == TimeBucket.NIGHT else "day"
        getattr(self, key).append(item)
        return key

    def __len__(self) -> int:
        return len(self.day) + len(self.night)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "day": [w.scene.summary() for w in self.day],
            "night": [w.scene.summary() for w in self.night],
        }


@dataclass
class Schedule:
    """Result of one generation run: the days plus everything the caller must surface"""
    days: List[Day] = field(default_factory=list)
    pending: PendingQueue = field(default_factory=PendingQueue)
    messages: List[str] = field(default_factory=list)
    optimization: Dict[str, Any] = field(default_factory=dict)

    @property
    def shooting_days(self) -> List[Day]:
        return [d for d in self.days if not d.rest_day]

    @property
    def total_scenes(self) -> int:
        return sum(len(d.scenes) for d in self.days)

    @property
    def total_duration(self) -> int:
        return sum(d.total_duration for d in self.days)

    @property
    def incomplete(self) -> bool:
        return len(self.pending) > 0

    @property
    def unplaced(self) -> List[Dict[str, Any]]:
        return [w.scene.summary() for w in list(self.pending.day) + list(self.pending.night)]

    def total_location_moves(self) -> int:
        """Crew relocations between consecutive shooting days"""
        moves = 0
        previous = None
        for day in self.shooting_days:
            if previous is not None and day.location != previous:
                moves += 1
            previous = day.location
        return moves

    def to_dict(self) -> Dict[str, Any]:
        return {
            "days": [d.to_dict() for d in self.days],
            "total_days": len(self.days),
            "shooting_days": len(self.shooting_days),
            "rest_days": len(self.days) - len(self.shooting_days),
            "total_scenes": self.total_scenes,
            "total_duration": self.total_duration,
            "total_location_moves": self.total_location_moves(),
            "optimization": self.optimization,
            "incomplete": self.incomplete,
            "unplaced": self.unplaced,
            "pending": self.pending.to_dict(),
            "messages": list(self.messages),
        }
