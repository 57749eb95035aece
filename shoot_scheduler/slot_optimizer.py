"""Per-time-slot micro placement used by the breakdown time table"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .clock import format_clock, parse_clock
from .config import SchedulerSettings, get_settings
from .models import Scene, TimeBucket

DAY_WINDOW = (parse_clock("06:00"), parse_clock("18:00"))
LATE_DAY_WINDOW = (parse_clock("07:00"), parse_clock("17:00"))
NIGHT_WINDOW = (parse_clock("18:00"), parse_clock("06:00") + 24 * 60)
UNSPECIFIED_WINDOW = (parse_clock("10:00"), parse_clock("18:00"))
NIGHT_CALL = parse_clock("18:00")
NIGHT_CALL_PREP = 60


@dataclass(frozen=True)
class SlotWindow:
    """Nominal shooting window of one time slot"""
    bucket: TimeBucket
    window_start: int
    window_end: int
    start: int
    late_start: bool = False

    @property
    def available_minutes(self) -> int:
        return self.window_end - self.window_start

    @property
    def label(self) -> str:
        text = f"{self.bucket.value} ({format_clock(self.window_start)}-{format_clock(self.window_end)}"
        if self.late_start:
            text += f", late start {format_clock(self.start)}"
        return text + ")"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "start": format_clock(self.window_start),
            "end": format_clock(self.window_end),
            "optimal_start": format_clock(self.start),
            "available_minutes": self.available_minutes,
            "late_start": self.late_start,
        }


@dataclass
class SlotEntry:
    scene: Scene
    start: int
    end: int
    break_after: int

    def to_dict(self) -> Dict[str, Any]:
        data = self.scene.summary()
        data.update({
            "start_time": format_clock(self.start),
            "end_time": format_clock(self.end),
            "duration": self.scene.actual_shooting_duration,
            "break_after": self.break_after,
        })
        return data


@dataclass
class SlotPlacement:
    window: SlotWindow
    entries: List[SlotEntry] = field(default_factory=list)
    dropped: List[Scene] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "window": self.window.to_dict(),
            "entries": [e.to_dict() for e in self.entries],
            "unplaced": [s.summary() for s in self.dropped],
        }


class SlotOptimizer:
    """Greedy longest-first placement of one time slot's scenes inside its window"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)

    def window_for(self, bucket: TimeBucket, scenes: Sequence[Scene] = (),
                   late_start: bool = False) -> SlotWindow:
        if bucket == TimeBucket.NIGHT:
            return SlotWindow(bucket, NIGHT_WINDOW[0], NIGHT_WINDOW[1], NIGHT_WINDOW[0])
        if bucket == TimeBucket.UNSPECIFIED:
            return SlotWindow(bucket, UNSPECIFIED_WINDOW[0], UNSPECIFIED_WINDOW[1], UNSPECIFIED_WINDOW[0])
        if late_start and scenes:
            # Work back from the night call so the day block ends an hour before it
            workload = sum(s.actual_shooting_duration + self.settings.scene_break for s in scenes)
            workload -= self.settings.scene_break
            start = max(LATE_DAY_WINDOW[0], NIGHT_CALL - workload - NIGHT_CALL_PREP)
            return SlotWindow(bucket, LATE_DAY_WINDOW[0], LATE_DAY_WINDOW[1], start, late_start=True)
        return SlotWindow(bucket, DAY_WINDOW[0], DAY_WINDOW[1], DAY_WINDOW[0])

    def optimize(self, scenes: Sequence[Scene], window: SlotWindow) -> SlotPlacement:
        placement = SlotPlacement(window=window)
        if len(scenes) <= 1:
            for scene in scenes:
                placement.entries.append(SlotEntry(scene=scene, start=window.start,
                                                   end=window.start + scene.actual_shooting_duration,
                                                   break_after=0))
            return placement

        pause = self.settings.scene_break
        remaining = window.available_minutes
        clock = window.start
        longest_first = sorted(scenes, key=lambda s: (-s.actual_shooting_duration, s.scene_number))
        for scene in longest_first:
            needed = scene.actual_shooting_duration + pause
            if needed > remaining:
                placement.dropped.append(scene)
                self._logger.debug("Scene %s (%d min) does not fit the %s window",
                                   scene.scene_number, needed, window.bucket.value)
                continue
            end = clock + scene.actual_shooting_duration
            placement.entries.append(SlotEntry(scene=scene, start=clock, end=end, break_after=pause))
            remaining -= needed
            clock = end + pause
        return placement
