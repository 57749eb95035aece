"""Expands a finalised Day into chronological activity blocks"""

import logging
from typing import List, Optional, Sequence

from .config import SchedulerSettings, get_settings
from .models import BlockType, Day, ScheduledScene, TimeBucket, TimelineBlock, UNSPECIFIED

GATHER_MINUTES = 0
TRAVEL_MINUTES = 60
BREAKFAST_MINUTES = 40
SETUP_MINUTES = 80
REHEARSAL_MINUTES = 30
LUNCH_MINUTES = 60
LUNCH_AFTER_MINUTES = 4 * 60
DINNER_MINUTES = 60
WRAP_MINUTES = 0


class TimelineBuilder:
    """Builds gather -> travel -> meals/setup -> shooting -> wrap blocks for a Day"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)

    def build(self, day: Day) -> List[TimelineBlock]:
        """Timeline from the Day's scene list and its chosen start time"""
        if day.rest_day:
            return []

        # Unspecified scenes shoot in daylight alongside the day bucket
        daylight = day.scenes_in(TimeBucket.DAY) + day.scenes_in(TimeBucket.UNSPECIFIED)
        night = day.scenes_in(TimeBucket.NIGHT)

        blocks: List[TimelineBlock] = []
        self._add(blocks, day.start, BlockType.GATHER, GATHER_MINUTES, "Crew call")
        if self._needs_travel(day.location):
            self._add(blocks, day.start, BlockType.TRAVEL, TRAVEL_MINUTES, f"Travel to {day.location}")

        if daylight:
            self._add(blocks, day.start, BlockType.BREAKFAST, BREAKFAST_MINUTES)
            self._add(blocks, day.start, BlockType.SETUP, SETUP_MINUTES)
            self._add(blocks, day.start, BlockType.REHEARSAL, REHEARSAL_MINUTES)
            self._add_shooting(blocks, daylight, day.start, allow_lunch=True)

        if night:
            self._add(blocks, day.start, BlockType.DINNER, DINNER_MINUTES)
            self._add_shooting(blocks, night, day.start, allow_lunch=False)

        self._add(blocks, day.start, BlockType.WRAP, WRAP_MINUTES, "Wrap")
        self._logger.debug("Day %d timeline: %d blocks", day.day_number, len(blocks))
        return blocks

    def _needs_travel(self, location: str) -> bool:
        meeting = self.settings.meeting_location.strip()
        return bool(location) and location != UNSPECIFIED and location != meeting

    def _add_shooting(self, blocks: List[TimelineBlock], scenes: Sequence[ScheduledScene],
                      day_start: int, allow_lunch: bool):
        lunch_taken = not allow_lunch
        for index, scheduled in enumerate(scenes):
            self._add(blocks, day_start, BlockType.SHOOTING, scheduled.scene.actual_shooting_duration,
                      f"Scene {scheduled.scene.scene_number}: {scheduled.scene.title}",
                      scene_id=scheduled.scene.id)
            if index == len(scenes) - 1:
                break
            if not lunch_taken and blocks[-1].end - day_start >= LUNCH_AFTER_MINUTES:
                self._add(blocks, day_start, BlockType.LUNCH, LUNCH_MINUTES)
                lunch_taken = True
            else:
                self._add(blocks, day_start, BlockType.BREAK, self.settings.scene_break)

    @staticmethod
    def _add(blocks: List[TimelineBlock], day_start: int, block_type: BlockType,
             duration: int, label: str = "", scene_id: Optional[str] = None):
        """Append a block starting where the previous one ended"""
        start = blocks[-1].end if blocks else day_start
        blocks.append(TimelineBlock(type=block_type, start=start, duration=duration,
                                    label=label or block_type.value.capitalize(), scene_id=scene_id))
