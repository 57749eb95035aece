"""
Greedy scene-to-day packing.

The canonical policy is dynamic: every seventh day slot is a rest day, each
working day may run 8-12 hours and the week may not exceed 52 hours. Setting
``fixed_daily_cap`` switches to a flat 480-minute day with no weekly budget
and no rest days. Scenes that cannot start a day when they are reached wait
in FIFO day/night queues that are drained after the main pass; whatever is
still queued after draining is returned to the caller as unplaced.

A packer holds only policy; every ``pack()`` call works on its own
``_PackRun`` so one packer can serve concurrent schedule generations.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config import SchedulerSettings, get_settings
from .finalizer import DayFinalizer
from .models import Day, PendingQueue, WeightedScene


@dataclass
class _OpenDay:
    """Accumulators of the day currently being filled"""
    number: int
    cap: int
    items: List[WeightedScene] = field(default_factory=list)
    duration: int = 0
    location: Optional[str] = None
    location_run: int = 0


@dataclass
class _PackRun:
    """State of a single pack() call"""
    open: _OpenDay
    days: List[Day] = field(default_factory=list)
    pending: PendingQueue = field(default_factory=PendingQueue)
    weekly_used: int = 0


class DayPacker:
    """Assigns sorted scenes to days under duration, location, cast-size and rest constraints"""

    def __init__(self, settings: Optional[SchedulerSettings] = None,
                 logger: Optional[logging.Logger] = None,
                 finalizer: Optional[DayFinalizer] = None):
        self.settings = settings or get_settings()
        self._logger = logger or logging.getLogger(__name__)
        self.finalizer = finalizer or DayFinalizer(self.settings, self._logger)

    @property
    def dynamic(self) -> bool:
        return not self.settings.fixed_daily_cap

    # ----------------------------------------------------------------- policy

    def is_rest_day(self, day_number: int) -> bool:
        return self.dynamic and day_number % self.settings.rest_day_every == 0

    def day_cap(self, day_number: int, weekly_used: int) -> int:
        """Maximum minutes for a day opened with ``weekly_used`` already worked this week"""
        s = self.settings
        if not self.dynamic:
            return s.max_daily_duration
        if self.is_rest_day(day_number):
            return 0
        weekday = (day_number - 1) % s.rest_day_every + 1
        remaining_weekly = max(0, s.max_weekly_duration - weekly_used)
        remaining_days = max(1, s.rest_day_every - weekday)
        spread = math.ceil(remaining_weekly / remaining_days)
        return min(s.max_day_duration, max(s.min_day_duration, spread))

    def max_scene_duration(self) -> int:
        """Longest scene any fresh day could ever hold"""
        if not self.dynamic:
            return self.settings.max_daily_duration
        return min(self.day_cap(1, 0), self.settings.max_weekly_duration)

    # ---------------------------------------------------------------- packing

    def pack(self, ordered: Sequence[WeightedScene]) -> Tuple[List[Day], PendingQueue]:
        """Single greedy pass over ``ordered``, then drain the pending queues"""
        run = _PackRun(open=_OpenDay(number=1, cap=self.day_cap(1, 0)))

        for item in ordered:
            self._place_in_main_pass(run, item)

        self._logger.info("Main pass done: %d days, %d day / %d night scenes pending",
                          len(run.days), len(run.pending.day), len(run.pending.night))

        for key in ("day", "night"):
            self._drain(run, key)

        if run.open.items:
            self._close(run)
        while run.days and run.days[-1].rest_day:
            run.days.pop()

        if run.pending:
            self._logger.warning("Schedule incomplete: %d scene(s) could not be placed",
                                 len(run.pending))
        return run.days, run.pending

    def _place_in_main_pass(self, run: _PackRun, item: WeightedScene):
        if self._must_close(run, item):
            self._close(run)

        if self.is_rest_day(run.open.number):
            key = run.pending.push(item)
            self._logger.debug("Scene %s queued (%s): day %d is a rest day",
                               item.scene.scene_number, key, run.open.number)
            self._skip_day(run)
            return

        if not self._fits(run, item):
            key = run.pending.push(item)
            self._logger.debug("Scene %s queued (%s): %d min does not fit a fresh day %d",
                               item.scene.scene_number, key,
                               item.scene.actual_shooting_duration, run.open.number)
            return

        self._append(run, item)

    def _drain(self, run: _PackRun, key: str):
        queue = getattr(run.pending, key)
        limit = self.max_scene_duration()
        while queue:
            item = queue[0]
            if item.scene.actual_shooting_duration > limit:
                self._logger.warning("Stopped draining %s queue at scene %s: %d min exceeds %d min day budget",
                                     key, item.scene.scene_number,
                                     item.scene.actual_shooting_duration, limit)
                return
            self._place_draining(run, item)
            queue.popleft()

    def _place_draining(self, run: _PackRun, item: WeightedScene):
        while True:
            if self._must_close(run, item):
                self._close(run)
            elif self.is_rest_day(run.open.number):
                self._skip_day(run)
            elif self._fits(run, item):
                self._append(run, item)
                return
            else:
                # Empty working day without enough weekly budget left
                self._skip_day(run)

    # ---------------------------------------------------------------- helpers

    def _added_minutes(self, run: _PackRun, item: WeightedScene) -> int:
        pause = self.settings.scene_break if run.open.items else 0
        return item.scene.actual_shooting_duration + pause

    def _fits(self, run: _PackRun, item: WeightedScene) -> bool:
        added = self._added_minutes(run, item)
        if run.open.duration + added > run.open.cap:
            return False
        if self.dynamic and run.weekly_used + added > self.settings.max_weekly_duration:
            return False
        return True

    def _must_close(self, run: _PackRun, item: WeightedScene) -> bool:
        day = run.open
        if not day.items:
            return False
        location_switch = (item.scene.location.name != day.location
                           and day.location_run >= self.settings.location_continuity_limit)
        return (location_switch
                or not self._fits(run, item)
                or len(day.items) >= self.settings.max_scenes_per_day)

    def _append(self, run: _PackRun, item: WeightedScene):
        day = run.open
        added = self._added_minutes(run, item)
        day.items.append(item)
        day.duration += added
        run.weekly_used += added
        location = item.scene.location.name
        day.location_run = day.location_run + 1 if location == day.location else 1
        day.location = location

    def _close(self, run: _PackRun):
        day = run.open
        run.days.append(self.finalizer.finalize(day.number, day.items, day.duration, day.cap))
        self._advance(run, day.number)

    def _skip_day(self, run: _PackRun):
        run.days.append(self.finalizer.rest_day(run.open.number))
        self._advance(run, run.open.number)

    def _advance(self, run: _PackRun, number: int):
        following = number + 1
        if self.dynamic and (following - 1) % self.settings.rest_day_every == 0:
            run.weekly_used = 0
            self._logger.debug("Weekly hours reset at day %d", following)
        run.open = _OpenDay(number=following, cap=self.day_cap(following, run.weekly_used))
